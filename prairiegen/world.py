"""
World facade.

Bundles one terrain composer with the grid builder and the scatterers
that sample it, and exposes the narrow interface used by rendering and
game logic.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import numpy as np

from .engine import BiomeColorizer, GridManager, HeightmapAnalyzer, TerrainComposer, TerrainGrid
from .engine.grid_manager import build_terrain_grid
from .engine.feature_generators.biomes import BiomeInputs
from .errors import raise_if_errors
from .procgen.parameters import DEFAULT_FIREPLACES, resolve_seed
from .scatter import (
    ClusterProfile, InstanceTransform, PlacementEngine, PlacementResult,
    PropScatterer, SpeciesProfile, VegetationSystem
)

WORLD_KEYS = ("terrain", "palette", "vegetation", "vegetation_palette", "settlements", "fireplaces", "seed")


class World:
    """
    One configured prairie valley.

    Every component shares ``self.composer``, so the mesh, the rocks
    and the vegetation agree on the terrain shape.

    Raises:
        ConfigurationError: for unknown sections or invalid values
    """

    def __init__(self, config: Optional[Mapping[str, Any]] = None):
        config = dict(config or {})
        raise_if_errors([f"Unknown world section: {key}" for key in config if key not in WORLD_KEYS], "world")

        self.config = config
        self.seed = resolve_seed(config.get("seed", 0))

        self.composer = TerrainComposer(config.get("terrain"), config.get("settlements"))
        self.colorizer = BiomeColorizer(config.get("palette"), jitter=self.composer.parameters["color_jitter"])
        self.grid_manager = GridManager(self.composer, self.colorizer)
        self.engine = PlacementEngine(self.composer)
        self.vegetation = VegetationSystem(self.composer, config.get("vegetation"), config.get("vegetation_palette"))
        self.props = PropScatterer(self.composer, config.get("vegetation"), config.get("fireplaces", DEFAULT_FIREPLACES))

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "World":
        with open(path, "r") as f:
            return cls(json.load(f))

    def height_at(self, x: float, z: float) -> float:
        return self.composer.height_at(x, z)

    def is_near_water(self, x: float, z: float, multiplier: Optional[float] = None) -> bool:
        return self.composer.is_near_water(x, z, multiplier)

    def color_at(self, x: float, z: float, jitter_seed: int = 0) -> np.ndarray:
        """Terrain colour at a point, jittered as vertex ``jitter_seed`` would be."""
        field = self.composer.evaluate(np.array([x]), np.array([z]))
        return self.colorizer.colorize(BiomeInputs.from_field(field), np.array([jitter_seed]), self.seed)[0]

    def build_grid(self, size: Optional[float] = None, segments: Optional[int] = None) -> TerrainGrid:
        return self.grid_manager.build(size, segments, seed=self.seed)

    def analyze(self, grid: TerrainGrid) -> Dict[str, Any]:
        analyzer = HeightmapAnalyzer(self.composer.water_level, self.colorizer.rule_names)
        return analyzer.analyze(grid)

    def scatter_species(self, profile: Union[SpeciesProfile, ClusterProfile], seed: int) -> PlacementResult:
        if isinstance(profile, ClusterProfile):
            return self.engine.place_clustered(profile, seed)
        return self.engine.place(profile, seed)

    def scatter_all(self, seed: Optional[int] = None) -> Dict[str, PlacementResult]:
        """Every vegetation and prop population, keyed by name."""

        seed = self.seed if seed is None else resolve_seed(seed)
        results = self.vegetation.scatter(seed)
        results.update(self.props.scatter(seed))
        return results


@lru_cache(maxsize=1)
def default_world() -> World:
    return World()


def height_at(x: float, z: float) -> float:
    """Terrain height of the default world."""
    return default_world().height_at(x, z)


def is_near_water(x: float, z: float, multiplier: Optional[float] = None) -> bool:
    return default_world().is_near_water(x, z, multiplier)


def scatter_species(profile: Union[SpeciesProfile, ClusterProfile], seed: int) -> List[InstanceTransform]:
    """Scatter one profile over the default world's terrain."""
    return list(default_world().scatter_species(profile, seed))


__all__ = [
    "World", "default_world", "height_at", "is_near_water",
    "build_terrain_grid", "scatter_species",
]
