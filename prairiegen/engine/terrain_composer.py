"""
Height field composition.

Runs the feature generators in their fixed order to produce one
deterministic height function of world position. The mesh builder, the
rock scatterer and every vegetation profile sample terrain through this
single implementation.
"""

import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .feature_generators import (
    FeatureGenerator, BaseGenerator, BluffGenerator, RiverGenerator,
    SandbarGenerator, HillGenerator, TrailGenerator
)
from ..procgen.modules.river import RiverModel
from ..procgen.modules.trail import TrailNetwork
from ..procgen.parameters import resolve_settlements, resolve_terrain


@dataclass(frozen=True)
class HeightSample:
    """A single evaluation of the height field."""

    x: float
    z: float
    height: float


@dataclass(frozen=True)
class FieldSample:
    """Heights plus the per-point layers recorded while composing them."""

    height: np.ndarray
    river_factor: np.ndarray
    dist_to_river: np.ndarray
    river_width: np.ndarray
    trail_factor: np.ndarray
    is_bluff: np.ndarray
    is_sandbar: np.ndarray


class TerrainComposer:
    """
    Composes the prairie height field.

    Stage order is fixed because later stages blend toward earlier
    results: rolling land, bluffs, river carving, sandbars, small hills,
    trail flattening.

    Configuration is validated once at construction; evaluation itself
    cannot fail for finite coordinates.
    """

    def __init__(
        self,
        parameters: Optional[Mapping[str, Any]] = None,
        settlements: Optional[Sequence[Any]] = None
    ):
        self.parameters = resolve_terrain(parameters)
        self.settlements = resolve_settlements(settlements)
        self.seed = int(self.parameters["noise_seed"])

        self.river = RiverModel(self.parameters)
        self.trails = TrailNetwork(self.parameters, self.settlements)

        self.stages: List[FeatureGenerator] = [
            BaseGenerator(),
            BluffGenerator(),
            RiverGenerator(self.river),
            SandbarGenerator(),
            HillGenerator(),
            TrailGenerator(self.trails),
        ]

    def evaluate(
        self,
        X: np.ndarray,
        Z: np.ndarray,
        stages: Optional[Sequence[FeatureGenerator]] = None
    ) -> FieldSample:
        """
        Evaluate the field at every (X, Z) pair.

        Args:
            X, Z: Broadcast-compatible coordinate arrays
            stages: Override the stage list (defaults to the full pipeline)

        Returns:
            FieldSample with arrays shaped like ``broadcast(X, Z)``
        """

        X = np.asarray(X, dtype=np.float64)
        Z = np.asarray(Z, dtype=np.float64)
        X, Z = np.broadcast_arrays(X, Z)

        heightmap = np.zeros(X.shape)
        layers: Dict[str, np.ndarray] = {}

        for stage in (self.stages if stages is None else stages):
            heightmap = stage.apply(heightmap, X, Z, self.parameters, self.seed, layers)

        def layer(name, fill):
            return np.broadcast_to(layers.get(name, fill), X.shape)

        return FieldSample(
            height=heightmap,
            river_factor=layer("river_factor", 1.0),
            dist_to_river=layer("dist_to_river", np.inf),
            river_width=layer("river_width", 0.0),
            trail_factor=layer("trail_factor", 0.0),
            is_bluff=layer("is_bluff", False),
            is_sandbar=layer("is_sandbar", False),
        )

    def heights(self, X: np.ndarray, Z: np.ndarray) -> np.ndarray:
        """Vectorised heights only."""
        return self.evaluate(X, Z).height

    def height_at(self, x: float, z: float) -> float:
        """Height at a single point. Total and deterministic."""
        return float(self.evaluate(np.array([x]), np.array([z])).height[0])

    def sample(self, x: float, z: float) -> HeightSample:
        return HeightSample(float(x), float(z), self.height_at(x, z))

    def is_near_water(self, x, z, multiplier: Optional[float] = None):
        return self.river.is_near_water(x, z, multiplier)

    @property
    def water_level(self) -> float:
        return self.parameters["water_level"]
