"""
prairiegen: procedural prairie river valleys.

A deterministic height field with biome colouring, a terrain grid
builder for meshing, and a seeded placement engine that scatters
vegetation and props over the same terrain.
"""

from .errors import ConfigurationError
from .engine import TerrainComposer, GridManager, TerrainGrid, HeightmapAnalyzer, BiomeColorizer, BiomeFlags
from .scatter import (
    SpeciesProfile, ClusterProfile, InstanceTransform, PlacementResult,
    PlacementEngine, VegetationSystem, PropScatterer, instance_matrices
)
from .world import World, height_at, is_near_water, build_terrain_grid, scatter_species

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "TerrainComposer", "GridManager", "TerrainGrid", "HeightmapAnalyzer", "BiomeColorizer", "BiomeFlags",
    "SpeciesProfile", "ClusterProfile", "InstanceTransform", "PlacementResult",
    "PlacementEngine", "VegetationSystem", "PropScatterer", "instance_matrices",
    "World", "height_at", "is_near_water", "build_terrain_grid", "scatter_species",
]
