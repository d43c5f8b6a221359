"""
Terrain engine for prairie world generation.

This package provides:
- TerrainComposer: the single height field used by every consumer
- GridManager: vertex grid construction for meshing
- HeightmapAnalyzer: statistics over built grids
"""

from .terrain_composer import TerrainComposer, FieldSample, HeightSample
from .grid_manager import GridManager, TerrainGrid, Vertex, build_terrain_grid
from .heightmap_analyzer import HeightmapAnalyzer
from .feature_generators import BiomeColorizer, BiomeFlags

__all__ = [
    "TerrainComposer", "FieldSample", "HeightSample",
    "GridManager", "TerrainGrid", "Vertex", "build_terrain_grid",
    "HeightmapAnalyzer", "BiomeColorizer", "BiomeFlags"
]
