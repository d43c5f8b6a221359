"""
Instance scattering over the prairie terrain.

This package provides:
- Scatter profiles and the InstanceTransform record
- PlacementEngine: uniform, riverbank, clustered and fixed placement
- VegetationSystem / PropScatterer: the valley's populations
"""

from .profiles import (
    SpeciesProfile, ClusterProfile, ColorVariation, InstanceTransform, PlacementResult
)
from .placement import PlacementEngine, as_random_state, instance_matrices
from .predicates import outside_settlements, riverbank_or_high_ground
from .vegetation import VegetationSystem, PropScatterer

__all__ = [
    "SpeciesProfile", "ClusterProfile", "ColorVariation", "InstanceTransform", "PlacementResult",
    "PlacementEngine", "as_random_state", "instance_matrices",
    "outside_settlements", "riverbank_or_high_ground",
    "VegetationSystem", "PropScatterer",
]
