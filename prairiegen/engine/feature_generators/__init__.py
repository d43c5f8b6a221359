"""
Height field stages and the biome colouriser.

Each stage adds one landform to the prairie valley and records the
flags later stages and the colouriser depend on.
"""

from .base import FeatureGenerator, BaseGenerator
from .bluffs import BluffGenerator
from .rivers import RiverGenerator, SandbarGenerator
from .hills import HillGenerator
from .trails import TrailGenerator
from .biomes import BiomeColorizer, BiomeFlags, BiomeInputs, BiomeRule, DEFAULT_RULES

__all__ = [
    "FeatureGenerator", "BaseGenerator", "BluffGenerator",
    "RiverGenerator", "SandbarGenerator", "HillGenerator", "TrailGenerator",
    "BiomeColorizer", "BiomeFlags", "BiomeInputs", "BiomeRule", "DEFAULT_RULES"
]
