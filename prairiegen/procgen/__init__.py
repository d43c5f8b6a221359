"""
Procedural primitives and configuration for prairie world generation.

This package provides:
- Noise, river, trail and colour primitives (``modules``)
- Parameter specifications with defaults and validation
"""

from .parameters import (
    ParameterSpec, ColorSpec, parse_color,
    TERRAIN_PARAMETERS, VEGETATION_PARAMETERS, PALETTE,
    DEFAULT_SETTLEMENTS, SETTLEMENT_FOOTPRINT, DEFAULT_FIREPLACES, FIREPLACE_MIN_HEIGHT,
    VEGETATION_PALETTE,
    resolve_terrain, resolve_settlements, resolve_seed
)
from .modules.noise import fbm, smoothstep, lerp
from .modules.river import RiverModel
from .modules.trail import TrailNetwork

__all__ = [
    "ParameterSpec",
    "ColorSpec",
    "parse_color",
    "TERRAIN_PARAMETERS",
    "VEGETATION_PARAMETERS",
    "PALETTE",
    "DEFAULT_SETTLEMENTS",
    "SETTLEMENT_FOOTPRINT",
    "DEFAULT_FIREPLACES",
    "FIREPLACE_MIN_HEIGHT",
    "VEGETATION_PALETTE",
    "resolve_terrain",
    "resolve_settlements",
    "resolve_seed",
    "fbm",
    "smoothstep",
    "lerp",
    "RiverModel",
    "TrailNetwork",
]
