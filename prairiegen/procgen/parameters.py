"""
Parameter specification and validation for world generation.

This module defines:
- ParameterSpec: numeric parameters with ranges and defaults
- ColorSpec: palette entries parsed into RGB float triples
- The default parameter tables for terrain and vegetation
"""

import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..errors import raise_if_errors


class ParameterSpec:
    """
    Specification for numeric parameters with validation.

    Each parameter has:
    - min_val: Minimum allowed value
    - max_val: Maximum allowed value
    - default: Default value if not specified

    Integer parameters are listed in ``integers``; a float with a
    fractional part is rejected for them.
    """

    def __init__(
        self,
        params: Dict[str, Tuple[float, float, float]],
        integers: Sequence[str] = (),
        name: str = "parameters"
    ):
        """
        Initialize parameter specification.

        Args:
            params: Dict mapping param_name -> (min_val, max_val, default)
            integers: Names of parameters that must be whole numbers
            name: Label used in error messages
        """
        self.params = params
        self.integers = set(integers)
        self.name = name

    def check(self, values: Mapping[str, Any]) -> List[str]:
        """Return every problem with ``values``; an empty list means valid."""

        errors = []

        for param_name in values:
            if param_name not in self.params:
                errors.append(f"Unknown {self.name} parameter: {param_name}")

        for param_name, (min_val, max_val, _) in self.params.items():
            if param_name not in values:
                continue

            value = values[param_name]
            if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
                errors.append(f"{param_name} must be a number, got {type(value).__name__}")
                continue
            if not math.isfinite(value):
                errors.append(f"{param_name} must be finite, got {value}")
                continue
            if param_name in self.integers and float(value) != int(value):
                errors.append(f"{param_name} must be an integer, got {value}")
                continue
            if not (min_val <= value <= max_val):
                errors.append(f"{param_name} = {value} is outside [{min_val}, {max_val}]")

        return errors

    def validate(self, values: Mapping[str, Any]) -> bool:
        """Check if every supplied parameter is known and in range."""
        return not self.check(values)

    def resolve(self, values: Optional[Mapping[str, Any]] = None) -> Dict[str, float]:
        """
        Validate overrides and fill in defaults.

        Raises:
            ConfigurationError: if any supplied value is unknown or out of range
        """

        values = dict(values or {})
        raise_if_errors(self.check(values), self.name)

        result = {}
        for param_name, (_, _, default) in self.params.items():
            value = values.get(param_name, default)
            if param_name in self.integers:
                result[param_name] = int(value)
            else:
                result[param_name] = float(value)

        return result

    def get_param_names(self) -> List[str]:
        """Get list of parameter names."""
        return list(self.params.keys())

    def get_defaults(self) -> Dict[str, float]:
        """Get the default value of every parameter."""
        return {name: default for name, (_, _, default) in self.params.items()}

    def get_param_ranges(self) -> Dict[str, Tuple[float, float]]:
        """Get parameter ranges (min, max) for each parameter."""
        return {name: (min_val, max_val) for name, (min_val, max_val, _) in self.params.items()}


class ColorSpec:
    """
    Palette specification: named colours with defaults.

    Accepts ``0xRRGGBB`` integers, ``"#rrggbb"`` strings and
    ``(r, g, b)`` float triples in [0, 1].
    """

    def __init__(self, colors: Dict[str, int], name: str = "palette"):
        self.colors = colors
        self.name = name

    def check(self, values: Mapping[str, Any]) -> List[str]:
        errors = []
        for color_name, value in values.items():
            if color_name not in self.colors:
                errors.append(f"Unknown {self.name} color: {color_name}")
                continue
            try:
                parse_color(value)
            except ValueError as e:
                errors.append(f"{color_name}: {e}")
        return errors

    def resolve(self, values: Optional[Mapping[str, Any]] = None) -> Dict[str, np.ndarray]:
        """Parse overrides and defaults into RGB float arrays."""

        values = dict(values or {})
        raise_if_errors(self.check(values), self.name)

        return {
            color_name: parse_color(values.get(color_name, default))
            for color_name, default in self.colors.items()
        }


def parse_color(value: Any) -> np.ndarray:
    """
    Parse a colour into an RGB float array in [0, 1].

    Raises:
        ValueError: for anything that is not a recognised colour form
    """

    if isinstance(value, bool):
        raise ValueError(f"malformed color {value!r}")

    if isinstance(value, (int, np.integer)):
        if not 0 <= value <= 0xFFFFFF:
            raise ValueError(f"color integer {value:#x} is outside 0x000000-0xFFFFFF")
        return np.array([(value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF], dtype=np.float64) / 255.0

    if isinstance(value, str):
        text = value.strip()
        if text.startswith("#"):
            text = text[1:]
        elif text.lower().startswith("0x"):
            text = text[2:]
        if len(text) != 6:
            raise ValueError(f"malformed color string {value!r}")
        try:
            return parse_color(int(text, 16))
        except ValueError:
            raise ValueError(f"malformed color string {value!r}") from None

    if isinstance(value, (list, tuple, np.ndarray)):
        rgb = np.asarray(value, dtype=np.float64) if len(value) == 3 else None
        if rgb is None or not np.all(np.isfinite(rgb)) or np.any(rgb < 0.0) or np.any(rgb > 1.0):
            raise ValueError(f"color triple {tuple(value)!r} must be three floats in [0, 1]")
        return rgb

    raise ValueError(f"malformed color {value!r}")


# Terrain shape parameters. Defaults reproduce the prairie river valley.
TERRAIN_PARAMETERS = ParameterSpec({
    # grid
    "size": (1e-6, 1e5, 400.0),
    "segments": (1, 4096, 200),
    "noise_seed": (0, 2**31 - 1, 0),

    # base rolling terrain
    "hills_frequency": (0.0, 10.0, 0.015),
    "hills_amplitude": (0.0, 1000.0, 6.0),
    "hills_octaves": (1, 8, 4),
    "detail_frequency": (0.0, 10.0, 0.05),
    "detail_amplitude": (0.0, 1000.0, 1.5),
    "detail_octaves": (1, 8, 3),
    "fine_frequency": (0.0, 10.0, 0.15),
    "fine_amplitude": (0.0, 1000.0, 0.3),
    "fine_octaves": (1, 8, 2),

    # bluffs
    "bluff_frequency_x": (0.0, 10.0, 0.008),
    "bluff_frequency_z": (0.0, 10.0, 0.01),
    "bluff_threshold": (-1.0, 1.0, 0.3),
    "bluff_band_min": (0.0, 1e5, 10.0),
    "bluff_band_max": (0.0, 1e5, 25.0),
    "bluff_strength": (0.0, 1000.0, 4.0),

    # river
    "meander_frequency_1": (0.0, 10.0, 0.03),
    "meander_amplitude_1": (0.0, 1e4, 12.0),
    "meander_frequency_2": (0.0, 10.0, 0.01),
    "meander_amplitude_2": (0.0, 1e4, 5.0),
    "river_base_width": (1e-3, 1e4, 8.0),
    "river_width_variation": (0.0, 1e4, 4.0),
    "river_width_frequency": (0.0, 10.0, 0.02),
    "river_depth": (0.0, 1000.0, 2.5),
    "river_shallowing": (0.0, 1000.0, 1.5),

    # sandbars
    "sandbar_offset": (-1e5, 1e5, 100.0),
    "sandbar_frequency": (0.0, 10.0, 0.05),
    "sandbar_threshold": (-1.0, 1.0, 0.4),
    "sandbar_floor": (-1000.0, 1000.0, -0.5),

    # small hills
    "hill_offset": (-1e5, 1e5, 50.0),
    "hill_frequency": (0.0, 10.0, 0.03),
    "hill_threshold": (-1.0, 1.0, 0.5),
    "hill_strength": (0.0, 1000.0, 6.0),

    # cart trail and settlement paths
    "trail_frequency_1": (0.0, 10.0, 0.04),
    "trail_amplitude_1": (0.0, 1e4, 25.0),
    "trail_frequency_2": (0.0, 10.0, 0.02),
    "trail_amplitude_2": (0.0, 1e4, 10.0),
    "trail_offset": (-1e5, 1e5, 25.0),
    "trail_inner": (0.0, 1000.0, 0.5),
    "trail_outer": (0.0, 1000.0, 3.0),
    "path_width": (1e-3, 1000.0, 3.0),
    "path_end_margin": (0.0, 1000.0, 2.0),
    "trail_flatten": (0.0, 1.0, 0.7),
    "trail_floor": (-1000.0, 1000.0, 0.2),

    # consumers
    "water_level": (-1000.0, 1000.0, -0.8),
    "color_jitter": (0.0, 0.5, 0.025),
    "near_water_multiplier": (1e-6, 100.0, 2.0),
}, integers=("segments", "noise_seed", "hills_octaves", "detail_octaves", "fine_octaves"),
   name="terrain")


VEGETATION_PARAMETERS = ParameterSpec({
    "grass_density": (0, 10_000_000, 50000),
    "tall_grass_ratio": (0.0, 10.0, 0.15),
    "reed_cluster_count": (0, 100_000, 30),
    "tree_count": (0, 1_000_000, 80),
    "bush_count": (0, 1_000_000, 40),
    "rock_count": (0, 1_000_000, 100),
    "vegetation_water_multiplier": (1e-6, 100.0, 2.5),
    "settlement_clearance": (0.0, 1000.0, 8.0),
}, integers=("grass_density", "reed_cluster_count", "tree_count", "bush_count", "rock_count"),
   name="vegetation")


PALETTE = ColorSpec({
    "grass": 0x3A5F0B,
    "dry_grass": 0x8F7E45,
    "riverbed": 0x3D3D3D,
    "sandbar": 0xC4A87C,
    "bluff": 0x7A6B5A,
    "trail": 0x8B4513,
})


# Cabin platforms as (x, z, rotation); paths run from each to the cart trail.
DEFAULT_SETTLEMENTS = (
    (-60.0, 50.0, 0.0),
    (-20.0, -70.0, math.pi),
    (30.0, 70.0, 0.0),
    (80.0, -70.0, math.pi),
    (130.0, 55.0, -0.2),
)

SETTLEMENT_FOOTPRINT = (12.0, 10.0)


def resolve_terrain(values: Optional[Mapping[str, Any]] = None) -> Dict[str, float]:
    """Resolve terrain parameters, including cross-parameter checks."""

    parameters = TERRAIN_PARAMETERS.resolve(values)

    errors = []
    if parameters["river_width_variation"] >= parameters["river_base_width"]:
        errors.append(
            f"river_width_variation ({parameters['river_width_variation']}) must be "
            f"smaller than river_base_width ({parameters['river_base_width']})"
        )
    if parameters["bluff_band_min"] > parameters["bluff_band_max"]:
        errors.append("bluff_band_min must not exceed bluff_band_max")
    raise_if_errors(errors, "terrain")

    return parameters


def resolve_settlements(settlements: Optional[Sequence[Any]] = None) -> Tuple[Tuple[float, float, float], ...]:
    """Normalise settlement positions to (x, z, rotation) tuples."""

    if settlements is None:
        return DEFAULT_SETTLEMENTS

    errors = []
    result = []
    for i, entry in enumerate(settlements):
        if isinstance(entry, Mapping):
            entry = (entry.get("x"), entry.get("z"), entry.get("rot", 0.0))
        try:
            values = tuple(float(v) for v in entry)
        except (TypeError, ValueError):
            errors.append(f"settlements[{i}] must be (x, z[, rotation]), got {entry!r}")
            continue
        if len(values) == 2:
            values = values + (0.0,)
        if len(values) != 3 or not all(math.isfinite(v) for v in values):
            errors.append(f"settlements[{i}] must be (x, z[, rotation]), got {entry!r}")
            continue
        result.append(values)

    raise_if_errors(errors, "settlements")
    return tuple(result)


def resolve_seed(seed: Any) -> int:
    """Check a world seed: an integer in [0, 2**64)."""

    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)) or not 0 <= seed < 2**64:
        raise_if_errors([f"seed must be an integer in [0, 2**64), got {seed!r}"], "seed")
    return int(seed)

# Campfires along the trail, anchored no lower than FIREPLACE_MIN_HEIGHT.
DEFAULT_FIREPLACES = (
    (-40.0, 34.0),
    (5.0, 32.0),
    (55.0, 38.0),
    (105.0, 32.0),
    (-25.0, -35.0),
    (75.0, -20.0),
)

FIREPLACE_MIN_HEIGHT = 0.5


# Base tints of the instanced vegetation.
VEGETATION_PALETTE = ColorSpec({
    "grass": 0x3A5F0B,
    "tall_grass": 0x4A6F1B,
    "reeds": 0x5A7A4A,
}, name="vegetation palette")
