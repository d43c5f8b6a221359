"""
Biome colouriser.

Maps height and the flags recorded by the height stages to a vertex
colour through an ordered rule table. Rules are evaluated top-down and
the first match wins; a small seeded lightness jitter is applied last.
"""

import numpy as np
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from ...procgen.modules.noise import hash_coord
from ...procgen.modules.color import lerp_color, offset_hsl
from ...procgen.parameters import PALETTE

# Distinguishes jitter hashes from terrain noise drawn with the same seed.
JITTER_SALT = 0x5EED


@dataclass(frozen=True)
class BiomeFlags:
    """Context for colouring a single point."""

    is_sandbar: bool = False
    is_bluff: bool = False
    trail_factor: float = 0.0
    river_factor: float = 1.0


@dataclass(frozen=True)
class BiomeInputs:
    """Per-vertex arrays the rules are evaluated against."""

    height: np.ndarray
    is_sandbar: np.ndarray
    is_bluff: np.ndarray
    trail_factor: np.ndarray
    river_factor: np.ndarray

    @classmethod
    def from_field(cls, field: Any) -> "BiomeInputs":
        """Build inputs from a FieldSample (or anything with the same attributes)."""
        return cls(
            height=np.ravel(field.height),
            is_sandbar=np.ravel(field.is_sandbar),
            is_bluff=np.ravel(field.is_bluff),
            trail_factor=np.ravel(field.trail_factor),
            river_factor=np.ravel(field.river_factor),
        )

    @classmethod
    def from_flags(cls, height: float, flags: Optional[BiomeFlags] = None) -> "BiomeInputs":
        flags = flags or BiomeFlags()
        return cls(
            height=np.array([height], dtype=np.float64),
            is_sandbar=np.array([flags.is_sandbar]),
            is_bluff=np.array([flags.is_bluff]),
            trail_factor=np.array([flags.trail_factor], dtype=np.float64),
            river_factor=np.array([flags.river_factor], dtype=np.float64),
        )

    def subset(self, mask: np.ndarray) -> "BiomeInputs":
        return BiomeInputs(
            height=self.height[mask],
            is_sandbar=self.is_sandbar[mask],
            is_bluff=self.is_bluff[mask],
            trail_factor=self.trail_factor[mask],
            river_factor=self.river_factor[mask],
        )


Palette = Dict[str, np.ndarray]
Predicate = Callable[[BiomeInputs], np.ndarray]
ColorFn = Callable[[BiomeInputs, Palette], np.ndarray]


@dataclass(frozen=True)
class BiomeRule:
    """One row of the colour table: a vectorised predicate and its colour."""

    name: str
    predicate: Predicate
    color: ColorFn


def _solid(key: str) -> ColorFn:
    def color(inputs: BiomeInputs, palette: Palette) -> np.ndarray:
        return np.broadcast_to(palette[key], (len(inputs.height), 3)).copy()
    return color


def _shallow_water(inputs: BiomeInputs, palette: Palette) -> np.ndarray:
    return lerp_color(palette["riverbed"], palette["sandbar"], inputs.height + 1.5)


def _trail(inputs: BiomeInputs, palette: Palette) -> np.ndarray:
    return lerp_color(palette["grass"], palette["trail"], np.minimum(inputs.trail_factor * 1.5, 1.0))


def _prairie(inputs: BiomeInputs, palette: Palette) -> np.ndarray:
    return lerp_color(palette["grass"], palette["dry_grass"], (inputs.height - 1.0) / 3.0)


DEFAULT_RULES = (
    BiomeRule("deep_riverbed", lambda b: b.height < -1.5, _solid("riverbed")),
    BiomeRule("shallow_water", lambda b: (b.height >= -1.5) & (b.height < -0.5), _shallow_water),
    BiomeRule("sandbar", lambda b: b.is_sandbar & (b.height < 0.0), _solid("sandbar")),
    BiomeRule("trail", lambda b: (b.trail_factor > 0.2) & (b.river_factor > 0.9), _trail),
    BiomeRule("bluff", lambda b: b.is_bluff & (b.height > 2.0), _solid("bluff")),
    BiomeRule("lush_grass", lambda b: b.height < 1.0, _solid("grass")),
    BiomeRule("prairie_grass", lambda b: (b.height >= 1.0) & (b.height < 4.0), _prairie),
    BiomeRule("dry_hilltop", lambda b: np.ones(len(b.height), dtype=bool), _solid("dry_grass")),
)


class BiomeColorizer:
    """
    Ordered rule table from height and context flags to vertex colour.

    The last rule must match everything so every vertex is coloured.
    """

    def __init__(
        self,
        palette: Optional[Mapping[str, Any]] = None,
        jitter: float = 0.025,
        rules: Sequence[BiomeRule] = DEFAULT_RULES
    ):
        self.palette = PALETTE.resolve(palette)
        self.jitter = float(jitter)
        self.rules = tuple(rules)

    @property
    def rule_names(self):
        return [rule.name for rule in self.rules]

    def classify(self, inputs: BiomeInputs) -> np.ndarray:
        """Index of the first matching rule for each vertex (-1 if none)."""

        assigned = np.full(len(inputs.height), -1, dtype=np.int64)
        for index, rule in enumerate(self.rules):
            mask = np.asarray(rule.predicate(inputs), dtype=bool) & (assigned < 0)
            assigned[mask] = index

        return assigned

    def base_colors(self, inputs: BiomeInputs, assigned: Optional[np.ndarray] = None) -> np.ndarray:
        """Rule colours before jitter."""

        if assigned is None:
            assigned = self.classify(inputs)

        colors = np.zeros((len(inputs.height), 3))
        for index, rule in enumerate(self.rules):
            mask = assigned == index
            if np.any(mask):
                colors[mask] = rule.color(inputs.subset(mask), self.palette)

        return colors

    def lightness_offsets(self, jitter_seeds: np.ndarray, seed: int = 0) -> np.ndarray:
        """Reproducible lightness offsets in [-jitter, jitter], one per seed."""
        seed = (int(seed) ^ (int(seed) >> 32)) & 0xFFFFFFFF
        return hash_coord(np.asarray(jitter_seeds), seed, JITTER_SALT) * self.jitter

    def colorize(self, inputs: BiomeInputs, jitter_seeds: np.ndarray, seed: int = 0) -> np.ndarray:
        """Colour a batch of vertices; ``jitter_seeds`` is one integer per vertex."""

        colors = self.base_colors(inputs)
        if self.jitter == 0.0:
            return colors

        return offset_hsl(colors, dl=self.lightness_offsets(jitter_seeds, seed))

    def color_at(
        self,
        height: float,
        flags: Optional[BiomeFlags] = None,
        jitter_seed: int = 0,
        seed: int = 0
    ) -> np.ndarray:
        """Colour of a single point as an RGB float array."""

        inputs = BiomeInputs.from_flags(height, flags)
        return self.colorize(inputs, np.array([jitter_seed]), seed)[0]
