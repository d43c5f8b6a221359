"""
Scatter profiles and placement records.

A SpeciesProfile describes one population: how many instances to try
for, where candidates are drawn, which terrain they accept, and how
each accepted instance is rotated, scaled and tinted.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import ConfigurationError, raise_if_errors
from ..procgen.parameters import parse_color

# Custom acceptance test: (x, z, height, composer) -> bool array
Predicate = Callable[..., np.ndarray]

WATER_RULES = ("none", "exclude", "require")
SAMPLING_MODES = ("uniform", "riverbank")
ROTATION_MODES = ("y", "xyz", "fixed")


@dataclass(frozen=True)
class ColorVariation:
    """
    Per-instance tint: HSL offsets drawn uniformly in ``[-x, x]``.

    ``wet_saturation`` is added to the saturation of instances near
    water, using ``wet_multiplier`` (or the river default) as the
    proximity test.
    """

    base: Any
    hue: float = 0.0
    saturation: float = 0.0
    lightness: float = 0.0
    wet_saturation: float = 0.0
    wet_multiplier: Optional[float] = None

    def base_rgb(self) -> np.ndarray:
        return parse_color(self.base)


@dataclass(frozen=True)
class SpeciesProfile:
    """
    Configuration of one scattered population.

    Heights are inclusive bounds on the terrain height at the candidate.
    Attempts are bounded by ``count * oversample``.
    """

    name: str
    count: int
    h_min: float = -math.inf
    h_max: float = math.inf
    water: str = "none"
    water_multiplier: Optional[float] = None
    scale_min: float = 1.0
    scale_max: float = 1.0
    scale_axes: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    y_stretch: Optional[Tuple[float, float]] = None
    rotation: str = "y"
    rotation_range: float = 2.0 * math.pi
    oversample: int = 1
    extent: float = 360.0
    sampling: str = "uniform"
    bank_min: float = 1.0
    bank_max: float = 2.5
    sink: float = 0.0
    predicates: Tuple[Predicate, ...] = ()
    color: Optional[ColorVariation] = None

    def check(self) -> List[str]:
        errors = []

        if isinstance(self.count, bool) or not isinstance(self.count, (int, np.integer)) or self.count < 0:
            errors.append(f"count must be a non-negative integer, got {self.count!r}")
        if isinstance(self.oversample, bool) or not isinstance(self.oversample, (int, np.integer)) or self.oversample < 1:
            errors.append(f"oversample must be a positive integer, got {self.oversample!r}")
        if math.isnan(self.h_min) or math.isnan(self.h_max) or self.h_min > self.h_max:
            errors.append(f"height range [{self.h_min}, {self.h_max}] is empty")
        if self.water not in WATER_RULES:
            errors.append(f"water must be one of {WATER_RULES}, got {self.water!r}")
        if self.water_multiplier is not None and not self.water_multiplier > 0:
            errors.append(f"water_multiplier must be positive, got {self.water_multiplier}")
        if not 0 < self.scale_min <= self.scale_max:
            errors.append(f"scale range [{self.scale_min}, {self.scale_max}] must be positive and ordered")
        if len(self.scale_axes) != 3 or any(axis <= 0 for axis in self.scale_axes):
            errors.append(f"scale_axes must be three positive numbers, got {self.scale_axes!r}")
        if self.y_stretch is not None and not 0 < self.y_stretch[0] <= self.y_stretch[1]:
            errors.append(f"y_stretch {self.y_stretch!r} must be positive and ordered")
        if self.rotation not in ROTATION_MODES:
            errors.append(f"rotation must be one of {ROTATION_MODES}, got {self.rotation!r}")
        if not self.extent > 0 or not math.isfinite(self.extent):
            errors.append(f"extent must be a positive number, got {self.extent}")
        if self.sampling not in SAMPLING_MODES:
            errors.append(f"sampling must be one of {SAMPLING_MODES}, got {self.sampling!r}")
        if self.sampling == "riverbank" and not 0 <= self.bank_min <= self.bank_max:
            errors.append(f"bank band [{self.bank_min}, {self.bank_max}] must be non-negative and ordered")
        if self.color is not None:
            try:
                self.color.base_rgb()
            except ValueError as e:
                errors.append(f"color: {e}")

        return [f"{self.name}: {error}" for error in errors]

    def validate(self) -> "SpeciesProfile":
        """Return self, raising ConfigurationError if anything is invalid."""
        raise_if_errors(self.check(), "species profile")
        return self

    @property
    def attempts(self) -> int:
        return int(self.count) * int(self.oversample)


@dataclass(frozen=True)
class ClusterProfile:
    """
    Two-level placement: riverbank anchors, then a disc around each.

    ``member`` supplies the per-instance acceptance and appearance; its
    ``count`` is the overall cap across all clusters.
    """

    member: SpeciesProfile
    cluster_count: int
    members_min: int = 8
    members_max: int = 19
    radius: float = 2.0
    anchor_extent: float = 300.0
    bank_min: float = 0.8
    bank_max: float = 1.4

    @property
    def name(self) -> str:
        return self.member.name

    def check(self) -> List[str]:
        errors = list(self.member.check())
        if isinstance(self.cluster_count, bool) or not isinstance(self.cluster_count, (int, np.integer)) or self.cluster_count < 0:
            errors.append(f"{self.name}: cluster_count must be a non-negative integer, got {self.cluster_count!r}")
        members = (self.members_min, self.members_max)
        if any(isinstance(m, bool) or not isinstance(m, (int, np.integer)) for m in members):
            errors.append(f"{self.name}: members range {members!r} must be integers")
        elif not 0 <= self.members_min <= self.members_max:
            errors.append(f"{self.name}: members range [{self.members_min}, {self.members_max}] must be ordered")
        if not self.radius > 0:
            errors.append(f"{self.name}: radius must be positive, got {self.radius}")
        if not self.anchor_extent > 0:
            errors.append(f"{self.name}: anchor_extent must be positive, got {self.anchor_extent}")
        if not 0 <= self.bank_min <= self.bank_max:
            errors.append(f"{self.name}: bank band [{self.bank_min}, {self.bank_max}] must be ordered")
        return errors

    def validate(self) -> "ClusterProfile":
        raise_if_errors(self.check(), "cluster profile")
        return self


@dataclass(frozen=True)
class InstanceTransform:
    """One accepted placement, ready for an instance buffer."""

    position: Tuple[float, float, float]
    rotation: Tuple[float, float, float]
    scale: Tuple[float, float, float]
    color: Optional[Tuple[float, float, float]] = None

    @property
    def rotation_y(self) -> float:
        return self.rotation[1]


@dataclass
class PlacementResult:
    """
    Accepted instances plus the bookkeeping of the run.

    Iterates and indexes like the list of InstanceTransform it holds.
    """

    name: str
    requested: int
    attempts: int
    instances: List[InstanceTransform] = field(default_factory=list)

    def __getitem__(self, index):
        return self.instances[index]

    def __len__(self) -> int:
        return len(self.instances)

    def __iter__(self):
        return iter(self.instances)

    @property
    def placed(self) -> int:
        return len(self.instances)

    @property
    def underfilled(self) -> bool:
        return self.placed < self.requested

    def summary(self) -> dict:
        return {
            "requested": self.requested,
            "placed": self.placed,
            "attempts": self.attempts,
            "underfilled": self.underfilled,
        }


def validate_profiles(profiles: Sequence[Any]) -> None:
    """Check a batch of profiles, reporting every problem at once."""

    errors = []
    for profile in profiles:
        errors.extend(profile.check())
    if errors:
        raise ConfigurationError(errors, "scatter profiles")
