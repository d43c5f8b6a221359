"""
Named acceptance predicates for scatter profiles.

Each factory returns a callable ``(x, z, height, composer) -> bool
array`` evaluated on a whole batch of candidates.
"""

import numpy as np
from typing import Sequence, Tuple

from ..procgen.parameters import SETTLEMENT_FOOTPRINT


def riverbank_or_high_ground(band_min: float = 0.5, band_max: float = 2.0, high_ground: float = 3.0):
    """Accept the open bank band ``(band_min * w, band_max * w)`` or heights above ``high_ground``."""

    def predicate(x, z, height, composer):
        river = composer.river
        width = river.width(x)
        dist = river.distance_to_river(x, z)
        on_bank = (dist > width * band_min) & (dist < width * band_max)
        return on_bank | (height > high_ground)

    predicate.__name__ = "riverbank_or_high_ground"
    return predicate


def outside_settlements(
    settlements: Sequence[Tuple[float, float, float]],
    clearance: float = 8.0,
    footprint: Tuple[float, float] = SETTLEMENT_FOOTPRINT
):
    """Reject points inside any settlement footprint grown by ``clearance``."""

    half_width = footprint[0] / 2.0 + clearance
    half_depth = footprint[1] / 2.0 + clearance

    def predicate(x, z, height, composer):
        clear = np.ones(np.shape(x), dtype=bool)
        for sx, sz, rotation in settlements:
            # Offset in the settlement's local frame
            dx, dz = x - sx, z - sz
            cos_r, sin_r = np.cos(rotation), np.sin(rotation)
            local_x = dx * cos_r - dz * sin_r
            local_z = dx * sin_r + dz * cos_r
            inside = (np.abs(local_x) <= half_width) & (np.abs(local_z) <= half_depth)
            clear &= ~inside
        return clear

    predicate.__name__ = "outside_settlements"
    return predicate
