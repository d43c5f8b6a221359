"""
Trail generator.

Flattens the cart trail and the settlement paths into shallow corridors
on dry land.
"""

import numpy as np
from typing import Dict, Optional

from .base import FeatureGenerator
from ...procgen.modules.noise import lerp
from ...procgen.modules.trail import TrailNetwork


class TrailGenerator(FeatureGenerator):
    """
    Lowers terrain toward ``max(h * trail_flatten, trail_floor)``.

    Only applies where the river factor exceeds 0.9, so trails never
    cut into the channel.
    """

    def __init__(self, trails: Optional[TrailNetwork] = None):
        self.trails = trails or TrailNetwork()

    def apply(
        self,
        heightmap: np.ndarray,
        X: np.ndarray, Z: np.ndarray,
        parameters: Dict[str, float],
        seed: int,
        layers: Dict[str, np.ndarray]
    ) -> np.ndarray:
        """Flatten trail corridors and record ``trail_factor``."""

        trail_factor = self.trails.factor(X, Z)
        layers["trail_factor"] = trail_factor

        flattened = lerp(
            heightmap,
            np.maximum(heightmap * parameters["trail_flatten"], parameters["trail_floor"]),
            trail_factor
        )
        on_land = layers["river_factor"] > 0.9

        return np.where(on_land, flattened, heightmap)
