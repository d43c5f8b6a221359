"""
River channel generator.

Carves the meandering river into the land and raises sandbars inside
the channel.
"""

import numpy as np
from typing import Dict, Optional

from .base import FeatureGenerator
from ...procgen.modules.noise import fbm, lerp, smoothstep
from ...procgen.modules.river import RiverModel


class RiverGenerator(FeatureGenerator):
    """
    Blends land height toward a riverbed profile near the centreline.

    The bed sits at ``-river_depth`` on the centreline and rises by
    ``river_shallowing`` toward half a width out; land takes over
    through the river factor between half and one and a half widths.
    """

    def __init__(self, river: Optional[RiverModel] = None):
        self.river = river or RiverModel()

    def apply(
        self,
        heightmap: np.ndarray,
        X: np.ndarray, Z: np.ndarray,
        parameters: Dict[str, float],
        seed: int,
        layers: Dict[str, np.ndarray]
    ) -> np.ndarray:
        """Carve the channel and record distance, width and river factor."""

        width = self.river.width(X)
        dist_to_river = self.river.distance_to_river(X, Z)
        river_factor = smoothstep(width * 0.5, width * 1.5, dist_to_river)

        river_depth = (
            -parameters["river_depth"]
            + smoothstep(0.0, width * 0.5, dist_to_river) * parameters["river_shallowing"]
        )

        layers["river_width"] = width
        layers["dist_to_river"] = dist_to_river
        layers["river_factor"] = river_factor

        return lerp(river_depth, heightmap, river_factor)


class SandbarGenerator(FeatureGenerator):
    """
    Raises sandy patches in the outer-middle band of the channel.

    Needs the ``dist_to_river`` and ``river_width`` layers from
    RiverGenerator.
    """

    def apply(
        self,
        heightmap: np.ndarray,
        X: np.ndarray, Z: np.ndarray,
        parameters: Dict[str, float],
        seed: int,
        layers: Dict[str, np.ndarray]
    ) -> np.ndarray:
        """Clamp sandbars up to ``sandbar_floor`` and record ``is_sandbar``."""

        frequency = parameters["sandbar_frequency"]
        sandbar_noise = fbm(X * frequency + parameters["sandbar_offset"], Z * frequency, 2, seed=seed)

        width = layers["river_width"]
        dist_to_river = layers["dist_to_river"]
        is_sandbar = (
            (sandbar_noise > parameters["sandbar_threshold"])
            & (dist_to_river < width * 0.8)
            & (dist_to_river > width * 0.3)
        )
        layers["is_sandbar"] = is_sandbar

        return np.where(is_sandbar, np.maximum(heightmap, parameters["sandbar_floor"]), heightmap)
