"""
Bluff generator.

Raises occasional steep cutbanks in a band on either side of the valley
floor and flags them so the colouriser can expose bare earth.
"""

import numpy as np
from typing import Dict

from .base import FeatureGenerator
from ...procgen.modules.noise import fbm


class BluffGenerator(FeatureGenerator):
    """Adds ``|noise| * strength`` where a low-frequency gate fires."""

    def apply(
        self,
        heightmap: np.ndarray,
        X: np.ndarray, Z: np.ndarray,
        parameters: Dict[str, float],
        seed: int,
        layers: Dict[str, np.ndarray]
    ) -> np.ndarray:
        """Lift bluff zones and record the ``is_bluff`` layer."""

        bluff_noise = fbm(
            X * parameters["bluff_frequency_x"],
            Z * parameters["bluff_frequency_z"],
            2, seed=seed
        )

        abs_z = np.abs(Z)
        is_bluff = (
            (bluff_noise > parameters["bluff_threshold"])
            & (abs_z > parameters["bluff_band_min"])
            & (abs_z < parameters["bluff_band_max"])
        )
        layers["is_bluff"] = is_bluff

        return np.where(is_bluff, heightmap + np.abs(bluff_noise) * parameters["bluff_strength"], heightmap)
