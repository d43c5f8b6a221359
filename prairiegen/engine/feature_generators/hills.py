"""
Small hill generator.

Scatters low mounds across the prairie away from the river.
"""

import numpy as np
from typing import Dict

from .base import FeatureGenerator
from ...procgen.modules.noise import fbm


class HillGenerator(FeatureGenerator):
    """Adds ``(noise - threshold) * strength`` where the gate fires on dry land."""

    def apply(
        self,
        heightmap: np.ndarray,
        X: np.ndarray, Z: np.ndarray,
        parameters: Dict[str, float],
        seed: int,
        layers: Dict[str, np.ndarray]
    ) -> np.ndarray:
        frequency = parameters["hill_frequency"]
        offset = parameters["hill_offset"]
        threshold = parameters["hill_threshold"]

        hill_noise = fbm(X * frequency + offset, Z * frequency + offset, 2, seed=seed)
        is_hill = (hill_noise > threshold) & (layers["river_factor"] > 0.8)

        return np.where(is_hill, heightmap + (hill_noise - threshold) * parameters["hill_strength"], heightmap)
