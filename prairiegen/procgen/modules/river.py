"""
Parametric river channel.

The river runs along the x axis. Its centreline wanders in z as the sum
of two sine waves and its half-width breathes with a third, so every
quantity is a pure function of the longitudinal coordinate.
"""

from typing import Dict, Optional

import numpy as np

from .noise import ArrayLike, smoothstep


class RiverModel:
    """
    River centreline and channel width as functions of x.

    Default constants give ``meander(x) = sin(0.03x)·12 + sin(0.01x)·5``
    and ``width(x) = 8 + sin(0.02x)·4``.
    """

    def __init__(self, parameters: Optional[Dict[str, float]] = None):
        parameters = parameters or {}
        self.meander_frequency_1 = parameters.get("meander_frequency_1", 0.03)
        self.meander_amplitude_1 = parameters.get("meander_amplitude_1", 12.0)
        self.meander_frequency_2 = parameters.get("meander_frequency_2", 0.01)
        self.meander_amplitude_2 = parameters.get("meander_amplitude_2", 5.0)
        self.base_width = parameters.get("river_base_width", 8.0)
        self.width_variation = parameters.get("river_width_variation", 4.0)
        self.width_frequency = parameters.get("river_width_frequency", 0.02)
        self.near_water_multiplier = parameters.get("near_water_multiplier", 2.0)

    def meander(self, x: ArrayLike) -> ArrayLike:
        """z coordinate of the river centreline at ``x``."""
        return (np.sin(x * self.meander_frequency_1) * self.meander_amplitude_1
                + np.sin(x * self.meander_frequency_2) * self.meander_amplitude_2)

    def width(self, x: ArrayLike) -> ArrayLike:
        """Channel width at ``x``; always positive for valid parameters."""
        return self.base_width + np.sin(x * self.width_frequency) * self.width_variation

    def distance_to_river(self, x: ArrayLike, z: ArrayLike) -> ArrayLike:
        return np.abs(z - self.meander(x))

    def river_factor(self, x: ArrayLike, z: ArrayLike) -> ArrayLike:
        """
        Blend weight between riverbed and land.

        0 at the centreline, 1 beyond one and a half widths, and
        non-decreasing in distance from the centreline.
        """
        width = self.width(x)
        return smoothstep(width * 0.5, width * 1.5, self.distance_to_river(x, z))

    def is_near_water(self, x: ArrayLike, z: ArrayLike, multiplier: Optional[float] = None):
        """True where the point lies within ``width * multiplier`` of the centreline."""
        if multiplier is None:
            multiplier = self.near_water_multiplier
        result = self.distance_to_river(x, z) < self.width(x) * multiplier
        if np.ndim(result) == 0:
            return bool(result)
        return result

    def centerline(self, x_values: np.ndarray) -> np.ndarray:
        """Polyline of the centreline as an (N, 2) array of (x, z)."""
        x_values = np.asarray(x_values, dtype=np.float64)
        return np.stack([x_values, self.meander(x_values)], axis=-1)

    def bank_point(self, x: ArrayLike, side: ArrayLike, offset: ArrayLike) -> ArrayLike:
        """z coordinate ``offset`` units from the centreline on ``side`` (+1 or -1)."""
        return self.meander(x) + side * offset
