"""
Cart trail and settlement path corridors.

The primary trail wanders across the valley like the river does, built
from the same sine-composition technique. Each settlement is joined to
the trail by a straight north-south path at the settlement's x.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .noise import ArrayLike, smoothstep


class TrailNetwork:
    """Primary trail curve plus settlement paths."""

    def __init__(
        self,
        parameters: Optional[Dict[str, float]] = None,
        settlements: Sequence[Tuple[float, float, float]] = ()
    ):
        parameters = parameters or {}
        self.frequency_1 = parameters.get("trail_frequency_1", 0.04)
        self.amplitude_1 = parameters.get("trail_amplitude_1", 25.0)
        self.frequency_2 = parameters.get("trail_frequency_2", 0.02)
        self.amplitude_2 = parameters.get("trail_amplitude_2", 10.0)
        self.offset = parameters.get("trail_offset", 25.0)
        self.inner = parameters.get("trail_inner", 0.5)
        self.outer = parameters.get("trail_outer", 3.0)
        self.path_width = parameters.get("path_width", 3.0)
        self.path_end_margin = parameters.get("path_end_margin", 2.0)
        self.settlements = tuple(settlements)

    def trail_z(self, x: ArrayLike) -> ArrayLike:
        """z coordinate of the primary trail at ``x``."""
        return (np.sin(x * self.frequency_1) * self.amplitude_1
                + np.cos(x * self.frequency_2) * self.amplitude_2
                + self.offset)

    def primary_factor(self, x: np.ndarray, z: np.ndarray) -> np.ndarray:
        """1 within ``inner`` units of the trail, 0 beyond ``outer``."""
        return smoothstep(self.outer, self.inner, np.abs(z - self.trail_z(x)))

    def path_segment(self, settlement: Tuple[float, float, float]) -> Tuple[float, float, float]:
        """(x, z_start, z_end) of the path joining ``settlement`` to the trail."""
        sx, sz = settlement[0], settlement[1]
        return sx, sz, float(self.trail_z(sx))

    def path_factor(self, x: np.ndarray, z: np.ndarray, settlement: Tuple[float, float, float]) -> np.ndarray:
        """Corridor weight of one settlement path; 0 outside the corridor."""

        path_x, z_start, z_end = self.path_segment(settlement)
        min_z = min(z_start, z_end) - self.path_end_margin
        max_z = max(z_start, z_end) + self.path_end_margin

        dist_from_center = np.abs(x - path_x)
        inside = (dist_from_center < self.path_width) & (z >= min_z) & (z <= max_z)
        factor = smoothstep(self.path_width, self.inner, dist_from_center)

        return np.where(inside, factor, 0.0)

    def factor(self, x: ArrayLike, z: ArrayLike) -> np.ndarray:
        """Maximum of the primary trail factor and every settlement path factor."""

        x = np.asarray(x, dtype=np.float64)
        z = np.asarray(z, dtype=np.float64)

        trail = np.asarray(self.primary_factor(x, z), dtype=np.float64)
        for settlement in self.settlements:
            trail = np.maximum(trail, self.path_factor(x, z, settlement))

        return trail

    def polylines(self, x_min: float, x_max: float, samples: int = 256) -> List[np.ndarray]:
        """Trail and path polylines as (N, 2) arrays of (x, z)."""

        xs = np.linspace(x_min, x_max, samples)
        lines = [np.stack([xs, self.trail_z(xs)], axis=-1)]
        for settlement in self.settlements:
            path_x, z_start, z_end = self.path_segment(settlement)
            lines.append(np.array([[path_x, z_start], [path_x, z_end]]))

        return lines
