"""
Heightmap analysis for generated terrain grids.

Summarises a built grid for build manifests and sanity checks:
elevation and slope statistics, water and sandbar coverage, and the
share of vertices each biome rule coloured.
"""

import numpy as np
from typing import Any, Dict, Optional, Sequence
from scipy.ndimage import label, maximum_filter

from .grid_manager import TerrainGrid


class HeightmapAnalyzer:
    """
    Analyzes terrain grids.

    Statistics are computed on the (segments + 1)^2 height array with
    gradients scaled by the real vertex spacing.
    """

    def __init__(self, water_level: float = -0.8, biome_names: Optional[Sequence[str]] = None):
        self.water_level = water_level
        self.biome_names = list(biome_names) if biome_names is not None else None

    def analyze(self, grid: TerrainGrid) -> Dict[str, Any]:
        """
        Summarise a terrain grid.

        Args:
            grid: Grid built by GridManager

        Returns:
            Dictionary of plain Python numbers, safe to dump as JSON
        """

        heightmap = grid.heights
        spacing = grid.size / grid.segments

        return {
            "elevation_stats": self._analyze_elevation(heightmap),
            "slope_analysis": self._analyze_slopes(heightmap, spacing),
            "water": self._analyze_water(heightmap, grid),
            "peaks": self._detect_peaks(heightmap),
            "biome_coverage": self._biome_coverage(grid.biomes),
            "analysis_metadata": {
                "size": grid.size,
                "segments": grid.segments,
                "heightmap_shape": list(heightmap.shape),
            }
        }

    def _analyze_elevation(self, heightmap: np.ndarray) -> Dict[str, float]:
        """Analyze elevation statistics."""

        return {
            "min": float(np.min(heightmap)),
            "max": float(np.max(heightmap)),
            "mean": float(np.mean(heightmap)),
            "median": float(np.median(heightmap)),
            "std": float(np.std(heightmap)),
            "range": float(np.max(heightmap) - np.min(heightmap)),
        }

    def _analyze_slopes(self, heightmap: np.ndarray, spacing: float) -> Dict[str, float]:
        """Analyze slope characteristics."""

        if min(heightmap.shape) < 2:
            return {"max_slope": 0.0, "mean_slope": 0.0, "steep_area_fraction": 0.0}

        grad_z, grad_x = np.gradient(heightmap, spacing)
        slope_magnitude = np.sqrt(grad_x**2 + grad_z**2)

        # Rise of one unit per unit run
        steep_areas = slope_magnitude > 1.0

        return {
            "max_slope": float(np.max(slope_magnitude)),
            "mean_slope": float(np.mean(slope_magnitude)),
            "steep_area_fraction": float(np.mean(steep_areas)),
        }

    def _analyze_water(self, heightmap: np.ndarray, grid: TerrainGrid) -> Dict[str, Any]:
        """Submerged area and connected sandbar patches."""

        submerged = heightmap < self.water_level
        _, num_water_bodies = label(submerged)

        sandbars = np.asarray(grid.field.is_sandbar).reshape(grid.shape)
        labeled_sandbars, num_sandbars = label(sandbars)
        sandbar_sizes = np.bincount(labeled_sandbars.ravel())[1:] if num_sandbars else np.zeros(0)

        return {
            "water_level": float(self.water_level),
            "water_fraction": float(np.mean(submerged)),
            "water_bodies_count": int(num_water_bodies),
            "sandbar_fraction": float(np.mean(sandbars)),
            "sandbar_patches": int(num_sandbars),
            "largest_sandbar": int(sandbar_sizes.max()) if len(sandbar_sizes) else 0,
        }

    def _detect_peaks(self, heightmap: np.ndarray) -> Dict[str, Any]:
        """Local maxima above the 85th height percentile."""

        neighborhood_size = max(3, min(heightmap.shape) // 20)
        local_maxima = maximum_filter(heightmap, size=neighborhood_size) == heightmap
        significant_peaks = local_maxima & (heightmap > np.percentile(heightmap, 85))

        peak_count = int(np.sum(significant_peaks))
        return {
            "peaks_detected": peak_count,
            "peak_height_max": float(np.max(heightmap[significant_peaks])) if peak_count else 0.0,
        }

    def _biome_coverage(self, biomes: np.ndarray) -> Dict[str, float]:
        counts = np.bincount(biomes[biomes >= 0], minlength=len(self.biome_names or []))
        total = max(len(biomes), 1)

        coverage = {}
        for index, count in enumerate(counts):
            name = self.biome_names[index] if self.biome_names and index < len(self.biome_names) else str(index)
            coverage[name] = float(count / total)
        return coverage
