"""
Base terrain generator and common utilities.
"""

import numpy as np
from typing import Dict
from abc import ABC, abstractmethod

from ...procgen.modules.noise import fbm


class FeatureGenerator(ABC):
    """
    Base class for all height field stages.

    Stages run in a fixed order. Each receives the heights produced so
    far and a ``layers`` dict of named per-point arrays written by
    earlier stages (river factor, bluff flags, ...), and returns new
    heights. Stages may add layers but never mutate ``heightmap``.
    """

    @abstractmethod
    def apply(
        self,
        heightmap: np.ndarray,
        X: np.ndarray, Z: np.ndarray,
        parameters: Dict[str, float],
        seed: int,
        layers: Dict[str, np.ndarray]
    ) -> np.ndarray:
        """Apply this feature to existing heightmap."""
        pass


class BaseGenerator(FeatureGenerator):
    """
    Generates the unconstrained rolling land height.

    Three fBm layers at decreasing scale: large hills, medium detail and
    fine detail.
    """

    LAYERS = ("hills", "detail", "fine")

    def generate(
        self,
        X: np.ndarray, Z: np.ndarray,
        parameters: Dict[str, float],
        seed: int
    ) -> np.ndarray:
        """Generate base terrain from scratch."""

        land = np.zeros(np.broadcast(X, Z).shape)
        for layer in self.LAYERS:
            frequency = parameters[f"{layer}_frequency"]
            amplitude = parameters[f"{layer}_amplitude"]
            octaves = int(parameters[f"{layer}_octaves"])
            land = land + fbm(X * frequency, Z * frequency, octaves, seed=seed) * amplitude

        return land

    def apply(
        self,
        heightmap: np.ndarray,
        X: np.ndarray, Z: np.ndarray,
        parameters: Dict[str, float],
        seed: int,
        layers: Dict[str, np.ndarray]
    ) -> np.ndarray:
        """Add base terrain to existing heightmap."""

        base = self.generate(X, Z, parameters, seed)
        return heightmap + base
