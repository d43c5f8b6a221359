"""
Constrained rejection-sampling placement.

Candidates for a profile are drawn in one batch from a seeded
RandomState, tested against the terrain in one vectorised pass, and the
first ``count`` accepted candidates (in draw order) become instances.
Taking the leading accepted draws is equivalent to a draw-test loop
that stops once the quota is met.
"""

import logging
import math
import numpy as np
from typing import Any, Dict, Iterable, Optional, Sequence, Union

from .profiles import ClusterProfile, ColorVariation, InstanceTransform, PlacementResult, SpeciesProfile
from ..engine.terrain_composer import TerrainComposer
from ..procgen.parameters import resolve_seed
from ..procgen.modules.color import offset_hsl

logger = logging.getLogger(__name__)

Seed = Union[int, np.random.RandomState]


def as_random_state(seed: Seed) -> np.random.RandomState:
    """RandomState for an integer seed (up to 64 bits), or the generator itself."""

    if isinstance(seed, np.random.RandomState):
        return seed
    seed = resolve_seed(seed)
    if seed < 2**32:
        return np.random.RandomState(seed)
    return np.random.RandomState([seed & 0xFFFFFFFF, seed >> 32])


class PlacementEngine:
    """
    Scatters instances over the terrain of one composer.

    Every height test goes through ``composer.heights`` so placement
    agrees exactly with the mesh.
    """

    def __init__(self, composer: Optional[TerrainComposer] = None):
        self.composer = composer or TerrainComposer()

    def place(self, profile: SpeciesProfile, seed: Seed) -> PlacementResult:
        """
        Place up to ``profile.count`` instances.

        Args:
            profile: Population to scatter
            seed: Integer seed or a RandomState to draw from

        Returns:
            PlacementResult; under-fill is reported, never raised

        Raises:
            ConfigurationError: if the profile is invalid
        """

        profile.validate()
        rng = as_random_state(seed)
        n = profile.attempts

        x, z = self._draw_candidates(profile, rng, n)
        draws = self._draw_appearance(profile, rng, n)

        return self._accept(profile, x, z, draws, profile.count)

    def place_clustered(self, cluster: ClusterProfile, seed: Seed) -> PlacementResult:
        """
        Place clumps: anchors along the riverbank, then a uniform disc
        of members around each anchor.

        Members share the acceptance tests of ``cluster.member``; the
        member ``count`` caps the total.
        """

        cluster.validate()
        rng = as_random_state(seed)
        member = cluster.member
        river = self.composer.river
        n_clusters = int(cluster.cluster_count)

        anchor_x = (rng.random_sample(n_clusters) - 0.5) * cluster.anchor_extent
        side = np.where(rng.random_sample(n_clusters) < 0.5, -1.0, 1.0)
        band = cluster.bank_min + rng.random_sample(n_clusters) * (cluster.bank_max - cluster.bank_min)
        anchor_z = river.bank_point(anchor_x, side, river.width(anchor_x) * band)

        sizes = rng.randint(cluster.members_min, cluster.members_max + 1, size=n_clusters)
        owner = np.repeat(np.arange(n_clusters), sizes)
        total = len(owner)

        radius = cluster.radius * np.sqrt(rng.random_sample(total))
        theta = rng.random_sample(total) * 2.0 * np.pi
        x = anchor_x[owner] + radius * np.cos(theta)
        z = anchor_z[owner] + radius * np.sin(theta)

        draws = self._draw_appearance(member, rng, total)
        return self._accept(member, x, z, draws, member.count)

    def place_fixed(
        self,
        positions: Iterable[Sequence[float]],
        min_height: float = -math.inf,
        name: str = "fixed"
    ) -> PlacementResult:
        """
        Anchor hand-placed props to the terrain.

        ``positions`` holds ``(x, z)`` or ``(x, z, rotation_y)``; each
        instance sits at ``max(height, min_height)``.
        """

        positions = [tuple(float(v) for v in p) for p in positions]
        result = PlacementResult(name=name, requested=len(positions), attempts=len(positions))
        if not positions:
            return result

        x = np.array([p[0] for p in positions])
        z = np.array([p[1] for p in positions])
        heights = np.maximum(self.composer.heights(x, z), min_height)

        for p, height in zip(positions, heights):
            rotation_y = p[2] if len(p) > 2 else 0.0
            result.instances.append(InstanceTransform(
                position=(p[0], float(height), p[1]),
                rotation=(0.0, rotation_y, 0.0),
                scale=(1.0, 1.0, 1.0),
            ))

        return result

    def accept_mask(self, profile: SpeciesProfile, x: np.ndarray, z: np.ndarray, heights: np.ndarray) -> np.ndarray:
        """Candidates passing the height, water and custom tests."""

        mask = (heights >= profile.h_min) & (heights <= profile.h_max)

        if profile.water != "none":
            near = np.asarray(self.composer.is_near_water(x, z, profile.water_multiplier), dtype=bool)
            mask &= near if profile.water == "require" else ~near

        for predicate in profile.predicates:
            mask &= np.asarray(predicate(x, z, heights, self.composer), dtype=bool)

        return mask

    def _draw_candidates(self, profile: SpeciesProfile, rng: np.random.RandomState, n: int):
        x = (rng.random_sample(n) - 0.5) * profile.extent

        if profile.sampling == "riverbank":
            river = self.composer.river
            side = np.where(rng.random_sample(n) < 0.5, -1.0, 1.0)
            band = profile.bank_min + rng.random_sample(n) * (profile.bank_max - profile.bank_min)
            z = river.bank_point(x, side, river.width(x) * band)
        else:
            z = (rng.random_sample(n) - 0.5) * profile.extent

        return x, z

    def _draw_appearance(self, profile: SpeciesProfile, rng: np.random.RandomState, n: int) -> Dict[str, Any]:
        """Rotation, scale and tint draws for ``n`` candidates."""

        rotation = np.zeros((n, 3))
        if profile.rotation == "y":
            rotation[:, 1] = rng.random_sample(n) * profile.rotation_range
        elif profile.rotation == "xyz":
            rotation[:] = rng.random_sample((n, 3)) * profile.rotation_range

        uniform_scale = profile.scale_min + rng.random_sample(n) * (profile.scale_max - profile.scale_min)
        scale = uniform_scale[:, None] * np.asarray(profile.scale_axes, dtype=np.float64)
        if profile.y_stretch is not None:
            low, high = profile.y_stretch
            scale[:, 1] *= low + rng.random_sample(n) * (high - low)

        tint = rng.random_sample((n, 3)) * 2.0 - 1.0 if profile.color is not None else None

        return {"rotation": rotation, "scale": scale, "uniform_scale": uniform_scale, "tint": tint}

    def _accept(
        self,
        profile: SpeciesProfile,
        x: np.ndarray,
        z: np.ndarray,
        draws: Dict[str, Any],
        requested: int
    ) -> PlacementResult:
        heights = self.composer.heights(x, z)
        accepted = np.flatnonzero(self.accept_mask(profile, x, z, heights))[:requested]

        if len(accepted) >= requested:
            attempts = int(accepted[-1]) + 1 if requested else 0
        else:
            attempts = len(x)

        result = PlacementResult(name=profile.name, requested=int(requested), attempts=attempts)

        colors = None
        if profile.color is not None and len(accepted):
            colors = self._instance_colors(profile.color, x[accepted], z[accepted], draws["tint"][accepted])

        y = heights - profile.sink * draws["uniform_scale"]
        for k, i in enumerate(accepted):
            result.instances.append(InstanceTransform(
                position=(float(x[i]), float(y[i]), float(z[i])),
                rotation=tuple(float(v) for v in draws["rotation"][i]),
                scale=tuple(float(v) for v in draws["scale"][i]),
                color=tuple(float(v) for v in colors[k]) if colors is not None else None,
            ))

        if result.underfilled:
            logger.info("%s: placed %d/%d instances after %d attempts",
                        profile.name, result.placed, result.requested, result.attempts)

        return result

    def _instance_colors(self, variation: ColorVariation, x: np.ndarray, z: np.ndarray, tint: np.ndarray) -> np.ndarray:
        saturation = tint[:, 1] * variation.saturation
        if variation.wet_saturation:
            near = np.asarray(self.composer.is_near_water(x, z, variation.wet_multiplier), dtype=bool)
            saturation = saturation + np.where(near, variation.wet_saturation, 0.0)

        base = np.broadcast_to(variation.base_rgb(), (len(x), 3))
        return offset_hsl(
            base,
            dh=tint[:, 0] * variation.hue,
            ds=saturation,
            dl=tint[:, 2] * variation.lightness,
        )


def _rotation_matrices(rotation: np.ndarray) -> np.ndarray:
    """(N, 3, 3) rotations for intrinsic Euler XYZ angles."""

    cos, sin = np.cos(rotation), np.sin(rotation)
    n = len(rotation)
    ones, zeros = np.ones(n), np.zeros(n)

    rx = np.stack([
        np.stack([ones, zeros, zeros], -1),
        np.stack([zeros, cos[:, 0], -sin[:, 0]], -1),
        np.stack([zeros, sin[:, 0], cos[:, 0]], -1),
    ], axis=1)
    ry = np.stack([
        np.stack([cos[:, 1], zeros, sin[:, 1]], -1),
        np.stack([zeros, ones, zeros], -1),
        np.stack([-sin[:, 1], zeros, cos[:, 1]], -1),
    ], axis=1)
    rz = np.stack([
        np.stack([cos[:, 2], -sin[:, 2], zeros], -1),
        np.stack([sin[:, 2], cos[:, 2], zeros], -1),
        np.stack([zeros, zeros, ones], -1),
    ], axis=1)

    return rx @ ry @ rz


def instance_matrices(instances: Iterable[InstanceTransform]) -> np.ndarray:
    """
    Row-major (N, 4, 4) translate-rotate-scale matrices.

    Multiply column vectors on the right: ``M @ [x, y, z, 1]``.
    """

    instances = list(instances)
    matrices = np.zeros((len(instances), 4, 4))
    if not instances:
        return matrices

    position = np.array([t.position for t in instances], dtype=np.float64)
    rotation = np.array([t.rotation for t in instances], dtype=np.float64)
    scale = np.array([t.scale for t in instances], dtype=np.float64)

    matrices[:, :3, :3] = _rotation_matrices(rotation) * scale[:, None, :]
    matrices[:, :3, 3] = position
    matrices[:, 3, 3] = 1.0

    return matrices
