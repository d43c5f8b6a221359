"""
Grid manager for terrain mesh generation.

Builds the regular vertex grid handed to the rendering layer: positions
from the height field, colours from the biome colouriser, and normals
derived from the final heights.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .terrain_composer import FieldSample, TerrainComposer
from .feature_generators.biomes import BiomeColorizer, BiomeInputs
from ..errors import raise_if_errors
from ..procgen.parameters import TERRAIN_PARAMETERS, resolve_seed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vertex:
    position: tuple
    color: tuple
    normal: tuple


@dataclass(frozen=True)
class TerrainGrid:
    """
    Vertex buffer of a (segments + 1) x (segments + 1) terrain grid.

    Vertices are row-major: row ``iz`` runs along x at
    ``z = -size/2 + iz * size/segments``. ``indices`` holds two
    triangles per cell, counter-clockwise when viewed from +y.
    """

    size: float
    segments: int
    positions: np.ndarray   # (N, 3) float64
    colors: np.ndarray      # (N, 3) float64 in [0, 1]
    normals: np.ndarray     # (N, 3) unit vectors
    indices: np.ndarray     # (2 * segments**2, 3) uint32
    biomes: np.ndarray      # (N,) index into the colouriser's rule table
    field: FieldSample

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices)

    @property
    def shape(self):
        return (self.segments + 1, self.segments + 1)

    @property
    def heights(self) -> np.ndarray:
        """Heights as a 2-D (rows=z, cols=x) array."""
        return self.positions[:, 1].reshape(self.shape)

    def vertex(self, index: int) -> Vertex:
        return Vertex(
            position=tuple(float(v) for v in self.positions[index]),
            color=tuple(float(v) for v in self.colors[index]),
            normal=tuple(float(v) for v in self.normals[index]),
        )

    def to_arrays(self) -> Dict[str, np.ndarray]:
        """Flat float32/uint32 buffers ready for upload."""
        return {
            "positions": self.positions.astype(np.float32),
            "colors": self.colors.astype(np.float32),
            "normals": self.normals.astype(np.float32),
            "indices": self.indices.astype(np.uint32),
        }


class GridManager:
    """
    Builds terrain grids from a composer and a colouriser.

    Generation is two-phase: every height is set first, then normals
    are computed from the finished heights.
    """

    def __init__(
        self,
        composer: Optional[TerrainComposer] = None,
        colorizer: Optional[BiomeColorizer] = None
    ):
        self.composer = composer or TerrainComposer()
        self.colorizer = colorizer or BiomeColorizer(jitter=self.composer.parameters["color_jitter"])

    def build(self, size: Optional[float] = None, segments: Optional[int] = None, seed: int = 0) -> TerrainGrid:
        """
        Build a grid covering [-size/2, size/2] on both axes.

        Args:
            size: Side length; defaults to the composer's ``size``
            segments: Cells per side; defaults to the composer's ``segments``
            seed: Seed for the per-vertex colour jitter

        Raises:
            ConfigurationError: for non-positive size or segments, or a bad seed
        """

        size = self.composer.parameters["size"] if size is None else size
        segments = self.composer.parameters["segments"] if segments is None else segments
        self._validate(size, segments)
        segments = int(segments)
        seed = resolve_seed(seed)

        # Phase 1: heights and colours
        X, Z = grid_coordinates(size, segments)
        field = self.composer.evaluate(X.ravel(), Z.ravel())
        positions = np.stack([X.ravel(), field.height, Z.ravel()], axis=-1)

        inputs = BiomeInputs.from_field(field)
        biomes = self.colorizer.classify(inputs)
        colors = self.colorizer.colorize(inputs, np.arange(len(positions)), seed)

        # Phase 2: normals from final heights
        indices = grid_indices(segments)
        normals = compute_vertex_normals(positions, indices)

        logger.debug("Built %dx%d terrain grid (%d vertices)", segments + 1, segments + 1, len(positions))

        return TerrainGrid(
            size=float(size),
            segments=segments,
            positions=positions,
            colors=colors,
            normals=normals,
            indices=indices,
            biomes=biomes,
            field=field,
        )

    @staticmethod
    def _validate(size: Any, segments: Any) -> None:
        errors = []
        if not _is_number(size) or size <= 0:
            errors.append(f"size must be a positive number, got {size!r}")
        if not _is_number(segments) or segments != int(segments) or segments < 1:
            errors.append(f"segments must be a positive integer, got {segments!r}")
        raise_if_errors(errors, "terrain grid")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        return False
    return bool(np.isfinite(value))


def grid_coordinates(size: float, segments: int):
    """(X, Z) meshgrid of vertex positions, rows along z."""
    coords = np.linspace(-size / 2.0, size / 2.0, segments + 1)
    X, Z = np.meshgrid(coords, coords, indexing="xy")
    return X, Z


def grid_indices(segments: int) -> np.ndarray:
    """Two triangles per cell, (2 * segments**2, 3)."""

    row = segments + 1
    ix, iz = np.meshgrid(np.arange(segments), np.arange(segments), indexing="xy")
    a = (iz * row + ix).ravel()
    b = ((iz + 1) * row + ix).ravel()
    c = ((iz + 1) * row + ix + 1).ravel()
    d = (iz * row + ix + 1).ravel()

    first = np.stack([a, b, d], axis=-1)
    second = np.stack([b, c, d], axis=-1)
    return np.stack([first, second], axis=1).reshape(-1, 3).astype(np.uint32)


def compute_vertex_normals(positions: np.ndarray, indices: np.ndarray) -> np.ndarray:
    """Area-weighted average of adjacent face normals, normalised."""

    tri = positions[indices.astype(np.int64)]
    face_normals = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])

    normals = np.zeros_like(positions)
    for corner in range(3):
        np.add.at(normals, indices[:, corner].astype(np.int64), face_normals)

    lengths = np.linalg.norm(normals, axis=-1, keepdims=True)
    return normals / np.where(lengths == 0.0, 1.0, lengths)


def build_terrain_grid(config: Optional[Mapping[str, Any]] = None) -> TerrainGrid:
    """
    Build a terrain grid from a flat or nested configuration dict.

    Recognised keys: any terrain parameter (``size``, ``segments``, ...),
    or a ``terrain`` sub-dict, plus ``palette``, ``settlements`` and
    ``seed``.

    Raises:
        ConfigurationError: for invalid configuration
    """

    config = dict(config or {})
    palette = config.pop("palette", None)
    settlements = config.pop("settlements", None)
    seed = resolve_seed(config.pop("seed", 0))
    terrain = dict(config.pop("terrain", {}))
    terrain.update(config)

    defaults = TERRAIN_PARAMETERS.get_defaults()
    GridManager._validate(
        terrain.get("size", defaults["size"]),
        terrain.get("segments", defaults["segments"])
    )

    composer = TerrainComposer(terrain, settlements)
    colorizer = BiomeColorizer(palette, jitter=composer.parameters["color_jitter"])

    return GridManager(composer, colorizer).build(seed=seed)
