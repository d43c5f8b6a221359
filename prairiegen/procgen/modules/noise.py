"""
Noise functions for terrain generation.

numpy implementations of:
- Integer lattice hashing
- Value noise with cubic Hermite interpolation
- Fractal Brownian motion (fBm)
- smoothstep / lerp helpers

Every function accepts scalars or arrays and is stateless. Scalars are
evaluated through the same array code, so a single point and a full grid
produce bit-identical values.
"""

from typing import Union

import numpy as np

ArrayLike = Union[float, np.ndarray]

_MASK32 = np.uint64(0xFFFFFFFF)
_PRIME_X = np.uint64(374761393)
_PRIME_Y = np.uint64(668265263)
_PRIME_SEED = np.uint64(2246822519)
_MIX = np.uint64(1274126177)


def _to_u32(values: np.ndarray) -> np.ndarray:
    """Wrap signed lattice indices into uint64 holding 32-bit values."""
    return (np.asarray(values, dtype=np.int64) & 0xFFFFFFFF).astype(np.uint64)


def hash_coord(ix: np.ndarray, iy: np.ndarray, seed: int = 0) -> np.ndarray:
    """
    Hash integer lattice coordinates to pseudo-random values in [-1, 1].

    Arithmetic is carried out on 32-bit values held in uint64 so no
    product can overflow.
    """

    x = _to_u32(ix)
    y = _to_u32(iy)
    s = _to_u32(seed)

    h = ((x * _PRIME_X) & _MASK32) + ((y * _PRIME_Y) & _MASK32) + ((s * _PRIME_SEED) & _MASK32)
    h &= _MASK32
    h ^= h >> np.uint64(13)
    h = (h * _MIX) & _MASK32
    h ^= h >> np.uint64(16)

    return (h.astype(np.float64) / 4294967295.0) * 2.0 - 1.0


def hermite(t: np.ndarray) -> np.ndarray:
    """Smooth interpolation function (3t² - 2t³)."""
    return t * t * (3.0 - 2.0 * t)


def smoothstep(edge0: ArrayLike, edge1: ArrayLike, value: ArrayLike) -> ArrayLike:
    """
    Cubic Hermite ramp from 0 at ``edge0`` to 1 at ``edge1``.

    Reversed edges (``edge0 > edge1``) give a falling ramp. Equal edges
    degrade to a step at the edge.
    """

    edge0 = np.asarray(edge0, dtype=np.float64)
    edge1 = np.asarray(edge1, dtype=np.float64)
    value = np.asarray(value, dtype=np.float64)

    span = edge1 - edge0
    degenerate = span == 0.0
    safe_span = np.where(degenerate, 1.0, span)

    t = np.clip((value - edge0) / safe_span, 0.0, 1.0)
    result = np.where(degenerate, (value >= edge0).astype(np.float64), hermite(t))

    if result.ndim == 0:
        return float(result)
    return result


def lerp(a: ArrayLike, b: ArrayLike, t: ArrayLike) -> ArrayLike:
    """Linear interpolation ``a + (b - a) * t``."""
    return a + (b - a) * t


def value_noise(x: np.ndarray, y: np.ndarray, seed: int = 0) -> np.ndarray:
    """
    Single octave of 2D value noise in [-1, 1].

    Lattice values come from ``hash_coord``; cells are blended with the
    Hermite curve so the field is C1 across cell borders.
    """

    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    # Grid coordinates
    x0 = np.floor(x)
    y0 = np.floor(y)
    ix0 = x0.astype(np.int64)
    iy0 = y0.astype(np.int64)

    # Smooth interpolation
    u = hermite(x - x0)
    v = hermite(y - y0)

    # Corner values
    c00 = hash_coord(ix0, iy0, seed)
    c10 = hash_coord(ix0 + 1, iy0, seed)
    c01 = hash_coord(ix0, iy0 + 1, seed)
    c11 = hash_coord(ix0 + 1, iy0 + 1, seed)

    # Bilinear interpolation
    top = c00 + u * (c10 - c00)
    bottom = c01 + u * (c11 - c01)

    return top + v * (bottom - top)


def fbm(
    x: ArrayLike,
    y: ArrayLike,
    octaves: int = 4,
    persistence: float = 0.5,
    lacunarity: float = 2.0,
    seed: int = 0
) -> ArrayLike:
    """
    Generate fractional Brownian motion noise.

    Args:
        x, y: Coordinates (already scaled by the caller's base frequency)
        octaves: Number of octaves to sum
        persistence: Amplitude reduction per octave
        lacunarity: Frequency multiplication per octave
        seed: Noise seed; each octave uses ``seed + i``

    Returns:
        Noise values normalised to [-1, 1] regardless of octave count
    """

    scalar = np.ndim(x) == 0 and np.ndim(y) == 0
    x = np.atleast_1d(np.asarray(x, dtype=np.float64))
    y = np.atleast_1d(np.asarray(y, dtype=np.float64))

    total = np.zeros(np.broadcast(x, y).shape)
    amplitude = 1.0
    freq = 1.0
    max_value = 0.0

    for i in range(max(int(octaves), 1)):
        total += value_noise(x * freq, y * freq, seed + i) * amplitude
        max_value += amplitude

        amplitude *= persistence
        freq *= lacunarity

    total /= max_value

    if scalar:
        return float(total[0])
    return total
