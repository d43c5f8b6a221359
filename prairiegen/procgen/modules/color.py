"""
Colour helpers for vertex and instance colouring.

RGB values are float arrays in [0, 1] with a trailing axis of length 3.
The HSL conversion is vectorised so a whole vertex buffer can be
jittered in one pass.
"""

import numpy as np


def lerp_color(a: np.ndarray, b: np.ndarray, t) -> np.ndarray:
    """Blend colours ``a`` -> ``b`` by ``t`` (scalar or per-row)."""
    t = np.asarray(t, dtype=np.float64)
    if t.ndim > 0:
        t = t[..., None]
    return a + (b - a) * t


def rgb_to_hsl(rgb: np.ndarray) -> np.ndarray:
    """Convert (..., 3) RGB to (..., 3) HSL, hue in [0, 1)."""

    rgb = np.asarray(rgb, dtype=np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    cmax = np.max(rgb, axis=-1)
    cmin = np.min(rgb, axis=-1)
    delta = cmax - cmin
    lightness = (cmax + cmin) / 2.0

    chromatic = delta > 0.0
    safe_delta = np.where(chromatic, delta, 1.0)

    denom = np.where(lightness <= 0.5, cmax + cmin, 2.0 - cmax - cmin)
    saturation = np.where(chromatic, delta / np.where(denom == 0.0, 1.0, denom), 0.0)

    hue = np.where(
        cmax == r, (g - b) / safe_delta + np.where(g < b, 6.0, 0.0),
        np.where(cmax == g, (b - r) / safe_delta + 2.0, (r - g) / safe_delta + 4.0)
    ) / 6.0
    hue = np.where(chromatic, hue, 0.0)

    return np.stack([hue, saturation, lightness], axis=-1)


def _hue_to_rgb(p, q, t):
    t = np.mod(t, 1.0)
    return np.where(
        t < 1.0 / 6.0, p + (q - p) * 6.0 * t,
        np.where(t < 0.5, q,
                 np.where(t < 2.0 / 3.0, p + (q - p) * 6.0 * (2.0 / 3.0 - t), p))
    )


def hsl_to_rgb(hsl: np.ndarray) -> np.ndarray:
    """Convert (..., 3) HSL back to RGB."""

    hsl = np.asarray(hsl, dtype=np.float64)
    h, s, l = hsl[..., 0], hsl[..., 1], hsl[..., 2]

    q = np.where(l <= 0.5, l * (1.0 + s), l + s - l * s)
    p = 2.0 * l - q

    rgb = np.stack([
        _hue_to_rgb(p, q, h + 1.0 / 3.0),
        _hue_to_rgb(p, q, h),
        _hue_to_rgb(p, q, h - 1.0 / 3.0),
    ], axis=-1)

    grey = (s == 0.0)[..., None]
    return np.where(grey, l[..., None], rgb)


def offset_hsl(rgb: np.ndarray, dh=0.0, ds=0.0, dl=0.0) -> np.ndarray:
    """
    Shift colours in HSL space.

    Hue wraps; saturation and lightness clamp to [0, 1], so the result
    is always a valid colour.
    """

    hsl = rgb_to_hsl(rgb)
    h = np.mod(hsl[..., 0] + dh, 1.0)
    s = np.clip(hsl[..., 1] + ds, 0.0, 1.0)
    l = np.clip(hsl[..., 2] + dl, 0.0, 1.0)

    return np.clip(hsl_to_rgb(np.stack([h, s, l], axis=-1)), 0.0, 1.0)
