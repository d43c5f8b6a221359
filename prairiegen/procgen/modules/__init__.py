"""
Terrain field primitives.

Each module provides one building block of the height field:
- noise: lattice hash, value noise, fBm, smoothstep
- river: parametric river centreline and channel width
- trail: cart trail curve and settlement path corridors
- color: palette blending and HSL jitter
"""

from . import noise
from . import river
from . import trail
from . import color

__all__ = ["noise", "river", "trail", "color"]
