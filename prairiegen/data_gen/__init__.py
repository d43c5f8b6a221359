"""
World export for rendering.
"""

from .world_builder import WorldBuilder, main

__all__ = ["WorldBuilder", "main"]
