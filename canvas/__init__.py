"""
canvas package

Event routing between the drawing surface and the geometry store.
"""

from canvas.scene import GeometryScene

__all__ = ["GeometryScene"]
