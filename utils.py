"""
utils.py

Utility functions for the Pixeloid geometry core.
"""

from __future__ import annotations

import math
from typing import Optional

from PyQt6.QtGui import QColor


def hex_to_color_int(s: str, fallback: Optional[int] = None) -> Optional[int]:
    """
    Parse a color string to a packed 0xRRGGBB integer.

    Accepts anything QColor understands ("#RRGGBB", "#RGB", SVG color names).

    Args:
        s: Color string
        fallback: Value to return if parsing fails

    Returns:
        Packed integer color, or fallback
    """
    if not s:
        return fallback
    c = QColor(s.strip())
    if not c.isValid():
        return fallback
    return (c.red() << 16) | (c.green() << 8) | c.blue()


def color_int_to_hex(value: int) -> str:
    """Convert a packed 0xRRGGBB integer to "#RRGGBB"."""
    return "#{:06X}".format(value & 0xFFFFFF)


def color_int_to_qcolor(value: int, alpha: float = 1.0) -> QColor:
    """
    Convert a packed color and a 0-1 alpha to a QColor for rendering collaborators.

    Args:
        value: Packed 0xRRGGBB color
        alpha: Opacity in the range 0.0 - 1.0 (clamped)

    Returns:
        QColor with the alpha channel applied
    """
    c = QColor((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)
    c.setAlphaF(min(1.0, max(0.0, alpha)))
    return c


def close_enough(a: float, b: float, tolerance: float, scale: float = 1.0) -> bool:
    """Compare two floats with a tolerance relative to max(1, |scale|)."""
    return abs(a - b) <= tolerance * max(1.0, abs(scale))


def floor_cell(value: float, eps: float = 1e-9) -> int:
    """Floor to a grid cell, absorbing float noise just below an integer."""
    return math.floor(value + eps)
