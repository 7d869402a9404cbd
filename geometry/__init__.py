"""
geometry package

Pure geometry for the Pixeloid core: coordinate mapping, vertex generators,
property calculators and hit testing.
"""

from geometry.errors import (
    ConcurrentEditError,
    ConfigurationError,
    GeometryCoreError,
    InconsistentGeometryError,
    InvalidGeometryError,
    InvalidStateError,
    NotFound,
)
from geometry.coords import CoordinateMapper, to_grid_coordinate, to_screen_coordinate
from geometry.generators import GENERATORS, drawing_properties, generate_vertices
from geometry.calculators import CALCULATORS, calculate_bounds, calculate_properties, stored_circle_segments
from geometry.hit_test import HIT_TESTERS, contains, find_object_at

__all__ = [
    "ConcurrentEditError",
    "ConfigurationError",
    "GeometryCoreError",
    "InconsistentGeometryError",
    "InvalidGeometryError",
    "InvalidStateError",
    "NotFound",
    "CoordinateMapper",
    "to_grid_coordinate",
    "to_screen_coordinate",
    "GENERATORS",
    "drawing_properties",
    "generate_vertices",
    "CALCULATORS",
    "calculate_bounds",
    "stored_circle_segments",
    "calculate_properties",
    "HIT_TESTERS",
    "contains",
    "find_object_at",
]
