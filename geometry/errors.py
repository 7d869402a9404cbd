"""
geometry/errors.py

Error taxonomy for the geometry core.

Every error derives from ``GeometryCoreError`` and from the closest builtin
exception, so callers can catch either way.
"""

from __future__ import annotations


class GeometryCoreError(Exception):
    """Base class for all geometry core errors."""


class NotFound(GeometryCoreError, KeyError):
    """An operation targeted an object id that is not in the store."""

    def __init__(self, object_id: str):
        super().__init__(object_id)
        self.object_id = object_id

    def __str__(self) -> str:
        return f"object not found: {self.object_id}"


class ConcurrentEditError(GeometryCoreError, RuntimeError):
    """A second mutation path was started on an object already being edited."""

    def __init__(self, object_id: str, holder: str, requested: str):
        super().__init__(
            f"object {object_id} is locked by {holder}; cannot start {requested}"
        )
        self.object_id = object_id
        self.holder = holder
        self.requested = requested


class InvalidStateError(GeometryCoreError, RuntimeError):
    """A session operation was called outside the state it is valid in."""


class InvalidGeometryError(GeometryCoreError, ValueError):
    """A generator was given a degenerate parameter (e.g. radius <= 0)."""


class InconsistentGeometryError(GeometryCoreError, ValueError):
    """A calculator found vertices that cannot belong to the claimed shape."""


class ConfigurationError(GeometryCoreError, ValueError):
    """A configuration value is out of range (e.g. cell size <= 0)."""
