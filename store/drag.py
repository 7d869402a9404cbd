"""
store/drag.py

Drag: rigid translation of an object's vertices under the pointer.

Offsets from the grab point to every vertex are frozen at ``begin``; each
``update`` places the vertices at pointer + offset and writes them through
the store's drag path.  Properties are recalculated once, at ``end``.
Nothing here ever calls a generator, so a drag can never reshape an object.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from debug_trace import trace
from models import GeometricObject, Point, ShapeType
from geometry.calculators import calculate_properties, stored_circle_segments
from geometry.errors import InconsistentGeometryError, InvalidStateError
from store.object_store import DRAG, GeometryObjectStore

log = logging.getLogger(__name__)


class DragController(QObject):
    """
    Single-slot drag gesture.

    Signals:
        drag_moved(str): The dragged object's vertices moved
    """

    drag_moved = pyqtSignal(str)

    def __init__(self, store: GeometryObjectStore, parent=None):
        super().__init__(parent)
        self.store = store
        self._target_id: Optional[str] = None
        self._grab_point: Optional[Point] = None
        self._offsets: Tuple[Point, ...] = ()
        self._start_vertices: Tuple[Point, ...] = ()
        store.object_removed.connect(self._on_object_removed)
        store.objects_cleared.connect(self._on_objects_cleared)

    @property
    def is_active(self) -> bool:
        return self._target_id is not None

    @property
    def target_object_id(self) -> Optional[str]:
        return self._target_id

    @property
    def grab_point(self) -> Optional[Point]:
        return self._grab_point

    @property
    def vertex_offsets(self) -> Tuple[Point, ...]:
        return self._offsets

    def _require_active(self, operation: str) -> None:
        if not self.is_active:
            raise InvalidStateError(f"{operation}() called with no drag in progress")

    def _finish(self) -> None:
        if self._target_id is not None:
            self.store.release(self._target_id, DRAG)
        self._target_id = None
        self._grab_point = None
        self._offsets = ()
        self._start_vertices = ()

    def begin(self, object_id: str, grab_point: Any) -> GeometricObject:
        """Start dragging an object grabbed at *grab_point* (grid coordinates).

        Raises:
            NotFound: if the object does not exist.
            ConcurrentEditError: if the object is under preview, or another
                drag is already in progress.
        """
        obj = self.store.acquire(object_id, DRAG)
        grab = Point.coerce(grab_point)
        self._target_id = object_id
        self._grab_point = grab
        self._start_vertices = obj.vertices
        self._offsets = tuple(v - grab for v in obj.vertices)
        log.debug("Drag began on %s at (%s, %s)", object_id, grab.x, grab.y)
        return obj

    def update(self, pointer: Any) -> None:
        """Move the vertices so the grab point follows *pointer*.

        Raises:
            InvalidStateError: if no drag is in progress.
        """
        self._require_active("update")
        p = Point.coerce(pointer)
        self.store.replace_vertices(self._target_id, tuple(p + o for o in self._offsets), editor=DRAG)
        trace(f"drag {self._target_id} -> ({p.x}, {p.y})", "POINTER")
        self.drag_moved.emit(self._target_id)

    def end(self) -> str:
        """Finish the drag: recalculate properties from the final vertices.

        Returns:
            The dragged object's id.

        Raises:
            InvalidStateError: if no drag is in progress.
            InconsistentGeometryError: if the final vertices do not form the
                shape.  The gesture still ends and the properties keep their
                last-known-good value.
        """
        self._require_active("end")
        object_id = self._target_id
        obj = self.store.get(object_id)
        try:
            segments = stored_circle_segments(obj.vertices) if obj.type is ShapeType.CIRCLE else None
            props = calculate_properties(obj.type, obj.vertices, segments)
        except InconsistentGeometryError as e:
            log.warning("Drag on %s ended with inconsistent geometry: %s", object_id, e)
            self._finish()
            raise
        try:
            self.store.replace(object_id, obj.vertices, props, editor=DRAG)
        finally:
            self._finish()
        log.debug("Drag ended on %s", object_id)
        return object_id

    def cancel(self) -> None:
        """Abort the drag and put the vertices back where they started.

        Raises:
            InvalidStateError: if no drag is in progress.
        """
        self._require_active("cancel")
        object_id = self._target_id
        self.store.replace_vertices(object_id, self._start_vertices, editor=DRAG)
        self._finish()
        log.debug("Drag cancelled on %s", object_id)

    # ---- Store notifications ----

    def _on_object_removed(self, object_id: str) -> None:
        if self._target_id == object_id:
            log.warning("Drag on %s cancelled: object was deleted", object_id)
            self._finish()

    def _on_objects_cleared(self) -> None:
        if self.is_active:
            log.warning("Drag on %s cancelled: store was cleared", self._target_id)
            self._finish()
