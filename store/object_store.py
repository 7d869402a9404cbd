"""
store/object_store.py

The geometry object store: the single source of truth for every shape.

Objects are immutable ``GeometricObject`` snapshots; every mutation swaps in
a new snapshot and emits a signal.  Insertion order is drawing order (later
objects sit on top).

Two mutation paths exist and they never interleave on one object:

- ``replace_vertices``: the drag path, properties untouched until the drag ends
- ``replace``: the commit path, vertices and properties written together

A drag or preview session holds a per-object lock for its lifetime; any
other writer is rejected with ``ConcurrentEditError``.
"""

from __future__ import annotations

import logging
from dataclasses import replace as dc_replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from PyQt6.QtCore import QObject, pyqtSignal

from debug_trace import trace, trace_call
from models import (
    GeometricObject,
    GeometryProperties,
    ObjectStyle,
    Point,
    ShapeType,
    as_vertices,
    resolve_shape_alias,
)
from geometry.calculators import calculate_properties
from geometry.errors import ConcurrentEditError, InvalidGeometryError, NotFound
from geometry.generators import coerce_properties, drawing_properties, generate_vertices

log = logging.getLogger(__name__)

# Lock holders
DRAG = "drag"
PREVIEW = "preview"


class GeometryObjectStore(QObject):
    """
    Owns every GeometricObject.

    Signals:
        object_added(str): A new object was stored
        object_changed(str): An object's vertices, properties, style or
            visibility changed
        object_removed(str): An object was deleted
        objects_cleared(): Every object was removed at once
        selection_changed(object): The selected id (or None)
    """

    object_added = pyqtSignal(str)
    object_changed = pyqtSignal(str)
    object_removed = pyqtSignal(str)
    objects_cleared = pyqtSignal()
    selection_changed = pyqtSignal(object)

    def __init__(self, parent=None, segments: Optional[int] = None):
        """
        Args:
            parent: Optional QObject parent
            segments: Circle vertex count (default from settings)
        """
        super().__init__(parent)
        self.segments = segments
        self._objects: Dict[str, GeometricObject] = {}
        self._locks: Dict[str, str] = {}
        self._id_counter = 1
        self._selected_id: Optional[str] = None
        self._clipboard: Optional[GeometricObject] = None

    def _new_id(self) -> str:
        s = f"g{self._id_counter:06d}"
        self._id_counter += 1
        return s

    def _resolve_type(self, shape_type: Union[str, ShapeType]) -> ShapeType:
        st = resolve_shape_alias(shape_type)
        if st is None:
            raise InvalidGeometryError(f"unknown shape type: {shape_type!r}")
        return st

    def _add(self, obj: GeometricObject) -> str:
        self._objects[obj.id] = obj
        log.debug("Created %s %s with %d vertices", obj.type.value, obj.id, len(obj.vertices))
        self.object_added.emit(obj.id)
        return obj.id

    # ---- Queries ----

    def get(self, object_id: str) -> GeometricObject:
        """Current snapshot of an object.

        Raises:
            NotFound: if no object has this id.
        """
        try:
            return self._objects[object_id]
        except KeyError:
            raise NotFound(object_id) from None

    def objects(self) -> List[GeometricObject]:
        """All objects in drawing order."""
        return list(self._objects.values())

    def visible_objects(self) -> List[GeometricObject]:
        return [o for o in self._objects.values() if o.is_visible]

    def ids(self) -> List[str]:
        return list(self._objects)

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._objects

    def __len__(self) -> int:
        return len(self._objects)

    # ---- Creation ----

    @trace_call("STORE")
    def create(
        self,
        shape_type: Union[str, ShapeType],
        properties: Union[GeometryProperties, Mapping[str, Any]],
        style: Optional[ObjectStyle] = None,
    ) -> str:
        """Create an object from initial properties.

        Vertices and properties come from the same generator call, so the
        stored object satisfies the vertex/property invariant immediately.

        Raises:
            InvalidGeometryError: on degenerate properties.
        """
        props = coerce_properties(shape_type, properties)
        st = props.shape
        vertices = generate_vertices(st, props, self.segments)
        obj = GeometricObject(
            id=self._new_id(),
            type=st,
            vertices=vertices,
            properties=props,
            style=style if style is not None else ObjectStyle.from_settings(),
        )
        return self._add(obj)

    @trace_call("STORE")
    def create_from_vertices(
        self,
        shape_type: Union[str, ShapeType],
        vertices: Iterable[Any],
        style: Optional[ObjectStyle] = None,
    ) -> str:
        """Create an object from explicit vertices.

        Raises:
            InconsistentGeometryError: if the vertices cannot form the shape.
        """
        st = self._resolve_type(shape_type)
        verts = as_vertices(vertices)
        props = calculate_properties(st, verts, self.segments)
        obj = GeometricObject(
            id=self._new_id(),
            type=st,
            vertices=verts,
            properties=props,
            style=style if style is not None else ObjectStyle.from_settings(),
        )
        return self._add(obj)

    def finish_drawing(
        self,
        shape_type: Union[str, ShapeType],
        start: Any,
        end: Any,
        style: Optional[ObjectStyle] = None,
    ) -> str:
        """Create the shape a pointer drag from *start* to *end* describes.

        Raises:
            InvalidGeometryError: if the drag has zero size for this shape.
        """
        st = self._resolve_type(shape_type)
        props = drawing_properties(st, start, end)
        return self.create(st, props, style)

    # ---- Locking ----

    def lock_holder(self, object_id: str) -> Optional[str]:
        return self._locks.get(object_id)

    def is_locked(self, object_id: str) -> bool:
        return object_id in self._locks

    def session_target(self, holder: str) -> Optional[str]:
        """Id of the object *holder* currently has locked, if any."""
        for object_id, current in self._locks.items():
            if current == holder:
                return object_id
        return None

    def acquire(self, object_id: str, holder: str) -> GeometricObject:
        """Claim exclusive write access to an object for a session.

        Returns:
            The object's snapshot at the moment the lock was taken.

        Raises:
            NotFound: if the object does not exist.
            ConcurrentEditError: if another session already holds it, or
                *holder* already has a session open on another object.
        """
        obj = self.get(object_id)
        current = self._locks.get(object_id)
        if current is not None:
            raise ConcurrentEditError(object_id, current, holder)
        busy = self.session_target(holder)
        if busy is not None:
            raise ConcurrentEditError(object_id, f"{holder} of {busy}", holder)
        self._locks[object_id] = holder
        trace(f"lock {object_id} -> {holder}", "LOCK")
        return obj

    def release(self, object_id: str, holder: str) -> None:
        """Give up a lock.  A lock owned by someone else is left alone."""
        if self._locks.get(object_id) == holder:
            del self._locks[object_id]
            trace(f"unlock {object_id} <- {holder}", "LOCK")

    def _check_writer(self, object_id: str, editor: Optional[str], requested: str) -> GeometricObject:
        obj = self.get(object_id)
        holder = self._locks.get(object_id)
        if holder is not None and holder != editor:
            raise ConcurrentEditError(object_id, holder, requested)
        return obj

    # ---- Mutation ----

    def replace_vertices(self, object_id: str, vertices: Iterable[Any], editor: Optional[str] = None) -> None:
        """Drag path: swap the vertices and leave the properties untouched.

        Raises:
            NotFound: if the object does not exist.
            ConcurrentEditError: if a session other than *editor* holds it.
        """
        obj = self._check_writer(object_id, editor, "replace_vertices")
        self._objects[object_id] = obj.with_vertices(vertices)
        trace(f"replace_vertices {object_id}", "POINTER")
        self.object_changed.emit(object_id)

    def replace(
        self,
        object_id: str,
        vertices: Iterable[Any],
        properties: GeometryProperties,
        editor: Optional[str] = None,
    ) -> None:
        """Commit path: swap vertices and properties in one step.

        Raises:
            NotFound: if the object does not exist.
            ConcurrentEditError: if a session other than *editor* holds it.
        """
        obj = self._check_writer(object_id, editor, "replace")
        if properties.shape is not obj.type:
            raise InvalidGeometryError(
                f"{properties.shape.value} properties given for {obj.type.value} {object_id}"
            )
        self._objects[object_id] = obj.with_geometry(vertices, properties)
        log.debug("Committed %s %s", obj.type.value, object_id)
        self.object_changed.emit(object_id)

    def update_style(self, object_id: str, editor: Optional[str] = None, **changes: Any) -> None:
        """Change style fields (color, stroke_width, ...) of an object.

        Raises:
            NotFound: if the object does not exist.
            ConcurrentEditError: if a session other than *editor* holds it.
        """
        obj = self._check_writer(object_id, editor, "update_style")
        self._objects[object_id] = dc_replace(obj, style=dc_replace(obj.style, **changes))
        self.object_changed.emit(object_id)

    def set_visible(self, object_id: str, visible: bool, editor: Optional[str] = None) -> None:
        obj = self._check_writer(object_id, editor, "set_visible")
        if obj.is_visible == visible:
            return
        self._objects[object_id] = dc_replace(obj, is_visible=visible)
        self.object_changed.emit(object_id)

    @trace_call("STORE")
    def delete(self, object_id: str) -> None:
        """Remove an object.

        Active drag/preview sessions on it are force-cancelled by their
        controllers, which listen to ``object_removed``.

        Raises:
            NotFound: if the object does not exist.
        """
        self.get(object_id)
        del self._objects[object_id]
        log.debug("Deleted %s", object_id)
        self.object_removed.emit(object_id)
        self._locks.pop(object_id, None)
        if self._selected_id == object_id:
            self.clear_selection()

    def clear(self) -> None:
        """Remove every object."""
        self._objects.clear()
        self.objects_cleared.emit()
        self._locks.clear()
        self._clipboard = None
        self.clear_selection()
        log.debug("Cleared all objects")

    # ---- Selection ----

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    def selected(self) -> Optional[GeometricObject]:
        if self._selected_id is None:
            return None
        return self._objects.get(self._selected_id)

    def select(self, object_id: str) -> None:
        self.get(object_id)
        if self._selected_id != object_id:
            self._selected_id = object_id
            self.selection_changed.emit(object_id)

    def clear_selection(self) -> None:
        if self._selected_id is not None:
            self._selected_id = None
            self.selection_changed.emit(None)

    # ---- Clipboard ----

    def copy(self, object_id: str) -> None:
        """Remember a snapshot of an object for ``paste``."""
        self._clipboard = self.get(object_id)

    @property
    def has_clipboard(self) -> bool:
        return self._clipboard is not None

    def paste(self, offset: Any = (1, 1)) -> Optional[str]:
        """Create a copy of the clipboard object shifted by *offset* grid cells.

        Returns:
            The new object's id, or None if nothing was copied.
        """
        if self._clipboard is None:
            return None
        return self._paste_translated(Point.coerce(offset))

    def paste_at(self, center: Any) -> Optional[str]:
        """Create a copy of the clipboard object centered on *center*."""
        if self._clipboard is None:
            return None
        return self._paste_translated(Point.coerce(center) - self._clipboard.bounds.center)

    def _paste_translated(self, d: Point) -> str:
        src = self._clipboard
        vertices = tuple(v + d for v in src.vertices)
        props = calculate_properties(src.type, vertices, len(vertices) if src.type is ShapeType.CIRCLE else None)
        obj = GeometricObject(
            id=self._new_id(),
            type=src.type,
            vertices=vertices,
            properties=props,
            style=src.style,
            is_visible=True,
        )
        return self._add(obj)
