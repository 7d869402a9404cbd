"""
store/preview.py

Edit preview: numeric property editing against a private working copy.

    Idle --open(id)--> Previewing --apply()--> Idle   (one store write)
                                  --cancel()-> Idle   (no store write)

While previewing, the object is locked in the store so no drag or other
writer can touch it.  The working copy is regenerated from properties on
every ``update_preview`` and is only ever written back by ``apply``.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Mapping, Optional, Union

from PyQt6.QtCore import QObject, pyqtSignal

from debug_trace import trace
from models import GeometricObject, GeometryProperties, update_properties
from geometry.errors import InvalidGeometryError, InvalidStateError
from geometry.generators import coerce_properties, generate_vertices
from store.object_store import PREVIEW, GeometryObjectStore

log = logging.getLogger(__name__)


class EditPreviewController(QObject):
    """
    Single-slot edit preview session.

    Signals:
        preview_changed(object): The new working copy (GeometricObject), or
            None when the session ends
    """

    preview_changed = pyqtSignal(object)

    def __init__(self, store: GeometryObjectStore, parent=None):
        super().__init__(parent)
        self.store = store
        self._target_id: Optional[str] = None
        self._original: Optional[GeometricObject] = None
        self._working: Optional[GeometricObject] = None
        store.object_removed.connect(self._on_object_removed)
        store.objects_cleared.connect(self._on_objects_cleared)

    # ---- State ----

    @property
    def is_active(self) -> bool:
        return self._target_id is not None

    @property
    def target_object_id(self) -> Optional[str]:
        return self._target_id

    @property
    def original_snapshot(self) -> Optional[GeometricObject]:
        return self._original

    @property
    def working_copy(self) -> Optional[GeometricObject]:
        return self._working

    def _require_active(self, operation: str) -> None:
        if not self.is_active:
            raise InvalidStateError(f"{operation}() called with no preview open")

    def _reset(self) -> None:
        self._target_id = None
        self._original = None
        self._working = None
        self.preview_changed.emit(None)

    # ---- Session ----

    def open(self, object_id: str) -> GeometricObject:
        """Start previewing edits to an object.

        Returns:
            The working copy (initially equal to the stored object).

        Raises:
            NotFound: if the object does not exist.
            ConcurrentEditError: if the object is being dragged, or another
                preview is already open.
        """
        obj = self.store.acquire(object_id, PREVIEW)
        self._target_id = object_id
        self._original = copy.deepcopy(obj)
        self._working = obj
        log.debug("Preview opened on %s", object_id)
        self.preview_changed.emit(self._working)
        return self._working

    def update_preview(self, new_properties: Union[GeometryProperties, Mapping[str, Any]]) -> GeometricObject:
        """Regenerate the working copy from new properties.

        Accepts a complete properties object or a partial mapping such as
        ``{"radius": 40}``.  The store is never touched.

        Raises:
            InvalidStateError: if no preview is open.
            InvalidGeometryError: if the properties are degenerate; the
                working copy keeps its previous value.
        """
        self._require_active("update_preview")
        shape = self._working.type
        if isinstance(new_properties, Mapping):
            try:
                props = update_properties(self._working.properties, new_properties)
            except (KeyError, TypeError, ValueError) as e:
                raise InvalidGeometryError(f"invalid {shape.value} properties: {e}") from e
        else:
            props = coerce_properties(shape, new_properties)
        vertices = generate_vertices(shape, props, self.store.segments)
        self._working = self._working.with_geometry(vertices, props)
        trace(f"preview {self._target_id}: {props}", "PREVIEW")
        self.preview_changed.emit(self._working)
        return self._working

    def apply(self) -> str:
        """Commit the working copy with a single store write.

        Returns:
            The id of the committed object.

        Raises:
            InvalidStateError: if no preview is open.
        """
        self._require_active("apply")
        object_id = self._target_id
        working = self._working
        try:
            self.store.replace(object_id, working.vertices, working.properties, editor=PREVIEW)
        finally:
            self.store.release(object_id, PREVIEW)
            self._reset()
        log.debug("Preview applied to %s", object_id)
        return object_id

    def cancel(self) -> None:
        """Discard the working copy.  The store is left exactly as it was.

        Raises:
            InvalidStateError: if no preview is open.
        """
        self._require_active("cancel")
        object_id = self._target_id
        self.store.release(object_id, PREVIEW)
        self._reset()
        log.debug("Preview cancelled on %s", object_id)

    # ---- Store notifications ----

    def _on_object_removed(self, object_id: str) -> None:
        if self._target_id == object_id:
            log.warning("Preview on %s cancelled: object was deleted", object_id)
            self.store.release(object_id, PREVIEW)
            self._reset()

    def _on_objects_cleared(self) -> None:
        if self.is_active:
            log.warning("Preview on %s cancelled: store was cleared", self._target_id)
            self.store.release(self._target_id, PREVIEW)
            self._reset()
