"""
canvas/scene.py

Pointer and keyboard routing for the drawing surface.

GeometryScene receives raw screen-space events from the view, maps them to
grid coordinates and drives the store: drawing new shapes, selecting,
dragging, clipboard and navigation.  It never renders anything itself;
renderers listen to the store and to the signals below.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from PyQt6.QtCore import QObject, Qt, pyqtSignal

from debug_trace import trace
from models import DRAWING_MODES, Mode, Point
from geometry.coords import CoordinateMapper
from geometry.errors import InvalidGeometryError
from geometry.hit_test import find_object_at
from store.drag import DragController
from store.object_store import GeometryObjectStore

log = logging.getLogger(__name__)

# Pan direction per navigation key, in navigation steps
_PAN_KEYS = {
    Qt.Key.Key_W: (0, -1),
    Qt.Key.Key_S: (0, 1),
    Qt.Key.Key_A: (-1, 0),
    Qt.Key.Key_D: (1, 0),
    Qt.Key.Key_Up: (0, -1),
    Qt.Key.Key_Down: (0, 1),
    Qt.Key.Key_Left: (-1, 0),
    Qt.Key.Key_Right: (1, 0),
}


def _get_readout_interval_ms() -> int:
    """Readout throttle from settings. Default: 50 ms."""
    from settings import get_settings
    return get_settings().settings.readout.interval_ms


class GeometryScene(QObject):
    """
    Interaction state machine between the view and the store.

    In SELECT mode a press on an object selects it and starts a drag; in a
    drawing mode a press records the start point and the release creates the
    shape.

    Signals:
        pointer_moved(object): Grid Point under the pointer, on every move
        readout_changed(object): Grid Point for coordinate readouts, throttled
        mode_changed(str): The interaction mode changed
        drawing_finished(str): A shape was created by drawing (its id)
        drawing_rejected(str): A drawing gesture was degenerate (reason)
    """

    pointer_moved = pyqtSignal(object)
    readout_changed = pyqtSignal(object)
    mode_changed = pyqtSignal(str)
    drawing_finished = pyqtSignal(str)
    drawing_rejected = pyqtSignal(str)

    def __init__(
        self,
        store: GeometryObjectStore,
        mapper: Optional[CoordinateMapper] = None,
        drag: Optional[DragController] = None,
        clock: Callable[[], float] = time.monotonic,
        readout_interval_ms: Optional[int] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.store = store
        self.mapper = mapper if mapper is not None else CoordinateMapper.from_settings()
        self.drag = drag if drag is not None else DragController(store, self)
        self.mode = Mode.SELECT
        self._clock = clock
        self._readout_interval = (
            readout_interval_ms if readout_interval_ms is not None else _get_readout_interval_ms()
        )
        self._last_readout: Optional[float] = None
        self._pending_readout: Optional[Point] = None
        self._pointer: Optional[Point] = None
        self._draw_start: Optional[Point] = None

    # ---- Mode ----

    def set_mode(self, mode: str) -> None:
        """Set the interaction mode.  Any draw in progress is dropped."""
        if mode != Mode.SELECT and mode not in DRAWING_MODES:
            raise ValueError(f"unknown mode: {mode!r}")
        self._draw_start = None
        if mode != self.mode:
            self.mode = mode
            self.mode_changed.emit(mode)

    @property
    def is_drawing(self) -> bool:
        return self._draw_start is not None

    @property
    def pointer(self) -> Optional[Point]:
        """Last grid position seen under the pointer."""
        return self._pointer

    # ---- Pointer events ----

    def mouse_press(self, screen_pos: Any, button: Qt.MouseButton = Qt.MouseButton.LeftButton) -> None:
        if button != Qt.MouseButton.LeftButton:
            return
        grid = self.mapper.to_grid(screen_pos)
        self._pointer = grid

        if self.mode in DRAWING_MODES:
            self._draw_start = grid
            trace(f"draw start {self.mode} at ({grid.x}, {grid.y})", "SCENE")
            return

        hit = find_object_at(self.store.objects(), grid)
        if hit is None:
            self.store.clear_selection()
            return
        self.store.select(hit.id)
        if not self.store.is_locked(hit.id):
            self.drag.begin(hit.id, grid)

    def mouse_move(self, screen_pos: Any) -> None:
        grid = self.mapper.to_grid(screen_pos)
        self._pointer = grid
        self.pointer_moved.emit(grid)
        self._throttle_readout(grid)
        if self.drag.is_active:
            self.drag.update(grid)

    def mouse_release(self, screen_pos: Any, button: Qt.MouseButton = Qt.MouseButton.LeftButton) -> Optional[str]:
        """Finish the current gesture.

        Returns:
            The id of a newly drawn shape, if this release created one.
        """
        if button != Qt.MouseButton.LeftButton:
            return None
        grid = self.mapper.to_grid(screen_pos)
        self._pointer = grid
        self.flush_readout()

        if self.drag.is_active:
            self.drag.update(grid)
            self.drag.end()
            return None

        if self._draw_start is None:
            return None
        start, self._draw_start = self._draw_start, None
        shape_type = DRAWING_MODES[self.mode]
        try:
            new_id = self.store.finish_drawing(shape_type, start, grid)
        except InvalidGeometryError as e:
            log.debug("Drawing rejected: %s", e)
            self.drawing_rejected.emit(str(e))
            raise
        self.drawing_finished.emit(new_id)
        return new_id

    # ---- Readout throttling ----

    def _throttle_readout(self, grid: Point) -> None:
        now = self._clock()
        if self._last_readout is None or (now - self._last_readout) * 1000 >= self._readout_interval:
            self._last_readout = now
            self._pending_readout = None
            self.readout_changed.emit(grid)
        else:
            self._pending_readout = grid

    def flush_readout(self) -> None:
        """Emit a readout held back by the throttle, if any."""
        if self._pending_readout is not None:
            grid, self._pending_readout = self._pending_readout, None
            self._last_readout = self._clock()
            self.readout_changed.emit(grid)

    # ---- Keyboard ----

    def key_press(self, key: Qt.Key) -> bool:
        """Handle a key.  Returns True if the key was consumed."""
        if key == Qt.Key.Key_Escape:
            self.cancel_interaction()
            return True

        if key in _PAN_KEYS:
            sx, sy = _PAN_KEYS[key]
            self.mapper.pan_step(sx, sy)
            return True

        if key == Qt.Key.Key_Space:
            self.mapper.reset_pan()
            return True

        selected = self.store.selected_id
        if key in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace) and selected is not None:
            self.store.delete(selected)
            return True

        if key == Qt.Key.Key_C and selected is not None:
            self.store.copy(selected)
            return True

        if key == Qt.Key.Key_V and self.store.has_clipboard:
            center = self._pointer if self._pointer is not None else Point(0, 0)
            new_id = self.store.paste_at(center)
            self.store.select(new_id)
            return True

        return False

    def cancel_interaction(self) -> None:
        """Escape: drop any draw or drag, clear the selection, back to SELECT."""
        self._draw_start = None
        if self.drag.is_active:
            self.drag.cancel()
        self.store.clear_selection()
        self.set_mode(Mode.SELECT)
