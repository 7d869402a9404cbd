"""
properties/form.py

Flat form fields for numeric property editing.

Property panels show one numeric field per value (``center_x``, ``radius``,
...).  This module converts between those fields and the shape properties
dataclasses, and binds a field edit to the edit preview session.

Fields per shape:
    point      center_x, center_y
    line       start_x, start_y, end_x, end_y
    circle     center_x, center_y, radius
    rectangle  center_x, center_y, width, height
    diamond    center_x, center_y, width, height
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple, Union

from PyQt6.QtCore import QObject, pyqtSignal

from models import (
    GeometricObject,
    GeometryProperties,
    Point,
    ShapeType,
    fields_of,
    make_properties,
    resolve_shape_alias,
)
from geometry.errors import InvalidGeometryError, InvalidStateError
from store.preview import EditPreviewController

FORM_FIELDS: Dict[ShapeType, Tuple[str, ...]] = {
    ShapeType.POINT: ("center_x", "center_y"),
    ShapeType.LINE: ("start_x", "start_y", "end_x", "end_y"),
    ShapeType.CIRCLE: ("center_x", "center_y", "radius"),
    ShapeType.RECTANGLE: ("center_x", "center_y", "width", "height"),
    ShapeType.DIAMOND: ("center_x", "center_y", "width", "height"),
}


def form_from_properties(props: GeometryProperties) -> Dict[str, float]:
    """Flatten properties into form fields."""
    out: Dict[str, float] = {}
    for name in fields_of(props):
        value = getattr(props, name)
        if isinstance(value, Point):
            out[f"{name}_x"] = value.x
            out[f"{name}_y"] = value.y
        else:
            out[name] = value
    return out


def form_from_object(obj: GeometricObject) -> Dict[str, float]:
    return form_from_properties(obj.properties)


def _group_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """{"center_x": 1, "center_y": 2, "radius": 3} -> {"center": (1, 2), "radius": 3}.

    A point given by only one coordinate is returned as ("x", value) or
    ("y", value) so callers can merge it with the current point.
    """
    grouped: Dict[str, Any] = {}
    for key, value in fields.items():
        if key.endswith("_x") or key.endswith("_y"):
            base, axis = key[:-2], key[-1]
            grouped.setdefault(base, {})[axis] = float(value)
        else:
            grouped[key] = float(value)
    return grouped


def properties_from_form(shape_type: Union[str, ShapeType], fields: Mapping[str, Any]) -> GeometryProperties:
    """Build properties from a complete set of form fields.

    Raises:
        InvalidGeometryError: on missing, unknown or non-numeric fields.
    """
    st = resolve_shape_alias(shape_type)
    if st is None:
        raise InvalidGeometryError(f"unknown shape type: {shape_type!r}")
    unknown = set(fields) - set(FORM_FIELDS[st])
    missing = set(FORM_FIELDS[st]) - set(fields)
    if unknown or missing:
        raise InvalidGeometryError(
            f"{st.value} form fields mismatch: missing {sorted(missing)}, unknown {sorted(unknown)}"
        )
    try:
        return make_properties(st, _group_fields(fields))
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidGeometryError(f"invalid {st.value} form: {e}") from e


def changes_from_fields(props: GeometryProperties, fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Partial property changes for a subset of form fields, merged onto *props*."""
    valid = FORM_FIELDS[props.shape]
    unknown = set(fields) - set(valid)
    if unknown:
        raise InvalidGeometryError(f"unknown {props.shape.value} form fields: {sorted(unknown)}")
    try:
        grouped = _group_fields(fields)
    except (TypeError, ValueError) as e:
        raise InvalidGeometryError(f"non-numeric form value: {e}") from e
    changes: Dict[str, Any] = {}
    for name, value in grouped.items():
        if isinstance(value, dict):
            current: Point = getattr(props, name)
            changes[name] = Point(value.get("x", current.x), value.get("y", current.y))
        else:
            changes[name] = value
    return changes


class PropertyForm(QObject):
    """
    Form model bound to the edit preview session.

    Opening the form on an object opens a preview; every field edit becomes
    one ``update_preview``; Apply and Cancel end the session.

    Signals:
        fields_changed(dict): Current field values (working copy), or {} when closed
        error_changed(str): Message for the last rejected edit ("" when cleared)
    """

    fields_changed = pyqtSignal(dict)
    error_changed = pyqtSignal(str)

    def __init__(self, preview: EditPreviewController, parent=None):
        super().__init__(parent)
        self.preview = preview
        self._error = ""
        preview.preview_changed.connect(self._on_preview_changed)

    @property
    def is_open(self) -> bool:
        return self.preview.is_active

    @property
    def fields(self) -> Dict[str, float]:
        working = self.preview.working_copy
        return form_from_object(working) if working is not None else {}

    @property
    def field_names(self) -> Tuple[str, ...]:
        working = self.preview.working_copy
        return FORM_FIELDS[working.type] if working is not None else ()

    @property
    def error(self) -> str:
        return self._error

    def _set_error(self, message: str) -> None:
        if message != self._error:
            self._error = message
            self.error_changed.emit(message)

    def open(self, object_id: str) -> Dict[str, float]:
        self.preview.open(object_id)
        self._set_error("")
        return self.fields

    def set_field(self, name: str, value: Any) -> Dict[str, float]:
        """Apply one field edit to the preview.

        A degenerate value (e.g. radius 0) is reported through
        ``error_changed`` and re-raised; the working copy is left as it was.

        Raises:
            InvalidStateError: if the form is not open.
            InvalidGeometryError: if the edit is rejected.
        """
        return self.set_fields({name: value})

    def set_fields(self, fields: Mapping[str, Any]) -> Dict[str, float]:
        working = self.preview.working_copy
        if working is None:
            raise InvalidStateError("set_field() called with no form open")
        try:
            changes = changes_from_fields(working.properties, fields)
            self.preview.update_preview(changes)
        except InvalidGeometryError as e:
            self._set_error(str(e))
            raise
        self._set_error("")
        return self.fields

    def apply(self) -> str:
        return self.preview.apply()

    def cancel(self) -> None:
        self.preview.cancel()

    def _on_preview_changed(self, working: Optional[GeometricObject]) -> None:
        if working is None:
            self._set_error("")
            self.fields_changed.emit({})
        else:
            self.fields_changed.emit(form_from_object(working))
