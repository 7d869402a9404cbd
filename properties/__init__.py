"""
properties package

Numeric property editing for the selected shape.
"""

from properties.form import (
    FORM_FIELDS,
    PropertyForm,
    form_from_object,
    form_from_properties,
    properties_from_form,
)

__all__ = [
    "FORM_FIELDS",
    "PropertyForm",
    "form_from_object",
    "form_from_properties",
    "properties_from_form",
]
