"""
store package

Object store and the two edit sessions that write to it.
"""

from store.object_store import DRAG, PREVIEW, GeometryObjectStore
from store.preview import EditPreviewController
from store.drag import DragController

__all__ = [
    "DRAG",
    "PREVIEW",
    "GeometryObjectStore",
    "EditPreviewController",
    "DragController",
]
