"""Drag-and-drop target resolution over rendered slots."""

from blockforge.dragdrop.geometry import Point, Rect
from blockforge.dragdrop.resolver import DragPayload, DropAction, DropTarget, DropTargetResolver
from blockforge.dragdrop.slots import Axis, DropHost, Slot, SlotKind, SlotLayout, build_layout

__all__ = [
    "Axis",
    "DragPayload",
    "DropAction",
    "DropHost",
    "DropTarget",
    "DropTargetResolver",
    "Point",
    "Rect",
    "Slot",
    "SlotKind",
    "SlotLayout",
    "build_layout",
]
