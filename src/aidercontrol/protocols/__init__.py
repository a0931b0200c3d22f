"""Collaborator protocols for the host editor and picker."""

from aidercontrol.protocols.host import (
    BufferInfo,
    EditorHost,
    EditorMode,
    NotifyLevel,
    Picker,
    PickerItem,
)

__all__ = [
    "BufferInfo",
    "EditorHost",
    "EditorMode",
    "NotifyLevel",
    "Picker",
    "PickerItem",
]
