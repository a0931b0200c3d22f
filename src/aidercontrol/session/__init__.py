"""Session layer: file registry, input resolution and the controller."""

from aidercontrol.session.controller import SessionController, valid_buffer_paths
from aidercontrol.session.registry import FileRegistry
from aidercontrol.session.resolver import (
    InputResolver,
    PayloadSource,
    PendingPrompt,
    ResolvedInput,
)
from aidercontrol.session.results import ActionResult, ActionStatus

__all__ = [
    "ActionResult",
    "ActionStatus",
    "FileRegistry",
    "InputResolver",
    "PayloadSource",
    "PendingPrompt",
    "ResolvedInput",
    "SessionController",
    "valid_buffer_paths",
]
