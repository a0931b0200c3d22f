"""Shared fakes for aidercontrol tests."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from aidercontrol.config.schema import Config, PickerConfig
from aidercontrol.diagnostics import Diagnostic
from aidercontrol.errors import ProcessCreationFailed
from aidercontrol.protocols.host import BufferInfo, EditorMode, NotifyLevel, PickerItem

# Scripted prompt response meaning "the user cancelled"
CANCEL = None


class FakeHost:
    """EditorHost with scripted state and prompt responses.

    Attributes:
        prompts: (prompt, default) for every prompt_for_text call.
        notifications: (message, level) for every notify call.
    """

    def __init__(
        self,
        *,
        mode: EditorMode = EditorMode.NORMAL,
        lines: Sequence[str] = ("line one", "line two"),
        selected: Sequence[str] = (),
        name: str = "src/main.py",
        file_type: str | None = "python",
        diagnostics: Sequence[Diagnostic] = (),
        current_file: str | None = "/project/src/main.py",
        buffers: Sequence[BufferInfo] = (),
        responses: Sequence[str | None] = (),
    ) -> None:
        self.current_mode = mode
        self.lines = list(lines)
        self.selected = list(selected)
        self.name = name
        self.ft = file_type
        self.diags = list(diagnostics)
        self.current_file = current_file
        self.buffers = list(buffers)
        self.responses = list(responses)
        self.prompts: list[tuple[str, str | None]] = []
        self.notifications: list[tuple[str, NotifyLevel]] = []

    def respond(self, *responses: str | None) -> None:
        self.responses.extend(responses)

    def mode(self) -> EditorMode:
        return self.current_mode

    def buffer_lines(self) -> list[str]:
        return list(self.lines)

    def selected_lines(self) -> list[str]:
        return list(self.selected)

    def buffer_name(self) -> str:
        return self.name

    def file_type(self) -> str | None:
        return self.ft

    def diagnostics(self) -> list[Diagnostic]:
        return list(self.diags)

    def current_file_path(self) -> str | None:
        return self.current_file

    def list_buffers(self) -> list[BufferInfo]:
        return list(self.buffers)

    def notify(self, message: str, level: NotifyLevel = NotifyLevel.INFO) -> None:
        self.notifications.append((message, level))

    async def prompt_for_text(self, prompt: str, *, default: str | None = None) -> str | None:
        self.prompts.append((prompt, default))
        await asyncio.sleep(0)
        if not self.responses:
            raise AssertionError(f"Unexpected prompt: {prompt!r}")
        return self.responses.pop(0)


class FakeProcess:
    """ProcessHandle recording (text, new_context) for every line."""

    def __init__(self) -> None:
        self.lines: list[tuple[str, bool]] = []
        self.alive = True
        self.visible = False
        self.closed = False

    async def send_line(self, text: str, *, new_context: bool = False) -> None:
        self.lines.append((text, new_context))

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    async def close(self) -> None:
        self.closed = True
        self.alive = False


class FakeLauncher:
    """ProcessLauncher that yields to the loop before returning a FakeProcess."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.launched: list[tuple[list[str], Config]] = []
        self.processes: list[FakeProcess] = []

    async def launch(self, argv: list[str], config: Config) -> FakeProcess:
        self.launched.append((argv, config))
        await asyncio.sleep(0)
        if self.fail:
            raise ProcessCreationFailed(argv, "resource exhausted")
        process = FakeProcess()
        self.processes.append(process)
        return process

    @property
    def sent(self) -> list[tuple[str, bool]]:
        """Every line written to any process, in order."""
        return [line for process in self.processes for line in process.lines]


class FakePicker:
    """Picker returning the item whose text matches ``choice``."""

    def __init__(self, choice: str | None = None) -> None:
        self.choice = choice
        self.items: list[PickerItem] = []
        self.configs: list[PickerConfig] = []
        self.close_calls = 0

    async def choose(self, items: Sequence[PickerItem], config: PickerConfig) -> PickerItem | None:
        self.items = list(items)
        self.configs.append(config)
        await asyncio.sleep(0)
        for item in items:
            if item.text == self.choice:
                return item
        return None

    def close(self) -> None:
        self.close_calls += 1


def levels(host: FakeHost) -> list[NotifyLevel]:
    return [level for _, level in host.notifications]


def buffer(path: str, name: str | None = None, **kwargs: Any) -> BufferInfo:
    return BufferInfo(name=name or path, path=path, **kwargs)
