"""Tests for the session controller.

Tests coverage for:
- src/aidercontrol/session/controller.py
"""

from __future__ import annotations

import asyncio
import logging

import pytest

from aidercontrol.config.schema import CommandConfig, Config
from aidercontrol.diagnostics import Diagnostic, Severity, format_diagnostics
from aidercontrol.protocols.host import BufferInfo, EditorMode, NotifyLevel
from aidercontrol.session.controller import SessionController, valid_buffer_paths
from aidercontrol.session.registry import FileRegistry
from aidercontrol.session.results import ActionStatus
from aidercontrol.terminal.session import TerminalSession
from tests.utils import CANCEL, FakeHost, FakeLauncher, FakePicker, buffer, levels


# =============================================================================
# File membership
# =============================================================================


class TestAddFiles:
    """Tests for add_file / add_files."""

    @pytest.mark.asyncio
    async def test_add_file_dispatches_and_tracks(self, controller, launcher):
        result = await controller.add_file("/project/a.py")

        assert result.status is ActionStatus.OK
        assert result.payload == "/add /project/a.py"
        assert launcher.sent == [("/add /project/a.py", False)]
        assert controller.files == ["/project/a.py"]

    @pytest.mark.asyncio
    async def test_add_file_twice_tracks_once(self, controller, launcher):
        await controller.add_file("/project/a.py")
        await controller.add_file("/project/a.py")

        assert len(launcher.sent) == 2
        assert controller.files == ["/project/a.py"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", [None, ""])
    async def test_add_file_missing_path_is_error(self, controller, host, launcher, path):
        result = await controller.add_file(path)

        assert result.status is ActionStatus.ERROR
        assert result.message == "No file path provided"
        assert levels(host) == [NotifyLevel.ERROR]
        assert launcher.launched == []
        assert controller.files == []

    @pytest.mark.asyncio
    async def test_add_files_single_dispatch(self, controller, launcher, host):
        paths = ["/p/a.py", "/p/b.py", "/p/c.py"]

        result = await controller.add_files(paths)

        assert result.status is ActionStatus.OK
        assert launcher.sent == [("/add /p/a.py /p/b.py /p/c.py", False)]
        assert controller.files == sorted(paths)
        assert host.notifications == [("Added 3 files to aider session", NotifyLevel.INFO)]

    @pytest.mark.asyncio
    async def test_add_files_registry_is_union(self, controller, launcher):
        await controller.add_file("/p/a.py")
        await controller.add_files(["/p/a.py", "/p/b.py", "/p/b.py"])

        assert len(launcher.sent) == 2
        assert controller.files == ["/p/a.py", "/p/b.py"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("paths", [[], None])
    async def test_add_files_empty_is_informational(self, controller, launcher, host, paths):
        result = await controller.add_files(paths)

        assert result.status is ActionStatus.INFO
        assert levels(host) == [NotifyLevel.INFO]
        assert launcher.launched == []
        assert controller.files == []

    @pytest.mark.asyncio
    async def test_add_files_single_delegates_to_add_file(self, controller, launcher, host):
        result = await controller.add_files(["/p/only.py"])

        assert result.status is ActionStatus.OK
        assert launcher.sent == [("/add /p/only.py", False)]
        # No summary notification for a single file
        assert host.notifications == []

    @pytest.mark.asyncio
    async def test_add_files_rejects_empty_entry(self, controller, launcher):
        result = await controller.add_files(["/p/a.py", ""])

        assert result.status is ActionStatus.ERROR
        assert launcher.launched == []
        assert controller.files == []

    @pytest.mark.asyncio
    async def test_launch_failure_leaves_registry_untouched(self, host, picker, config):
        terminal = TerminalSession(FakeLauncher(fail=True), config)
        controller = SessionController(host, terminal, picker)

        result = await controller.add_files(["/p/a.py", "/p/b.py"])

        assert result.status is ActionStatus.ERROR
        assert "resource exhausted" in result.message
        assert levels(host) == [NotifyLevel.ERROR]
        assert controller.files == []


class TestDropAndReset:
    """Tests for drop_file, add_read_only_file and reset_session."""

    @pytest.mark.asyncio
    async def test_drop_tracked_file(self, controller, launcher):
        await controller.add_files(["/p/a.py", "/p/b.py"])

        result = await controller.drop_file("/p/a.py")

        assert result.status is ActionStatus.OK
        assert launcher.sent[-1] == ("/drop /p/a.py", False)
        assert controller.files == ["/p/b.py"]

    @pytest.mark.asyncio
    async def test_drop_unknown_file_succeeds(self, controller, launcher, host):
        result = await controller.drop_file("/never/added.py")

        assert result.status is ActionStatus.OK
        assert launcher.sent == [("/drop /never/added.py", False)]
        assert "/never/added.py" not in controller.files
        assert host.notifications == []

    @pytest.mark.asyncio
    async def test_drop_missing_path_is_error(self, controller, launcher):
        result = await controller.drop_file(None)

        assert result.status is ActionStatus.ERROR
        assert launcher.launched == []

    @pytest.mark.asyncio
    async def test_reset_clears_registry(self, controller, launcher):
        await controller.add_files(["/p/a.py", "/p/b.py"])
        dispatched = len(launcher.sent)

        result = await controller.reset_session()

        assert result.status is ActionStatus.OK
        assert launcher.sent[dispatched:] == [("/reset", False)]
        assert controller.files == []

    @pytest.mark.asyncio
    async def test_reset_on_empty_registry(self, controller, launcher):
        await controller.reset_session()

        assert launcher.sent == [("/reset", False)]
        assert controller.files == []

    @pytest.mark.asyncio
    async def test_read_only_is_not_tracked(self, controller, launcher, host):
        result = await controller.add_read_only_file()

        assert result.status is ActionStatus.OK
        assert launcher.sent == [("/read-only /project/src/main.py", False)]
        assert controller.files == []

    @pytest.mark.asyncio
    async def test_read_only_without_file_is_informational(self, controller, launcher, host):
        host.current_file = None

        result = await controller.add_read_only_file()

        assert result.status is ActionStatus.INFO
        assert host.notifications == [("No valid file in current buffer", NotifyLevel.INFO)]
        assert launcher.launched == []

    @pytest.mark.asyncio
    async def test_add_and_drop_current_file(self, controller, launcher):
        await controller.add_current_file()
        assert controller.files == ["/project/src/main.py"]

        await controller.drop_current_file()
        assert controller.files == []
        assert [text for text, _ in launcher.sent] == [
            "/add /project/src/main.py",
            "/drop /project/src/main.py",
        ]


class TestAddAllBuffers:
    """Tests for buffer filtering and add_all_buffers."""

    def test_valid_buffer_paths_filters(self):
        buffers = [
            buffer("/p/a.py"),
            buffer("/p/b.py", listed=False),
            buffer("/p/term", name="term://bash"),
            buffer("/p/tree", name="NvimTree_1"),
            buffer("/p/a.py"),
        ]

        assert valid_buffer_paths(buffers, ["^term://", "NvimTree_"]) == ["/p/a.py"]

    def test_valid_buffer_paths_skips_non_files(self):
        assert valid_buffer_paths([BufferInfo(name="[Scratch]", path=None)], []) == []

    def test_invalid_ignore_pattern_is_skipped(self):
        assert valid_buffer_paths([buffer("/p/a.py")], ["("]) == ["/p/a.py"]

    @pytest.mark.asyncio
    async def test_add_all_buffers(self, controller, launcher, host):
        host.buffers = [buffer("/p/a.py"), buffer("/p/b.py"), buffer("/x", name="term://sh")]

        result = await controller.add_all_buffers()

        assert result.status is ActionStatus.OK
        assert launcher.sent == [("/add /p/a.py /p/b.py", False)]
        assert controller.files == ["/p/a.py", "/p/b.py"]

    @pytest.mark.asyncio
    async def test_add_all_buffers_none_valid(self, controller, launcher, host):
        host.buffers = [buffer("/x", name="term://sh")]

        result = await controller.add_all_buffers()

        assert result.status is ActionStatus.INFO
        assert host.notifications == [("No valid buffers found to add", NotifyLevel.INFO)]
        assert launcher.launched == []

    @pytest.mark.asyncio
    async def test_ignore_buffers_override(self, controller, launcher, host):
        host.buffers = [buffer("/p/a.py"), buffer("/p/test_a.py", name="test_a.py")]

        await controller.add_all_buffers({"ignore_buffers": ["^test_"]})

        assert controller.files == ["/p/a.py"]


# =============================================================================
# Sending text
# =============================================================================


class TestSendToTerminal:
    """Tests for selection, typed and explicit sends."""

    @pytest.mark.asyncio
    async def test_selection_with_prompt(self, controller, launcher, host):
        host.current_mode = EditorMode.VISUAL_LINE
        host.selected = ["foo", "bar"]
        host.respond("fix this")

        result = await controller.send_to_terminal()

        assert result.status is ActionStatus.OK
        assert launcher.sent == [("foo\nbar\n> fix this", True)]
        assert host.prompts == [("Add a prompt to your selection (empty to skip):", None)]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "mode", [EditorMode.VISUAL_CHAR, EditorMode.VISUAL_LINE, EditorMode.VISUAL_BLOCK]
    )
    async def test_selection_empty_prompt_sends_unchanged(self, controller, launcher, host, mode):
        host.current_mode = mode
        host.selected = ["foo", "bar"]
        host.respond("")

        await controller.send_to_terminal()

        assert launcher.sent == [("foo\nbar", True)]

    @pytest.mark.asyncio
    async def test_selection_cancelled_sends_nothing(self, controller, launcher, host):
        host.current_mode = EditorMode.VISUAL_CHAR
        host.selected = ["foo", "bar"]
        host.respond(CANCEL)

        result = await controller.send_to_terminal()

        assert result.status is ActionStatus.CANCELLED
        assert launcher.launched == []
        assert host.notifications == []

    @pytest.mark.asyncio
    async def test_selection_wins_over_text_argument(self, controller, launcher, host):
        host.current_mode = EditorMode.VISUAL_LINE
        host.selected = ["selected"]
        host.respond("")

        await controller.send_to_terminal("ignored")

        assert launcher.sent == [("selected", True)]

    @pytest.mark.asyncio
    async def test_typed_prompt_is_whole_payload(self, controller, launcher, host):
        host.respond("explain the registry")

        result = await controller.send_to_terminal()

        assert result.payload == "explain the registry"
        assert launcher.sent == [("explain the registry", False)]
        assert host.prompts == [("Send to Aider: ", None)]

    @pytest.mark.asyncio
    async def test_typed_prompt_cancelled(self, controller, launcher, host):
        host.respond(CANCEL)

        result = await controller.send_to_terminal()

        assert result.status is ActionStatus.CANCELLED
        assert launcher.launched == []

    @pytest.mark.asyncio
    async def test_explicit_text_skips_prompt(self, controller, launcher, host):
        await controller.send_to_terminal("hello aider")

        assert launcher.sent == [("hello aider", False)]
        assert host.prompts == []


class TestSendBuffer:
    """Tests for send_buffer_with_prompt."""

    @pytest.mark.asyncio
    async def test_buffer_with_prompt(self, controller, launcher, host):
        host.lines = ["def f():", "    return 1"]
        host.respond("add a docstring")

        await controller.send_buffer_with_prompt()

        assert launcher.sent == [("def f():\n    return 1\n> add a docstring", True)]
        assert host.prompts == [("Add a prompt to your buffer (empty to skip):", None)]

    @pytest.mark.asyncio
    async def test_buffer_empty_prompt(self, controller, launcher, host):
        host.lines = ["a", "b"]
        host.respond("")

        await controller.send_buffer_with_prompt()

        assert launcher.sent == [("a\nb", True)]

    @pytest.mark.asyncio
    async def test_buffer_cancelled(self, controller, launcher, host):
        host.respond(CANCEL)

        result = await controller.send_buffer_with_prompt()

        assert result.status is ActionStatus.CANCELLED
        assert launcher.launched == []


class TestSendDiagnostics:
    """Tests for send_diagnostics_with_prompt."""

    @pytest.fixture
    def diagnostics(self):
        return [
            Diagnostic(lnum=4, col=2, message="undefined name 'x'", severity=Severity.ERROR),
            Diagnostic(lnum=0, col=0, message="unused import", severity=Severity.WARNING),
        ]

    @pytest.mark.asyncio
    async def test_no_diagnostics_is_informational(self, controller, launcher, host):
        result = await controller.send_diagnostics_with_prompt()

        assert result.status is ActionStatus.INFO
        assert host.notifications == [
            ("No diagnostics found in the current buffer.", NotifyLevel.INFO)
        ]
        assert host.prompts == []
        assert launcher.launched == []

    @pytest.mark.asyncio
    async def test_prompt_is_prepended(self, controller, launcher, host, diagnostics):
        host.diags = diagnostics
        host.respond("please review")

        await controller.send_diagnostics_with_prompt()

        report = format_diagnostics(diagnostics)
        assert launcher.sent == [(f"please review\n{report}", True)]

    @pytest.mark.asyncio
    async def test_prompt_default_names_buffer(self, controller, host, diagnostics):
        host.diags = diagnostics
        host.respond("")

        await controller.send_diagnostics_with_prompt()

        assert host.prompts == [
            ("Add a prompt for the diagnostics:", "Here are the diagnostics for src/main.py:")
        ]

    @pytest.mark.asyncio
    async def test_empty_prompt_sends_report_only(self, controller, launcher, host, diagnostics):
        host.diags = diagnostics
        host.respond("")

        await controller.send_diagnostics_with_prompt()

        assert launcher.sent == [(format_diagnostics(diagnostics), True)]

    @pytest.mark.asyncio
    async def test_cancelled(self, controller, launcher, host, diagnostics):
        host.diags = diagnostics
        host.respond(CANCEL)

        result = await controller.send_diagnostics_with_prompt()

        assert result.status is ActionStatus.CANCELLED
        assert launcher.launched == []
        assert host.notifications == []


# =============================================================================
# Commands and picker
# =============================================================================


class TestCommands:
    """Tests for send_command and open_command_picker."""

    @pytest.mark.asyncio
    async def test_send_command_by_name_and_token(self, controller, launcher):
        await controller.send_command("ask", "what is this?")
        await controller.send_command("/diff")

        assert launcher.sent == [("/ask what is this?", False), ("/diff", False)]

    @pytest.mark.asyncio
    async def test_unknown_command_is_error(self, controller, launcher, host):
        result = await controller.send_command("nope")

        assert result.status is ActionStatus.ERROR
        assert host.notifications == [("Unknown aider command: nope", NotifyLevel.ERROR)]
        assert launcher.launched == []

    @pytest.mark.asyncio
    async def test_notifications_are_logged_at_matching_level(self, controller, caplog):
        caplog.set_level(logging.DEBUG, logger="aidercontrol")

        await controller.send_command("nope")

        assert ("Unknown aider command: nope", logging.ERROR) in [
            (r.getMessage(), r.levelno) for r in caplog.records
        ]

    @pytest.mark.asyncio
    async def test_uncatalogued_slash_command_passes_through(self, controller, launcher, host):
        load = await controller.send_command("/load", "cmds.txt")
        ok = await controller.send_command("/ok")

        assert load.status is ActionStatus.OK
        assert ok.status is ActionStatus.OK
        assert launcher.sent == [("/load cmds.txt", False), ("/ok", False)]
        assert host.notifications == []

    @pytest.mark.asyncio
    async def test_bare_slash_is_error(self, controller, launcher):
        result = await controller.send_command("/")

        assert result.status is ActionStatus.ERROR
        assert launcher.launched == []

    @pytest.mark.asyncio
    async def test_picker_direct_command(self, host, terminal, launcher):
        picker = FakePicker("/undo")
        controller = SessionController(host, terminal, picker)

        result = await controller.open_command_picker()

        assert result.status is ActionStatus.OK
        assert launcher.sent == [("/undo", False)]
        assert host.prompts == []
        assert picker.close_calls == 1

    @pytest.mark.asyncio
    async def test_picker_input_command(self, host, terminal, launcher):
        picker = FakePicker("/ask")
        controller = SessionController(host, terminal, picker)
        host.respond("how does toggling work?")

        await controller.open_command_picker()

        assert host.prompts == [("Enter input for `/ask` (empty to skip):", None)]
        assert launcher.sent == [("/ask how does toggling work?", False)]
        assert picker.close_calls == 1

    @pytest.mark.asyncio
    async def test_picker_input_empty(self, host, terminal, launcher):
        controller = SessionController(host, terminal, FakePicker("/commit"))
        host.respond("")

        await controller.open_command_picker()

        assert launcher.sent == [("/commit", False)]

    @pytest.mark.asyncio
    async def test_picker_input_cancelled(self, host, terminal, launcher):
        picker = FakePicker("/web")
        controller = SessionController(host, terminal, picker)
        host.respond(CANCEL)

        result = await controller.open_command_picker()

        assert result.status is ActionStatus.CANCELLED
        assert launcher.launched == []
        assert picker.close_calls == 1

    @pytest.mark.asyncio
    async def test_picker_dismissed(self, controller, picker, launcher):
        result = await controller.open_command_picker()

        assert result.status is ActionStatus.CANCELLED
        assert launcher.launched == []
        assert picker.close_calls == 1

    @pytest.mark.asyncio
    async def test_picker_closed_when_launch_fails(self, host, config):
        picker = FakePicker("/clear")
        controller = SessionController(host, TerminalSession(FakeLauncher(fail=True), config), picker)

        result = await controller.open_command_picker()

        assert result.status is ActionStatus.ERROR
        assert picker.close_calls == 1

    @pytest.mark.asyncio
    async def test_picker_gets_config_override(self, controller, picker):
        await controller.open_command_picker({"picker": {"title": "Pick one"}})

        assert picker.configs[0].title == "Pick one"
        assert {item.category for item in picker.items} == {"input", "direct"}

    @pytest.mark.asyncio
    async def test_user_registered_command(self, host, picker, launcher):
        config = Config(commands=(CommandConfig(name="review", token="/ask", input=True),))
        controller = SessionController(host, TerminalSession(launcher, config), picker)

        await controller.send_command("review", "the terminal module")

        assert launcher.sent == [("/ask the terminal module", False)]


# =============================================================================
# Toggle and auto-managed context
# =============================================================================


class TestToggle:
    """Tests for toggling and auto-managed context."""

    @pytest.mark.asyncio
    async def test_toggle_starts_then_hides(self, controller, launcher):
        first = await controller.toggle_terminal()
        second = await controller.toggle_terminal()

        assert len(launcher.launched) == 1
        assert first.message == "Aider terminal visible"
        assert second.message == "Aider terminal hidden"
        assert launcher.processes[0].visible is False

    @pytest.mark.asyncio
    async def test_toggle_with_all_buffers(self, controller, launcher, host):
        host.buffers = [buffer("/p/a.py"), buffer("/p/b.py")]

        result = await controller.toggle_with_all_buffers()

        assert result.status is ActionStatus.OK
        _, config = launcher.launched[0]
        assert config.auto_manage_context is True
        assert launcher.sent == [("/add /p/a.py /p/b.py", False)]
        assert controller.files == ["/p/a.py", "/p/b.py"]

    @pytest.mark.asyncio
    async def test_toggle_with_all_buffers_does_not_mutate_base(self, controller, terminal):
        await controller.toggle_with_all_buffers()

        assert terminal.base_config.auto_manage_context is False
        assert terminal.config.auto_manage_context is True

    @pytest.mark.asyncio
    async def test_plain_toggle_adds_nothing(self, controller, launcher, host):
        host.buffers = [buffer("/p/a.py")]

        await controller.toggle_terminal()

        assert launcher.sent == []

    @pytest.mark.asyncio
    async def test_toggle_launch_failure(self, host, picker, config):
        controller = SessionController(host, TerminalSession(FakeLauncher(fail=True), config), picker)

        result = await controller.toggle_terminal()

        assert result.status is ActionStatus.ERROR
        assert levels(host) == [NotifyLevel.ERROR]

    @pytest.mark.asyncio
    async def test_buffer_events_when_auto_managed(self, controller, launcher):
        await controller.toggle_with_all_buffers()

        opened = await controller.buffer_opened(buffer("/p/new.py"))
        again = await controller.buffer_opened(buffer("/p/new.py"))
        closed = await controller.buffer_closed(buffer("/p/new.py"))

        assert opened.status is ActionStatus.OK
        assert again.status is ActionStatus.SKIPPED
        assert closed.status is ActionStatus.OK
        assert launcher.sent == [("/add /p/new.py", False), ("/drop /p/new.py", False)]
        assert controller.files == []

    @pytest.mark.asyncio
    async def test_buffer_events_ignored_without_auto_manage(self, controller, launcher):
        await controller.toggle_terminal()

        result = await controller.buffer_opened(buffer("/p/new.py"))

        assert result.status is ActionStatus.SKIPPED
        assert launcher.sent == []

    @pytest.mark.asyncio
    async def test_buffer_opened_respects_ignore_patterns(self, controller, launcher):
        await controller.toggle_with_all_buffers()

        result = await controller.buffer_opened(buffer("/p/x", name="term://zsh"))

        assert result.status is ActionStatus.SKIPPED
        assert launcher.sent == []


# =============================================================================
# Interleaving
# =============================================================================


class TestInterleaving:
    """Operations started while a prompt is pending."""

    @pytest.mark.asyncio
    async def test_add_completes_while_prompt_pending(self, launcher, picker, config):
        gate: asyncio.Future[str | None] = asyncio.get_running_loop().create_future()

        class GatedHost(FakeHost):
            async def prompt_for_text(self, prompt, *, default=None):
                self.prompts.append((prompt, default))
                return await gate

        host = GatedHost()
        controller = SessionController(host, TerminalSession(launcher, config), picker)

        send = asyncio.create_task(controller.send_buffer_with_prompt())
        await asyncio.sleep(0)
        await controller.add_file("/p/a.py")
        gate.set_result("")
        await send

        assert len(launcher.launched) == 1
        assert [text for text, _ in launcher.sent] == ["/add /p/a.py", "line one\nline two"]

    @pytest.mark.asyncio
    async def test_shared_registry(self, host, terminal, picker):
        registry = FileRegistry()
        controller = SessionController(host, terminal, picker, registry=registry)

        await controller.add_file("/p/a.py")

        assert "/p/a.py" in registry
