"""Root pytest configuration for all tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from aidercontrol.config import Config, reset_config
from aidercontrol.session.controller import SessionController
from aidercontrol.terminal.session import TerminalSession
from tests.utils import FakeHost, FakeLauncher, FakePicker

pytest_plugins = ("pytest_asyncio",)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep the real user config and env vars out of every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("AIDERCONTROL_LOG", raising=False)
    monkeypatch.delenv("AIDERCONTROL_CMD", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def picker() -> FakePicker:
    return FakePicker()


@pytest.fixture
def config() -> Config:
    return Config(command="aider", args=("--no-auto-commits",))


@pytest.fixture
def terminal(launcher: FakeLauncher, config: Config) -> TerminalSession:
    return TerminalSession(launcher, config)


@pytest.fixture
def controller(host: FakeHost, terminal: TerminalSession, picker: FakePicker) -> SessionController:
    return SessionController(host, terminal, picker)
