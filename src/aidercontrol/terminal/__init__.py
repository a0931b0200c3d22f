"""Assistant process management.

TerminalSession owns the process lifecycle; SubprocessLauncher starts the
assistant as a local asyncio subprocess.
"""

from aidercontrol.terminal.protocol import ProcessHandle, ProcessLauncher
from aidercontrol.terminal.session import TerminalSession, build_argv
from aidercontrol.terminal.subprocess_process import (
    SubprocessLauncher,
    SubprocessProcess,
    encode_payload,
)

__all__ = [
    "ProcessHandle",
    "ProcessLauncher",
    "SubprocessLauncher",
    "SubprocessProcess",
    "TerminalSession",
    "build_argv",
    "encode_payload",
]
