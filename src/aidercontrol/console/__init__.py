"""Terminal console front end: editor host, command picker and REPL."""

from aidercontrol.console.host import ConsoleHost
from aidercontrol.console.picker import ConsolePicker
from aidercontrol.console.repl import InteractiveRepl, run_repl

__all__ = [
    "ConsoleHost",
    "ConsolePicker",
    "InteractiveRepl",
    "run_repl",
]
