"""Console command picker."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from aidercontrol.config.schema import PickerConfig
    from aidercontrol.protocols.host import PickerItem


def match_item(items: Sequence[PickerItem], answer: str) -> PickerItem | None:
    """Find an item by 1-based index, token (``/add``) or bare name (``add``)."""
    answer = answer.strip()
    if not answer:
        return None
    if answer.isdigit():
        index = int(answer) - 1
        return items[index] if 0 <= index < len(items) else None
    for item in items:
        if answer in (item.text, item.text.lstrip("/")):
            return item
    return None


class ConsolePicker:
    """Picker that lists commands in a rich table and reads a choice."""

    def __init__(
        self,
        session: PromptSession[str] | None = None,
        console: Console | None = None,
    ) -> None:
        self._session: PromptSession[str] = session or PromptSession()
        self._console = console or Console()
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    async def choose(self, items: Sequence[PickerItem], config: PickerConfig) -> PickerItem | None:
        self._open = True

        table = Table(title=config.title)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Command", style="bold")
        table.add_column("Kind")
        if config.show_descriptions:
            table.add_column("Description")
        for index, item in enumerate(items, 1):
            row = [str(index), item.text, item.category]
            if config.show_descriptions:
                row.append(item.description)
            table.add_row(*row)
        self._console.print(table)

        completer = WordCompleter([item.text for item in items], sentence=True)
        try:
            answer = await self._session.prompt_async(
                "Select command (number or name): ", completer=completer
            )
        except (KeyboardInterrupt, EOFError):
            return None

        item = match_item(items, answer)
        if item is None and answer.strip():
            self._console.print(f"[red]No such command: {answer.strip()}[/red]")
        return item

    def close(self) -> None:
        self._open = False
