"""Files currently shared with the assistant session."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class FileRegistry:
    """De-duplicated set of file paths added to the session.

    The registry records intent: it is updated after an add/drop command has
    been written to the process, not after the process confirms it.
    """

    def __init__(self) -> None:
        self._paths: set[str] = set()

    def add(self, path: str) -> None:
        self._paths.add(path)

    def add_all(self, paths: Iterable[str]) -> None:
        self._paths.update(paths)

    def remove(self, path: str) -> None:
        self._paths.discard(path)

    def clear(self) -> None:
        self._paths.clear()

    def paths(self) -> list[str]:
        """Sorted snapshot of the tracked paths."""
        return sorted(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths())

    def __repr__(self) -> str:
        return f"<FileRegistry {len(self._paths)} files>"
