"""Bounded history of received clipboard contents, newest first."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Union

from clipbird.constants import MAX_HISTORY_SIZE

ClipItems = tuple[tuple[str, bytes], ...]
_Mime = Union[str, bytes]


def _freeze(items: Iterable[tuple[_Mime, bytes]]) -> ClipItems:
    return tuple(
        (mime.decode("utf-8") if isinstance(mime, bytes) else mime, bytes(data))
        for mime, data in items
    )


class ClipboardHistory:
    """Keeps the most recent clipboard contents, at most ``max_size`` of them."""

    def __init__(
        self,
        max_size: int = MAX_HISTORY_SIZE,
        on_change: Callable[[tuple[ClipItems, ...]], None] | None = None,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be positive")
        self._max_size = max_size
        self._entries: list[ClipItems] = []
        self._on_change = on_change

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self.snapshot())

    def __getitem__(self, index: int) -> ClipItems:
        return self._entries[index]

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self.snapshot())

    def add(self, items: Iterable[tuple[_Mime, bytes]]) -> None:
        """Put new contents at the front, dropping the oldest when full."""
        if len(self._entries) + 1 > self._max_size:
            self._entries.pop()
        self._entries.insert(0, _freeze(items))
        self._changed()

    def delete_at(self, index: int) -> None:
        """Remove the entry at ``index``; raise IndexError if out of range."""
        if index < 0 or index >= len(self._entries):
            raise IndexError("Index out of range")
        del self._entries[index]
        self._changed()

    def snapshot(self) -> tuple[ClipItems, ...]:
        """Immutable copy of the history, newest first."""
        return tuple(self._entries)