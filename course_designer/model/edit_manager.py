"""Linear undo/redo history over whole course snapshots."""

from __future__ import annotations

import logging
from typing import Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EditManager(Generic[T]):
    """
    Keep an ordered list of immutable snapshots and a cursor into it.

    ``commit`` records a discrete edit (it drops any redo-able future);
    ``amend`` overwrites the snapshot under the cursor and is meant for the
    intermediate frames of a continuous interaction such as a drag, so those
    frames never become separate undo steps.
    """

    def __init__(self, initial: T, max_entries: Optional[int] = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self._entries: list[T] = [initial]
        self._index = 0
        self._max_entries = max_entries

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def current(self) -> T:
        if 0 <= self._index < len(self._entries):
            return self._entries[self._index]
        return self._recover()

    @property
    def index(self) -> int:
        return self._index

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def amend(self, snapshot: T) -> None:
        if not 0 <= self._index < len(self._entries):
            self._recover()
        self._entries[self._index] = snapshot

    def commit(self, snapshot: T) -> None:
        if not 0 <= self._index < len(self._entries):
            self._recover()
        del self._entries[self._index + 1 :]
        self._entries.append(snapshot)
        self._index += 1

        if self._max_entries is not None and len(self._entries) > self._max_entries:
            overflow = len(self._entries) - self._max_entries
            del self._entries[:overflow]
            self._index -= overflow

    def reset(self, snapshot: T) -> None:
        self._entries = [snapshot]
        self._index = 0

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def undo(self) -> T:
        if self.can_undo:
            self._index -= 1
        return self.current

    def redo(self) -> T:
        if self.can_redo:
            self._index += 1
        return self.current

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _recover(self) -> T:
        logger.warning(
            "History index %d out of range for %d entries; falling back to the first snapshot",
            self._index,
            len(self._entries),
        )
        self._index = 0
        return self._entries[0]
