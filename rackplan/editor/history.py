"""
Snapshot undo/redo for an editing session.

Each entry is the full ``(elements, racks)`` state after one completed edit.
The object is owned by a single session and never shared.
"""
import copy
from dataclasses import dataclass, field
from typing import Any, List, Optional

from rackplan.lib.config import settings


@dataclass
class HistoryEntry:
    elements: List[Any] = field(default_factory=list)
    racks: List[Any] = field(default_factory=list)


class EditorHistory:
    """Bounded list of snapshots with a cursor on the current one."""

    def __init__(self, limit: Optional[int] = None):
        self.limit = settings.editor_history_limit if limit is None else limit
        if self.limit < 1:
            raise ValueError("History limit must be at least 1")
        self._entries: List[HistoryEntry] = []
        self._cursor = -1

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    @property
    def current(self) -> Optional[HistoryEntry]:
        if self._cursor < 0:
            return None
        return copy.deepcopy(self._entries[self._cursor])

    def reset(self, elements: List[Any], racks: List[Any]) -> None:
        """Drop everything and start over from a freshly loaded state."""
        self._entries = [HistoryEntry(copy.deepcopy(elements), copy.deepcopy(racks))]
        self._cursor = 0

    def push(self, elements: List[Any], racks: List[Any]) -> None:
        """Record the state after an edit. Any redo future is discarded."""
        del self._entries[self._cursor + 1:]
        self._entries.append(HistoryEntry(copy.deepcopy(elements), copy.deepcopy(racks)))

        overflow = len(self._entries) - self.limit
        if overflow > 0:
            del self._entries[:overflow]
        self._cursor = len(self._entries) - 1

    def undo(self) -> Optional[HistoryEntry]:
        if not self.can_undo:
            return None
        self._cursor -= 1
        return copy.deepcopy(self._entries[self._cursor])

    def redo(self) -> Optional[HistoryEntry]:
        if not self.can_redo:
            return None
        self._cursor += 1
        return copy.deepcopy(self._entries[self._cursor])
