"""Bounded undo history of whole-document buffers."""
from collections import deque
from typing import List, Optional

from models import Document

HISTORY_CAPACITY = 6


class HistoryStack:
    """Fixed-capacity stack of prior Documents, most recent last.

    Pushing onto a full stack evicts the oldest entry first.
    """

    def __init__(self, capacity: int = HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError("history capacity must be at least 1")
        self._entries: deque = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen

    def push(self, document: Document) -> None:
        self._entries.append(document)

    def pop(self) -> Optional[Document]:
        """Remove and return the most recent entry, or None if empty."""
        if not self._entries:
            return None
        return self._entries.pop()

    def peek(self) -> Optional[Document]:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> List[Document]:
        """Oldest-first copy of the stack."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
