"""
Interface between the mention tracker and whatever renders its results.

For every token the tracker calls ``begin_markers()``, then any number of
``open_only``, ``close_only`` and ``open_and_close``, then ``end_markers()``.
The bracketing calls happen exactly once per token, also when no mention
starts or ends there.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

OPEN = "open"
CLOSE = "close"
OPEN_AND_CLOSE = "open_and_close"

Marker = Tuple[str, str]  # (kind, entity_id)


class MentionConsumer(ABC):
    """Consumes the mention markers assigned to one token at a time."""

    @abstractmethod
    def begin_markers(self) -> None:
        """Start the marker batch of the current token."""

    @abstractmethod
    def open_only(self, entity_id: str) -> None:
        """A mention starts with this token and ends with a later one."""

    @abstractmethod
    def close_only(self, entity_id: str) -> None:
        """A mention started with an earlier token and ends with this one."""

    @abstractmethod
    def open_and_close(self, entity_id: str) -> None:
        """A mention comprises only this token."""

    @abstractmethod
    def end_markers(self) -> None:
        """Finish the marker batch of the current token."""


class RecordingConsumer(MentionConsumer):
    """Collects one list of ``(kind, entity_id)`` markers per token."""

    def __init__(self) -> None:
        self.batches: List[List[Marker]] = []
        self._current: Optional[List[Marker]] = None

    def begin_markers(self) -> None:
        if self._current is not None:
            raise RuntimeError("begin_markers() called twice without end_markers()")
        self._current = []

    def open_only(self, entity_id: str) -> None:
        self._append(OPEN, entity_id)

    def close_only(self, entity_id: str) -> None:
        self._append(CLOSE, entity_id)

    def open_and_close(self, entity_id: str) -> None:
        self._append(OPEN_AND_CLOSE, entity_id)

    def end_markers(self) -> None:
        if self._current is None:
            raise RuntimeError("end_markers() called without begin_markers()")
        self.batches.append(self._current)
        self._current = None

    def _append(self, kind: str, entity_id: str) -> None:
        if self._current is None:
            raise RuntimeError(f"{kind} marker for {entity_id!r} outside of a marker batch")
        self._current.append((kind, entity_id))
