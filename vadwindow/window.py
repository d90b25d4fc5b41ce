"""Fixed-capacity FIFO of frames, backed by a ring buffer."""

from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

F = TypeVar("F")


class FrameWindow(Generic[F]):
    """Holds the most recent *capacity* frames in arrival order.

    Slots are preallocated; ``_head`` points at the oldest frame.  Pushing
    into a full window overwrites the oldest slot and advances the head.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"window capacity must be at least 1, got {capacity}")
        self._slots: List[Optional[F]] = [None] * capacity
        self._head: int = 0
        self._size: int = 0

    @property
    def capacity(self) -> int:
        return len(self._slots)

    @property
    def is_full(self) -> bool:
        return self._size == len(self._slots)

    def __len__(self) -> int:
        return self._size

    def push(self, frame: F) -> Optional[F]:
        """Append *frame*; return the evicted oldest frame, if any."""
        cap = len(self._slots)
        if self._size < cap:
            self._slots[(self._head + self._size) % cap] = frame
            self._size += 1
            return None

        evicted = self._slots[self._head]
        self._slots[self._head] = frame
        self._head = (self._head + 1) % cap
        return evicted

    def snapshot(self) -> List[F]:
        """Return a new list of the frames, oldest first."""
        cap = len(self._slots)
        return [
            self._slots[(self._head + i) % cap]  # type: ignore[misc]
            for i in range(self._size)
        ]

    def clear(self) -> None:
        self._slots = [None] * len(self._slots)
        self._head = 0
        self._size = 0
