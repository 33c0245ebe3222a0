"""Fixed-capacity ring buffer used for the node's history channels."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """Fixed-capacity buffer with explicit index wraparound.

    Once ``capacity`` items have been written the buffer is ``full`` and each
    new push overwrites the oldest entry. Iteration yields items oldest first.
    """

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._items: list[T | None] = [None] * capacity
        self._index = 0
        self._full = False

    @property
    def full(self) -> bool:
        return self._full

    def push(self, item: T) -> None:
        self._items[self._index] = item
        self._index += 1
        if self._index == self.capacity:
            self._index = 0
            self._full = True

    def clear(self) -> None:
        self._items = [None] * self.capacity
        self._index = 0
        self._full = False

    def values(self) -> list[T]:
        """Stored items, oldest first."""
        if self._full:
            ordered = self._items[self._index :] + self._items[: self._index]
        else:
            ordered = self._items[: self._index]
        return [item for item in ordered if item is not None]

    def __len__(self) -> int:
        return self.capacity if self._full else self._index

    def __iter__(self) -> Iterator[T]:
        return iter(self.values())

    def __repr__(self) -> str:
        return f"<RingBuffer(capacity={self.capacity}, size={len(self)}, full={self._full})>"
