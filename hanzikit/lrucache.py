"""A small least-recently-used cache."""

from __future__ import annotations

from collections import OrderedDict
from typing import Generic, Hashable, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """Mapping of bounded size that evicts the least recently used key.

    Looking a key up with :meth:`find` marks it as recently used;
    membership tests do not.
    """

    def __init__(self, capacity: int = 80) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        # Most recently used keys live at the end.
        self._data: OrderedDict[K, V] = OrderedDict()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def insert(self, key: K, value: V) -> Optional[V]:
        """Store a new key and return its value.

        An existing key is left untouched and None is returned.
        """
        if key in self._data:
            return None
        if len(self._data) >= self.capacity:
            self._data.popitem(last=False)
        self._data[key] = value
        return value

    def erase(self, key: K) -> None:
        """Remove a key if present."""
        self._data.pop(key, None)

    def find(self, key: K) -> Optional[V]:
        """Return the value for key, or None, marking it as recently used."""
        if key not in self._data:
            return None
        self._data.move_to_end(key)
        return self._data[key]

    def clear(self) -> None:
        self._data.clear()