"""Sorted key set backed by a skip list.

Insert and delete take expected O(log n) comparisons with no list shifting,
and iteration walks the bottom level in ascending key order.
"""

from __future__ import annotations

import random
from typing import Any, Iterator

MAX_LEVEL = 32
LEVEL_PROBABILITY = 0.25


class _Node:
    __slots__ = ("key", "forward")

    def __init__(self, key: Any, level: int):
        self.key = key
        self.forward: list[_Node | None] = [None] * level


class SortedKeySet:
    """Set of mutually comparable keys kept in ascending order.

    Not thread safe; callers serialize access.
    """

    def __init__(self, keys=(), seed: int | None = None):
        self._random = random.Random(seed)
        self._head = _Node(None, MAX_LEVEL)
        self._level = 1
        self._size = 0
        for key in keys:
            self.add(key)

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Any]:
        node = self._head.forward[0]
        while node is not None:
            yield node.key
            node = node.forward[0]

    def __contains__(self, key: Any) -> bool:
        node = self._predecessors(key)[0].forward[0]
        return node is not None and node.key == key

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"

    def add(self, key: Any) -> bool:
        """Insert ``key``. Returns False if it was already present."""
        update = self._predecessors(key)
        successor = update[0].forward[0]
        if successor is not None and successor.key == key:
            return False

        level = self._random_level()
        self._level = max(self._level, level)
        node = _Node(key, level)
        for i in range(level):
            node.forward[i] = update[i].forward[i]
            update[i].forward[i] = node
        self._size += 1
        return True

    def remove(self, key: Any) -> None:
        """Delete ``key``.

        Raises:
            KeyError: If ``key`` is not present
        """
        update = self._predecessors(key)
        node = update[0].forward[0]
        if node is None or node.key != key:
            raise KeyError(key)

        for i in range(len(node.forward)):
            update[i].forward[i] = node.forward[i]
        while self._level > 1 and self._head.forward[self._level - 1] is None:
            self._level -= 1
        self._size -= 1

    def clear(self) -> None:
        self._head = _Node(None, MAX_LEVEL)
        self._level = 1
        self._size = 0

    def _predecessors(self, key: Any) -> list[_Node]:
        # update[i] is the last node on level i whose key is below ``key``.
        update = [self._head] * MAX_LEVEL
        node = self._head
        for i in range(self._level - 1, -1, -1):
            successor = node.forward[i]
            while successor is not None and successor.key < key:
                node = successor
                successor = node.forward[i]
            update[i] = node
        return update

    def _random_level(self) -> int:
        level = 1
        while level < MAX_LEVEL and self._random.random() < LEVEL_PROBABILITY:
            level += 1
        return level
