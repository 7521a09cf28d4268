"""Explicitly owned caches for the neighborhood CF components.

Both caches are process-local and live for a single batch run. Writes are
serialized with a lock so concurrent callers compute each key at most once.
"""

from __future__ import annotations

from threading import Lock
from typing import Callable, Sequence


class SimilarityCache:
    """Symmetric user-pair -> similarity memo keyed by an unordered pair."""

    def __init__(self) -> None:
        self._values: dict[frozenset[int], float] = {}
        self._lock = Lock()
        self.misses = 0

    @staticmethod
    def _key(user_a: int, user_b: int) -> frozenset[int]:
        return frozenset((int(user_a), int(user_b)))

    def get(self, user_a: int, user_b: int) -> float | None:
        return self._values.get(self._key(user_a, user_b))

    def get_or_compute(self, user_a: int, user_b: int, compute: Callable[[], float]) -> float:
        key = self._key(user_a, user_b)
        value = self._values.get(key)
        if value is not None:
            return value

        with self._lock:
            value = self._values.get(key)
            if value is None:
                value = float(compute())
                self._values[key] = value
                self.misses += 1
        return value

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, pair: tuple[int, int]) -> bool:
        return self._key(*pair) in self._values


class NeighborCache:
    """(user, item) -> neighbor user ids, populated by the predictor.

    Entries are hints: a seeded entry reuses group membership from another
    member's query and is not guaranteed to equal a fresh recomputation.
    """

    def __init__(self) -> None:
        self._values: dict[tuple[int, int], tuple[int, ...]] = {}
        self._lock = Lock()

    def get(self, user_id: int, item_id: int) -> tuple[int, ...] | None:
        return self._values.get((int(user_id), int(item_id)))

    def put(self, user_id: int, item_id: int, neighbors: Sequence[int]) -> None:
        with self._lock:
            self._values[(int(user_id), int(item_id))] = tuple(int(n) for n in neighbors)

    def seed_group(self, user_id: int, item_id: int, neighbors: Sequence[int]) -> None:
        """Cache `neighbors` for `user_id` and a swapped copy for every neighbor.

        For each member e, the entry stored under (e, item) is `neighbors` with e
        replaced by `user_id` in the same position.
        """
        user_id, item_id = int(user_id), int(item_id)
        group = tuple(int(n) for n in neighbors)
        with self._lock:
            self._values[(user_id, item_id)] = group
            for pos, member in enumerate(group):
                swapped = group[:pos] + (user_id,) + group[pos + 1 :]
                self._values[(member, item_id)] = swapped

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    def __len__(self) -> int:
        return len(self._values)
