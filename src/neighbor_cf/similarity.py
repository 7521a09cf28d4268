from __future__ import annotations

from .cache import SimilarityCache
from .store import MAX_RATING, RatingStore


class SimilarityEngine:
    """Agreement-based user-user similarity, memoized per unordered pair.

    For every item both users rated, a pair contributes `5 - |r_a - r_b|`; the
    score is the mean contribution. Users with no common items score 0.0.
    """

    def __init__(self, store: RatingStore, cache: SimilarityCache | None = None) -> None:
        self.store = store
        self.cache = cache if cache is not None else SimilarityCache()

    def similarity(self, user_a: int, user_b: int) -> float:
        self.store.require_nonempty()
        user_a, user_b = int(user_a), int(user_b)
        # Validate before touching the cache so unknown ids never get memoized.
        self.store.n_items_of(user_a)
        self.store.n_items_of(user_b)
        return self.cache.get_or_compute(user_a, user_b, lambda: self._compute(user_a, user_b))

    def _compute(self, user_a: int, user_b: int) -> float:
        # Iterate the shorter history; on a tie the second user is iterated.
        if self.store.n_items_of(user_a) < self.store.n_items_of(user_b):
            shorter, longer = user_a, user_b
        else:
            shorter, longer = user_b, user_a

        ratings_short = self.store.user_ratings(shorter)
        ratings_long = self.store.user_ratings(longer)

        total = 0.0
        count = 0
        for item_id, rating in ratings_short.items():
            other = ratings_long.get(item_id)
            if other is None:
                continue
            total += MAX_RATING - abs(rating - other)
            count += 1

        return total / (count if count > 0 else 1)
