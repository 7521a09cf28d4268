from __future__ import annotations

from threading import Lock

from .errors import NotFoundError
from .store import RatingStore


DEFAULT_FACTOR = 1.1
DEFAULT_PRIOR = 3.0


class PopularityRanker:
    """Mean rating shrunk toward a neutral prior when an item has few ratings.

    score = (1 - factor^-n) * mean + prior * factor^-n

    With many ratings the score approaches the mean; with few it stays near the
    prior, so a lone 5-star rating does not outrank well-reviewed items.
    """

    def __init__(self, store: RatingStore, *, factor: float = DEFAULT_FACTOR, prior: float = DEFAULT_PRIOR) -> None:
        if factor <= 1.0:
            raise ValueError(f"factor must be > 1.0, got {factor}")
        self.store = store
        self.factor = float(factor)
        self.prior = float(prior)
        self._scores: dict[int, float] = {}
        self._lock = Lock()

    def _compute(self, item_id: int) -> float:
        ratings = self.store.ratings_of(item_id)
        n = len(ratings)
        if n == 0:
            raise NotFoundError(f"item_id={item_id} has no ratings")
        mean = sum(ratings) / float(n)
        weight = self.factor ** (-n)
        return (1.0 - weight) * mean + self.prior * weight

    def popularity(self, item_id: int) -> float:
        self.store.require_nonempty()
        item_id = int(item_id)
        score = self._scores.get(item_id)
        if score is not None:
            return score

        with self._lock:
            score = self._scores.get(item_id)
            if score is None:
                score = self._compute(item_id)
                self._scores[item_id] = score
        return score

    def popularity_ranking(self) -> list[int]:
        """All item ids, most popular first (ties broken by ascending item id)."""
        self.store.require_nonempty()
        scored = [(item_id, self.popularity(item_id)) for item_id in self.store.all_item_ids()]
        scored.sort(key=lambda x: (-x[1], x[0]))
        return [item_id for item_id, _ in scored]

    def top(self, n: int = 10) -> list[tuple[int, float]]:
        return [(item_id, self.popularity(item_id)) for item_id in self.popularity_ranking()[: int(n)]]
