"""Neighbor selection with adaptive similarity-threshold relaxation."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from .errors import NotFoundError
from .similarity import SimilarityEngine
from .store import RatingStore


logger = logging.getLogger(__name__)

DEFAULT_START_THRESHOLD = 5.0
DEFAULT_MIN_THRESHOLD = 1.0
DEFAULT_THRESHOLD_STEP = 0.1


def _rank(scored: Iterable[tuple[int, float]]) -> list[tuple[int, float]]:
    """Similarity descending, user id ascending."""
    return sorted(scored, key=lambda x: (-x[1], x[0]))


class NeighborSelector:
    def __init__(
        self,
        store: RatingStore,
        engine: SimilarityEngine,
        *,
        start_threshold: float = DEFAULT_START_THRESHOLD,
        min_threshold: float = DEFAULT_MIN_THRESHOLD,
        threshold_step: float = DEFAULT_THRESHOLD_STEP,
    ) -> None:
        if threshold_step <= 0.0:
            raise ValueError(f"threshold_step must be positive, got {threshold_step}")
        self.store = store
        self.engine = engine
        self.start_threshold = float(start_threshold)
        self.min_threshold = float(min_threshold)
        self.threshold_step = float(threshold_step)

    def thresholds(self, start: float) -> Iterator[float]:
        """Yield start, start - step, ... while the value stays >= min_threshold.

        Each value is derived from the step count rather than by repeated
        subtraction, so the floor itself is reached exactly.
        """
        n = 0
        value = float(start)
        while value >= self.min_threshold:
            yield value
            n += 1
            value = round(float(start) - n * self.threshold_step, 9)

    def most_similar(self, user_id: int, threshold: float) -> tuple[int, ...]:
        """Every other user whose similarity to `user_id` is >= threshold."""
        self.store.require_nonempty()
        user_id = int(user_id)
        if not self.store.user_exists(user_id):
            raise NotFoundError(f"Unknown user_id: {user_id}")

        scored = (
            (other, self.engine.similarity(user_id, other))
            for other in self.store.all_user_ids()
            if other != user_id
        )
        return tuple(uid for uid, sim in _rank(scored) if sim >= float(threshold))

    def shared_sim_users(self, user_id: int, item_id: int, threshold: float | None = None) -> tuple[int, ...]:
        """Similar users who also rated `item_id`, relaxing the threshold until some exist.

        Starting at `threshold` (default 5.0), the threshold drops by one step
        whenever no rater of the item is similar enough. Once it falls below
        `min_threshold` the search gives up and returns an empty tuple.
        """
        self.store.require_nonempty()
        user_id = int(user_id)
        start = self.start_threshold if threshold is None else float(threshold)

        if not self.store.user_exists(user_id):
            raise NotFoundError(f"Unknown user_id: {user_id}")
        raters = [r for r in self.store.raters_of(item_id) if r != user_id]
        if not raters:
            return ()

        # Only raters of the item can survive the filter, so score just those.
        scored = _rank((r, self.engine.similarity(user_id, r)) for r in raters)
        for value in self.thresholds(start):
            found = tuple(uid for uid, sim in scored if sim >= value)
            if found:
                logger.debug(
                    "shared_sim_users user=%d item=%d threshold=%.1f neighbors=%d",
                    user_id,
                    int(item_id),
                    value,
                    len(found),
                )
                return found
        return ()
