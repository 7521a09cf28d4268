from __future__ import annotations

import logging
from typing import Sequence

from .cache import NeighborCache
from .errors import NotFoundError
from .neighbors import NeighborSelector
from .store import RatingStore


logger = logging.getLogger(__name__)

COLD_START_RATING = 1.0


class Predictor:
    """Predict a rating as the mean rating of the user's shared similar users.

    Neighbor sets are memoized per (user, item) in a `NeighborCache`. After a
    fresh lookup the whole neighbor group is seeded (see `seed_neighbor_caches`).
    """

    def __init__(
        self,
        store: RatingStore,
        selector: NeighborSelector,
        neighbor_cache: NeighborCache | None = None,
        *,
        cold_start_rating: float = COLD_START_RATING,
    ) -> None:
        self.store = store
        self.selector = selector
        self.neighbor_cache = neighbor_cache if neighbor_cache is not None else NeighborCache()
        self.cold_start_rating = float(cold_start_rating)

    def neighbors_for(self, user_id: int, item_id: int) -> tuple[int, ...]:
        cached = self.neighbor_cache.get(user_id, item_id)
        if cached is not None:
            # Seeded entries may name the querying user of another group member,
            # who need not have rated the item.
            usable = tuple(n for n in cached if n != user_id and self.store.has_rated(n, item_id))
            if usable:
                return usable
        return self.selector.shared_sim_users(user_id, item_id)

    def seed_neighbor_caches(self, user_id: int, item_id: int, neighbors: Sequence[int]) -> None:
        """Share one member's neighbor set with every member of the group."""
        self.neighbor_cache.seed_group(user_id, item_id, neighbors)

    def predict(self, user_id: int, item_id: int) -> float:
        self.store.require_nonempty()
        user_id, item_id = int(user_id), int(item_id)
        if not self.store.user_exists(user_id):
            raise NotFoundError(f"Unknown user_id: {user_id}")
        if not self.store.item_exists(item_id) or not self.store.raters_of(item_id):
            raise NotFoundError(f"Unknown item_id: {item_id}")

        neighbors = self.neighbors_for(user_id, item_id)
        if not neighbors:
            return self.cold_start_rating

        self.seed_neighbor_caches(user_id, item_id, neighbors)
        total = sum(self.store.rating_of(n, item_id) for n in neighbors)
        return total / float(len(neighbors))
