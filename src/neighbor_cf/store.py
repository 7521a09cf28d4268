"""In-memory rating corpus indexed by user and by item."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

import pandas as pd

from .errors import EmptyCorpusError, NotFoundError


logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


@dataclass
class UserRecord:
    user_id: int
    ratings: dict[int, int] = field(default_factory=dict)
    items: list[int] = field(default_factory=list)


@dataclass
class ItemRecord:
    item_id: int
    ratings_by_user: dict[int, int] = field(default_factory=dict)
    ratings: list[int] = field(default_factory=list)
    raters: list[int] = field(default_factory=list)


class RatingStore:
    """Holds (user, item, rating) observations indexed both ways.

    The store carries no caches; similarity / neighbor / popularity memoization
    lives in the components built on top of it.
    """

    def __init__(self) -> None:
        self._users: dict[int, UserRecord] = {}
        self._items: dict[int, ItemRecord] = {}
        self._n_ratings = 0

    @classmethod
    def from_triples(cls, triples: Iterable[tuple[int, int, int]]) -> "RatingStore":
        store = cls()
        for user_id, item_id, rating in triples:
            store.add_rating(user_id, item_id, rating)
        logger.info(
            "RatingStore built: users=%d items=%d ratings=%d",
            store.n_users,
            store.n_items,
            store.n_ratings,
        )
        return store

    @classmethod
    def from_frame(cls, ratings: pd.DataFrame) -> "RatingStore":
        """Build a store from a frame with `user_id`, `item_id`, `rating` columns."""
        required = {"user_id", "item_id", "rating"}
        missing = required - set(ratings.columns)
        if missing:
            raise ValueError(f"ratings missing required columns: {sorted(missing)}")

        triples = zip(
            ratings["user_id"].astype("int64").tolist(),
            ratings["item_id"].astype("int64").tolist(),
            ratings["rating"].astype("int64").tolist(),
        )
        return cls.from_triples(triples)

    # ----- mutation -----
    def add_rating(self, user_id: int, item_id: int, rating: int) -> None:
        user_id, item_id, rating = int(user_id), int(item_id), int(rating)
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValueError(f"rating must be in {MIN_RATING}..{MAX_RATING}, got {rating}")

        user = self._users.get(user_id)
        if user is None:
            user = self._users[user_id] = UserRecord(user_id)
        if item_id in user.ratings:
            raise ValueError(f"duplicate rating for user_id={user_id} item_id={item_id}")

        item = self._items.get(item_id)
        if item is None:
            item = self._items[item_id] = ItemRecord(item_id)

        user.ratings[item_id] = rating
        user.items.append(item_id)
        item.ratings_by_user[user_id] = rating
        item.ratings.append(rating)
        item.raters.append(user_id)
        self._n_ratings += 1

    # ----- lookups -----
    @property
    def n_users(self) -> int:
        return len(self._users)

    @property
    def n_items(self) -> int:
        return len(self._items)

    @property
    def n_ratings(self) -> int:
        return self._n_ratings

    @property
    def is_empty(self) -> bool:
        return self._n_ratings == 0

    def require_nonempty(self) -> None:
        if self.is_empty:
            raise EmptyCorpusError("No ratings loaded")

    def user_exists(self, user_id: int) -> bool:
        return int(user_id) in self._users

    def item_exists(self, item_id: int) -> bool:
        return int(item_id) in self._items

    def _user(self, user_id: int) -> UserRecord:
        try:
            return self._users[int(user_id)]
        except KeyError:
            raise NotFoundError(f"Unknown user_id: {user_id}") from None

    def _item(self, item_id: int) -> ItemRecord:
        try:
            return self._items[int(item_id)]
        except KeyError:
            raise NotFoundError(f"Unknown item_id: {item_id}") from None

    def rating_of(self, user_id: int, item_id: int) -> int:
        user = self._user(user_id)
        rating = user.ratings.get(int(item_id))
        if rating is None:
            raise NotFoundError(f"user_id={user_id} has not rated item_id={item_id}")
        return rating

    def has_rated(self, user_id: int, item_id: int) -> bool:
        user = self._users.get(int(user_id))
        return user is not None and int(item_id) in user.ratings

    def user_ratings(self, user_id: int) -> dict[int, int]:
        """Read-only view intent: item_id -> rating for one user."""
        return self._user(user_id).ratings

    def items_of(self, user_id: int) -> tuple[int, ...]:
        return tuple(self._user(user_id).items)

    def raters_of(self, item_id: int) -> tuple[int, ...]:
        return tuple(self._item(item_id).raters)

    def ratings_of(self, item_id: int) -> tuple[int, ...]:
        return tuple(self._item(item_id).ratings)

    def n_items_of(self, user_id: int) -> int:
        return len(self._user(user_id).items)

    def common_items(self, user_a: int, user_b: int) -> set[int]:
        a = self._user(user_a).ratings
        b = self._user(user_b).ratings
        return set(a).intersection(b)

    def all_user_ids(self) -> set[int]:
        return set(self._users)

    def all_item_ids(self) -> set[int]:
        return set(self._items)
