from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import pandas as pd

from ..data import RatingSplit, load_split, to_triples
from .cache import NeighborCache, SimilarityCache
from .config import NeighborCFConfig
from .evaluation import EvaluationResult, Evaluator
from .neighbors import NeighborSelector
from .popularity import PopularityRanker
from .predictor import Predictor
from .similarity import SimilarityEngine
from .store import RatingStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimilarUser:
    userId: int
    similarity: float
    common_rated: int


@dataclass(frozen=True)
class PopularItem:
    movieId: int
    popularity: float
    n_ratings: int


class NeighborhoodRecommender:
    """Wires the store, caches and neighborhood CF components for one corpus.

    Each instance owns its own caches, so several corpora (or test fixtures)
    can live in the same process without sharing state.
    """

    def __init__(
        self,
        store: RatingStore,
        *,
        config: NeighborCFConfig | None = None,
        test_set: list[tuple[int, int, int]] | None = None,
    ) -> None:
        self.config = config if config is not None else NeighborCFConfig()
        self.store = store
        self.test_set = test_set

        self.similarity_cache = SimilarityCache()
        self.neighbor_cache = NeighborCache()
        self.engine = SimilarityEngine(store, self.similarity_cache)
        self.selector = NeighborSelector(
            store,
            self.engine,
            start_threshold=self.config.start_threshold,
            min_threshold=self.config.min_threshold,
            threshold_step=self.config.threshold_step,
        )
        self.predictor = Predictor(
            store,
            self.selector,
            self.neighbor_cache,
            cold_start_rating=self.config.cold_start_rating,
        )
        self.ranker = PopularityRanker(
            store,
            factor=self.config.popularity_factor,
            prior=self.config.popularity_prior,
        )
        self.evaluator = Evaluator(self.predictor)

    @classmethod
    def from_triples(
        cls,
        triples: Iterable[tuple[int, int, int]],
        *,
        config: NeighborCFConfig | None = None,
        test_set: list[tuple[int, int, int]] | None = None,
    ) -> "NeighborhoodRecommender":
        return cls(RatingStore.from_triples(triples), config=config, test_set=test_set)

    @classmethod
    def from_split(cls, split: RatingSplit, *, config: NeighborCFConfig | None = None) -> "NeighborhoodRecommender":
        test_set = to_triples(split.test) if split.test is not None else None
        return cls(RatingStore.from_frame(split.base), config=config, test_set=test_set)

    @classmethod
    def from_dataset(
        cls,
        raw_dir: Path,
        split: str | None = None,
        *,
        config: NeighborCFConfig | None = None,
    ) -> "NeighborhoodRecommender":
        logger.info("Loading ratings from %s (split=%s)", raw_dir, split or "full")
        return cls.from_split(load_split(raw_dir, split), config=config)

    # ----- core operations -----
    def has_user(self, user_id: int) -> bool:
        return self.store.user_exists(user_id)

    def similarity(self, user_a: int, user_b: int) -> float:
        return self.engine.similarity(user_a, user_b)

    def most_similar(self, user_id: int, threshold: float) -> tuple[int, ...]:
        return self.selector.most_similar(user_id, threshold)

    def predict(self, user_id: int, item_id: int) -> float:
        return self.predictor.predict(user_id, item_id)

    def popularity(self, item_id: int) -> float:
        return self.ranker.popularity(item_id)

    def popularity_ranking(self) -> list[int]:
        return self.ranker.popularity_ranking()

    def evaluate(
        self,
        test_set: Iterable[tuple[int, int, int]] | pd.DataFrame | None = None,
        k: int | None = None,
    ) -> EvaluationResult:
        """Run predictions over `test_set` (defaults to the loaded split's test data)."""
        if test_set is None:
            if self.test_set is None:
                raise ValueError("No test set loaded; pass one explicitly or load a split")
            test_set = self.test_set
        if k is None:
            k = self.config.eval_k
        return self.evaluator.evaluate(test_set, k=k)

    # ----- reporting helpers -----
    def similar_users(self, user_id: int, *, threshold: float) -> list[SimilarUser]:
        out: list[SimilarUser] = []
        for other in self.most_similar(user_id, threshold):
            out.append(
                SimilarUser(
                    userId=int(other),
                    similarity=float(self.similarity(user_id, other)),
                    common_rated=len(self.store.common_items(user_id, other)),
                )
            )
        return out

    def popular_items(self, limit: int = 10) -> list[PopularItem]:
        return [
            PopularItem(movieId=item_id, popularity=score, n_ratings=len(self.store.ratings_of(item_id)))
            for item_id, score in self.ranker.top(limit)
        ]
