"""Offline evaluation of rating predictions against a held-out test set."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import islice
from typing import Any, Iterable, Protocol

import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)


class RatingPredictor(Protocol):
    def predict(self, user_id: int, item_id: int) -> float: ...


@dataclass(frozen=True)
class PredictionCase:
    user_id: int
    item_id: int
    actual: int
    predicted: float


@dataclass(frozen=True)
class EvaluationResult:
    """Aggregate statistics over one evaluation run.

    `variance` is measured around `mean_abs_error` (not around the mean
    prediction) and `rms` is taken over raw predictions (not over errors).
    Both are kept in this form so reports stay comparable with earlier runs.
    """

    mean_abs_error: float
    variance: float
    rms: float
    cases: tuple[PredictionCase, ...]

    def mean(self) -> float:
        return self.mean_abs_error

    def stddev(self) -> float:
        """The spread statistic under its report name; equal to `variance`."""
        return self.variance

    def to_list(self) -> list[tuple[int, int, int, float]]:
        return [(c.user_id, c.item_id, c.actual, c.predicted) for c in self.cases]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.to_list(), columns=["user_id", "item_id", "actual", "predicted"])

    def summary(self) -> dict[str, Any]:
        return {
            "n_cases": len(self.cases),
            "mean_abs_error": float(self.mean_abs_error),
            "variance": float(self.variance),
            "rms": float(self.rms),
        }


def _take(test_set: Iterable[tuple[int, int, int]] | pd.DataFrame, k: int | None) -> list[tuple[int, int, int]]:
    if isinstance(test_set, pd.DataFrame):
        rows: Iterable[tuple[int, int, int]] = test_set[["user_id", "item_id", "rating"]].itertuples(
            index=False, name=None
        )
    else:
        rows = test_set
    if k is not None and int(k) >= 0:
        rows = islice(rows, int(k))
    return [(int(u), int(i), int(r)) for u, i, r in rows]


class Evaluator:
    def __init__(self, predictor: RatingPredictor) -> None:
        self.predictor = predictor

    def evaluate(
        self,
        test_set: Iterable[tuple[int, int, int]] | pd.DataFrame,
        k: int | None = None,
    ) -> EvaluationResult:
        """Predict the first `k` (user, item, rating) triples and score them.

        `k=None` (or a negative k) evaluates the whole test set.
        """
        rows = _take(test_set, k)
        if not rows:
            raise ValueError("Cannot evaluate an empty test set")

        cases = []
        for user_id, item_id, actual in rows:
            predicted = float(self.predictor.predict(user_id, item_id))
            cases.append(PredictionCase(user_id=user_id, item_id=item_id, actual=actual, predicted=predicted))

        predicted = np.array([c.predicted for c in cases], dtype=np.float64)
        actual = np.array([c.actual for c in cases], dtype=np.float64)
        n = float(len(cases))

        mean_abs_error = float(np.abs(predicted - actual).sum() / n)
        variance = float(((predicted - mean_abs_error) ** 2).sum() / n)
        rms = float(np.sqrt((predicted**2).sum() / n))

        logger.info(
            "Evaluated %d cases: mean_abs_error=%.4f variance=%.4f rms=%.4f",
            len(cases),
            mean_abs_error,
            variance,
            rms,
        )
        return EvaluationResult(
            mean_abs_error=mean_abs_error,
            variance=variance,
            rms=rms,
            cases=tuple(cases),
        )
