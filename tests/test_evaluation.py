from __future__ import annotations

import math

import pandas as pd
import pytest

from src.neighbor_cf.evaluation import EvaluationResult, Evaluator, PredictionCase
from src.neighbor_cf.recommender import NeighborhoodRecommender


class _FixedPredictor:
    def __init__(self, predictions: dict[tuple[int, int], float]) -> None:
        self.predictions = predictions
        self.calls: list[tuple[int, int]] = []

    def predict(self, user_id: int, item_id: int) -> float:
        self.calls.append((user_id, item_id))
        return self.predictions[(user_id, item_id)]


TEST_SET = [(1, 10, 1), (2, 20, 3), (3, 30, 5)]
PREDICTIONS = {(1, 10): 2.0, (2, 20): 3.0, (3, 30): 4.0}


def test_evaluator_statistics_on_known_predictions() -> None:
    result = Evaluator(_FixedPredictor(PREDICTIONS)).evaluate(TEST_SET)

    mae = 2.0 / 3.0
    assert result.mean_abs_error == pytest.approx(mae)
    assert result.mean() == pytest.approx(0.667, abs=1e-3)
    assert result.stddev() == result.variance
    assert result.rms == pytest.approx(math.sqrt(29.0 / 3.0))
    assert result.rms == pytest.approx(3.109, abs=1e-3)
    # Spread of the predictions around the mean absolute error.
    expected_var = ((2.0 - mae) ** 2 + (3.0 - mae) ** 2 + (4.0 - mae) ** 2) / 3.0
    assert result.variance == pytest.approx(expected_var)


def test_evaluator_records_raw_cases_in_order() -> None:
    result = Evaluator(_FixedPredictor(PREDICTIONS)).evaluate(TEST_SET)

    assert result.cases[0] == PredictionCase(user_id=1, item_id=10, actual=1, predicted=2.0)
    assert result.to_list() == [(1, 10, 1, 2.0), (2, 20, 3, 3.0), (3, 30, 5, 4.0)]

    frame = result.to_frame()
    assert list(frame.columns) == ["user_id", "item_id", "actual", "predicted"]
    assert len(frame) == 3


def test_evaluator_only_runs_first_k_cases() -> None:
    predictor = _FixedPredictor(PREDICTIONS)
    result = Evaluator(predictor).evaluate(TEST_SET, k=2)

    assert predictor.calls == [(1, 10), (2, 20)]
    assert len(result.cases) == 2
    assert result.mean_abs_error == pytest.approx(0.5)


def test_negative_or_missing_k_means_all_cases() -> None:
    assert len(Evaluator(_FixedPredictor(PREDICTIONS)).evaluate(TEST_SET, k=-1).cases) == 3
    assert len(Evaluator(_FixedPredictor(PREDICTIONS)).evaluate(TEST_SET, k=None).cases) == 3


def test_evaluator_accepts_rating_frames() -> None:
    df = pd.DataFrame(
        {
            "user_id": [1, 2, 3],
            "item_id": [10, 20, 30],
            "rating": [1, 3, 5],
            "timestamp": [0, 0, 0],
        }
    )
    result = Evaluator(_FixedPredictor(PREDICTIONS)).evaluate(df)
    assert result.summary()["n_cases"] == 3
    assert result.summary()["mean_abs_error"] == pytest.approx(2.0 / 3.0)


def test_empty_evaluation_is_rejected() -> None:
    with pytest.raises(ValueError):
        Evaluator(_FixedPredictor(PREDICTIONS)).evaluate([])
    with pytest.raises(ValueError):
        Evaluator(_FixedPredictor(PREDICTIONS)).evaluate(TEST_SET, k=0)


def test_result_is_immutable() -> None:
    result = Evaluator(_FixedPredictor(PREDICTIONS)).evaluate(TEST_SET)
    assert isinstance(result, EvaluationResult)
    with pytest.raises(AttributeError):
        result.rms = 0.0  # type: ignore[misc]


def test_recommender_evaluates_loaded_test_set(small_corpus: list[tuple[int, int, int]]) -> None:
    test_set = [(1, 40, 3), (4, 10, 2), (3, 20, 4)]
    rec = NeighborhoodRecommender.from_triples(small_corpus, test_set=test_set)
    result = rec.evaluate()

    # Predictions: 2.0 (neighbor 2), 1.0 (cold start), 4.0 (neighbor 5).
    assert [c.predicted for c in result.cases] == [2.0, 1.0, 4.0]
    assert result.mean_abs_error == pytest.approx((1.0 + 1.0 + 0.0) / 3.0)


def test_recommender_without_test_set(recommender: NeighborhoodRecommender) -> None:
    with pytest.raises(ValueError, match="No test set"):
        recommender.evaluate()
