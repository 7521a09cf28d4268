from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `import src...` works when pytest uses importlib import mode.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from src.neighbor_cf.recommender import NeighborhoodRecommender  # noqa: E402
from src.neighbor_cf.store import RatingStore  # noqa: E402


# Users 1 and 2 agree on every shared movie; user 4 shares nothing with anyone;
# user 3 is the only rater of movie 60.
SMALL_CORPUS: list[tuple[int, int, int]] = [
    (1, 10, 5),
    (1, 20, 3),
    (1, 30, 4),
    (2, 10, 5),
    (2, 20, 3),
    (2, 30, 4),
    (2, 40, 2),
    (3, 10, 1),
    (3, 40, 4),
    (3, 60, 2),
    (4, 50, 3),
    (5, 20, 4),
    (5, 40, 5),
]


@pytest.fixture()
def small_corpus() -> list[tuple[int, int, int]]:
    return list(SMALL_CORPUS)


@pytest.fixture()
def store(small_corpus: list[tuple[int, int, int]]) -> RatingStore:
    return RatingStore.from_triples(small_corpus)


@pytest.fixture()
def recommender(small_corpus: list[tuple[int, int, int]]) -> NeighborhoodRecommender:
    return NeighborhoodRecommender.from_triples(small_corpus)


def _write_rating_log(path: Path, rows: list[tuple[int, int, int]], *, start_ts: int = 874965758) -> Path:
    lines = [f"{u}\t{i}\t{r}\t{start_ts + n}" for n, (u, i, r) in enumerate(rows)]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture()
def write_rating_log():
    """Write (user, item, rating) rows in the MovieLens-100k tab-separated layout."""
    return _write_rating_log
