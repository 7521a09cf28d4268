from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pandas as pd


RATING_COLUMNS: tuple[str, ...] = ("user_id", "item_id", "rating", "timestamp")

FULL_DATA_FILE = "u.data"


@dataclass(frozen=True)
class RatingSplit:
    base: pd.DataFrame
    test: Optional[pd.DataFrame] = None


def load_ratings(path: Path) -> pd.DataFrame:
    """Load a MovieLens-100k style rating log.

    Each line holds four whitespace-separated integers:
    user_id, item_id, rating, timestamp.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rating log not found: {path}")

    ratings = pd.read_csv(
        path,
        sep=r"\s+",
        header=None,
        names=list(RATING_COLUMNS),
        dtype={"user_id": "int64", "item_id": "int64", "rating": "int64", "timestamp": "int64"},
    )
    validate_ratings(ratings, name=path.name)
    return ratings


def load_split(raw_dir: Path, split: str | None = None) -> RatingSplit:
    """Load the full corpus (`u.data`) or a `<split>.base` / `<split>.test` pair."""
    raw_dir = Path(raw_dir)
    if split is None or str(split).strip() == "":
        return RatingSplit(base=load_ratings(raw_dir / FULL_DATA_FILE))

    split = str(split).strip()
    base = load_ratings(raw_dir / f"{split}.base")
    test = load_ratings(raw_dir / f"{split}.test")
    return RatingSplit(base=base, test=test)


def validate_ratings(ratings: pd.DataFrame, *, name: str = "ratings") -> None:
    """Validate required columns and basic MovieLens-100k constraints."""
    missing = [c for c in RATING_COLUMNS if c not in ratings.columns]
    if missing:
        raise ValueError(f"{name} missing columns: {missing}")

    bad_mask = ~ratings["rating"].between(1, 5)
    if bad_mask.any():
        bad_values = sorted(set(ratings.loc[bad_mask, "rating"].tolist()))
        raise ValueError(f"{name} has invalid rating values (expected integers 1..5): {bad_values}")

    if (ratings["timestamp"] < 0).any():
        raise ValueError(f"{name} contains negative timestamps")

    if ratings.duplicated(subset=["user_id", "item_id"]).any():
        raise ValueError(f"{name} contains duplicate (user_id, item_id) rows")


def to_triples(ratings: pd.DataFrame) -> list[tuple[int, int, int]]:
    """(user_id, item_id, rating) tuples in file order; timestamps are dropped."""
    return [
        (int(u), int(i), int(r))
        for u, i, r in ratings[["user_id", "item_id", "rating"]].itertuples(index=False, name=None)
    ]
