from __future__ import annotations

from pathlib import Path

import pytest

from src.data import load_ratings, load_split, to_triples
from src.neighbor_cf.recommender import NeighborhoodRecommender


def test_load_ratings_reads_whitespace_separated_log(tmp_path: Path, write_rating_log) -> None:
    path = write_rating_log(tmp_path / "u.data", [(196, 242, 3), (186, 302, 3), (22, 377, 1)])
    ratings = load_ratings(path)

    assert list(ratings.columns) == ["user_id", "item_id", "rating", "timestamp"]
    assert to_triples(ratings) == [(196, 242, 3), (186, 302, 3), (22, 377, 1)]


def test_load_ratings_accepts_space_separated_fields(tmp_path: Path) -> None:
    path = tmp_path / "u.data"
    path.write_text("1 10 5 881250949\n2  10 4 881250950\n")
    assert to_triples(load_ratings(path)) == [(1, 10, 5), (2, 10, 4)]


def test_load_split_without_name_uses_full_corpus(tmp_path: Path, write_rating_log) -> None:
    write_rating_log(tmp_path / "u.data", [(1, 10, 5), (2, 10, 4)])
    split = load_split(tmp_path)
    assert len(split.base) == 2
    assert split.test is None


def test_load_split_reads_base_and_test(tmp_path: Path, write_rating_log, small_corpus) -> None:
    write_rating_log(tmp_path / "u1.base", small_corpus)
    write_rating_log(tmp_path / "u1.test", [(1, 40, 3), (4, 10, 2)])

    split = load_split(tmp_path, "u1")
    assert len(split.base) == len(small_corpus)
    assert to_triples(split.test) == [(1, 40, 3), (4, 10, 2)]

    rec = NeighborhoodRecommender.from_split(split)
    assert rec.test_set == [(1, 40, 3), (4, 10, 2)]
    assert rec.evaluate().to_list() == [(1, 40, 3, 2.0), (4, 10, 2, 1.0)]


def test_missing_files_raise(tmp_path: Path, write_rating_log) -> None:
    with pytest.raises(FileNotFoundError):
        load_split(tmp_path)
    write_rating_log(tmp_path / "u2.base", [(1, 10, 5)])
    with pytest.raises(FileNotFoundError, match="u2.test"):
        load_split(tmp_path, "u2")


def test_invalid_rating_values_are_rejected(tmp_path: Path, write_rating_log) -> None:
    path = write_rating_log(tmp_path / "u.data", [(1, 10, 5), (2, 10, 6)])
    with pytest.raises(ValueError, match="invalid rating values"):
        load_ratings(path)


def test_duplicate_pairs_are_rejected(tmp_path: Path, write_rating_log) -> None:
    path = write_rating_log(tmp_path / "u.data", [(1, 10, 5), (1, 10, 4)])
    with pytest.raises(ValueError, match="duplicate"):
        load_ratings(path)


def test_negative_timestamps_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "u.data"
    path.write_text("1\t10\t5\t-1\n")
    with pytest.raises(ValueError, match="negative timestamps"):
        load_ratings(path)
