from __future__ import annotations

from pathlib import Path

import pytest

from src.neighbor_cf.config import NeighborCFConfig, load_config, load_yaml
from src.neighbor_cf.recommender import NeighborhoodRecommender
from src.utils import resolve_log_level


def test_defaults_match_the_documented_constants() -> None:
    cfg = NeighborCFConfig.from_mapping({})
    assert cfg.start_threshold == 5.0
    assert cfg.min_threshold == 1.0
    assert cfg.threshold_step == pytest.approx(0.1)
    assert cfg.cold_start_rating == 1.0
    assert cfg.popularity_factor == pytest.approx(1.1)
    assert cfg.popularity_prior == 3.0
    assert cfg.eval_k is None


def test_load_config_reads_sections(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "neighbor_cf:\n"
        "  min_threshold: 2.0\n"
        "  cold_start_rating: 2.5\n"
        "popularity:\n"
        "  factor: 1.2\n"
        "evaluation:\n"
        "  k: 100\n"
    )
    cfg = load_config(path)
    assert cfg.min_threshold == 2.0
    assert cfg.cold_start_rating == 2.5
    assert cfg.popularity_factor == pytest.approx(1.2)
    assert cfg.popularity_prior == 3.0
    assert cfg.eval_k == 100


def test_load_yaml_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="mapping"):
        load_yaml(path)
    with pytest.raises(FileNotFoundError):
        load_yaml(tmp_path / "missing.yaml")


def test_config_flows_into_components(small_corpus) -> None:
    cfg = NeighborCFConfig(min_threshold=2.0, cold_start_rating=2.5)
    rec = NeighborhoodRecommender.from_triples(small_corpus, config=cfg)
    # sim(1, 3) == 1.0 is now below the floor.
    assert rec.predict(1, 60) == 2.5


def test_resolve_log_level_prefers_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert resolve_log_level({"logging": {"level": "debug"}}) == "DEBUG"
    assert resolve_log_level({}) == "INFO"
    monkeypatch.setenv("LOG_LEVEL", "warning")
    assert resolve_log_level({"logging": {"level": "debug"}}) == "WARNING"
