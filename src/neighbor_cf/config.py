from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .neighbors import DEFAULT_MIN_THRESHOLD, DEFAULT_START_THRESHOLD, DEFAULT_THRESHOLD_STEP
from .popularity import DEFAULT_FACTOR, DEFAULT_PRIOR
from .predictor import COLD_START_RATING


@dataclass(frozen=True)
class NeighborCFConfig:
    start_threshold: float = DEFAULT_START_THRESHOLD
    min_threshold: float = DEFAULT_MIN_THRESHOLD
    threshold_step: float = DEFAULT_THRESHOLD_STEP
    cold_start_rating: float = COLD_START_RATING
    popularity_factor: float = DEFAULT_FACTOR
    popularity_prior: float = DEFAULT_PRIOR
    eval_k: int | None = None

    @classmethod
    def from_mapping(cls, cfg: dict[str, Any]) -> "NeighborCFConfig":
        """Build from the parsed `config.yaml` mapping; missing keys keep defaults."""

        def _section(name: str) -> dict[str, Any]:
            raw = cfg.get(name, {})
            return raw if isinstance(raw, dict) else {}

        ncf = _section("neighbor_cf")
        pop = _section("popularity")
        ev = _section("evaluation")
        eval_k = ev.get("k")
        return cls(
            start_threshold=float(ncf.get("start_threshold", DEFAULT_START_THRESHOLD)),
            min_threshold=float(ncf.get("min_threshold", DEFAULT_MIN_THRESHOLD)),
            threshold_step=float(ncf.get("threshold_step", DEFAULT_THRESHOLD_STEP)),
            cold_start_rating=float(ncf.get("cold_start_rating", COLD_START_RATING)),
            popularity_factor=float(pop.get("factor", DEFAULT_FACTOR)),
            popularity_prior=float(pop.get("prior", DEFAULT_PRIOR)),
            eval_k=(None if eval_k is None else int(eval_k)),
        )


def load_yaml(path: Path) -> dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    obj = yaml.safe_load(path.read_text())
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ValueError(f"Expected YAML mapping at {path}, got {type(obj)}")
    return obj


def load_config(path: Path) -> NeighborCFConfig:
    return NeighborCFConfig.from_mapping(load_yaml(path))
