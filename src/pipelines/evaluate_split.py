from __future__ import annotations

import argparse
import copy
import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..data import load_split
from ..neighbor_cf.config import NeighborCFConfig, load_yaml
from ..neighbor_cf.recommender import NeighborhoodRecommender
from ..paths import ProjectPaths, get_repo_root
from ..utils import resolve_log_level, setup_logging


logger = logging.getLogger(__name__)


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def split_files(raw_dir: Path, split: str | None) -> list[Path]:
    if split is None:
        return [raw_dir / "u.data"]
    return [raw_dir / f"{split}.base", raw_dir / f"{split}.test"]


def dataset_fingerprint(paths: list[Path]) -> dict[str, Any]:
    """Compute a deterministic sha256 fingerprint over the rating logs used."""
    missing = [p.name for p in paths if not p.exists()]
    if missing:
        raise FileNotFoundError(f"Missing rating logs: {missing}")

    combined = hashlib.sha256()
    for p in paths:
        combined.update(p.name.encode("utf-8"))
        combined.update(b"\0")
        combined.update(_sha256_file(p).encode("ascii"))

    return {
        "fingerprint_sha256": combined.hexdigest(),
        "files_sha256": {p.name: _sha256_file(p) for p in paths},
    }


def _rel(repo_root: Path, path: Path) -> str:
    try:
        return path.resolve().relative_to(repo_root.resolve()).as_posix()
    except ValueError:
        return str(path.resolve())


def run_evaluation(
    *,
    config_path: Path,
    split: str | None,
    k: int | None,
    force: bool,
) -> dict[str, Any]:
    """Evaluate one dataset split and write `<split>_metrics.json` under the eval dir."""
    repo_root = get_repo_root()
    config = load_yaml(config_path.resolve())

    dataset_cfg = config.get("dataset", {}) if isinstance(config.get("dataset"), dict) else {}
    eval_cfg = config.get("evaluation", {}) if isinstance(config.get("evaluation"), dict) else {}
    split = split or dataset_cfg.get("split")
    if not split:
        raise ValueError("Evaluation needs a split with a .test file (e.g. --split u1)")

    paths = ProjectPaths.from_repo_root(
        repo_root,
        raw_dir=str(dataset_cfg.get("raw_dir", "data/ml-100k")),
        eval_dir=eval_cfg.get("out_dir"),
    )
    out_path = paths.eval_dir / f"{split}_metrics.json"
    if out_path.exists() and not force:
        raise FileExistsError(f"Metrics already exist at {out_path}. Re-run with --force to overwrite.")
    paths.eval_dir.mkdir(parents=True, exist_ok=True)

    cfg = NeighborCFConfig.from_mapping(config)
    if k is None:
        k = cfg.eval_k

    logger.info("Loading split %s from %s", split, paths.raw_dir)
    rec = NeighborhoodRecommender.from_split(load_split(paths.raw_dir, split), config=cfg)
    result = rec.evaluate(k=k)

    now_utc = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    config_snapshot = copy.deepcopy(config)
    config_snapshot.setdefault("evaluation", {})
    config_snapshot["evaluation"].update({"k": k})

    manifest = {
        "evaluated_at_utc": now_utc,
        "dataset": {
            "raw_dir": _rel(repo_root, paths.raw_dir),
            "split": split,
            **dataset_fingerprint(split_files(paths.raw_dir, split)),
        },
        "config": config_snapshot,
        "corpus": {
            "users": rec.store.n_users,
            "items": rec.store.n_items,
            "ratings": rec.store.n_ratings,
        },
        "metrics": result.summary(),
    }
    out_path.write_text(json.dumps(manifest, indent=2, sort_keys=True) + "\n")
    logger.info("Wrote metrics to %s", out_path)
    return manifest


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Evaluate neighborhood CF predictions on a MovieLens-100k split.")
    p.add_argument("--config", type=Path, default=Path("config.yaml"), help="Path to config YAML.")
    p.add_argument("--split", type=str, default=None, help="Split name (u1..u5, ua, ub); default from config.")
    p.add_argument("--k", type=int, default=None, help="Only evaluate the first k test ratings.")
    p.add_argument("--force", action="store_true", help="Overwrite an existing metrics file.")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_arg_parser().parse_args(argv)
    config_path = Path(args.config)
    if not config_path.is_absolute():
        config_path = (get_repo_root() / config_path).resolve()
    setup_logging(resolve_log_level(load_yaml(config_path)))

    manifest = run_evaluation(config_path=config_path, split=args.split, k=args.k, force=bool(args.force))
    metrics = manifest["metrics"]
    logger.info(
        "split=%s cases=%d mean_abs_error=%.4f variance=%.4f rms=%.4f",
        manifest["dataset"]["split"],
        metrics["n_cases"],
        metrics["mean_abs_error"],
        metrics["variance"],
        metrics["rms"],
    )


if __name__ == "__main__":
    main()
