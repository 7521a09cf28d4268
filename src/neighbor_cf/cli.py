"""Command-line entry point for neighborhood CF on MovieLens-100k.

Examples:
    python -m src.neighbor_cf.cli evaluate --split u1 --k 500
    python -m src.neighbor_cf.cli popular --top 10
    python -m src.neighbor_cf.cli predict --user-id 1 --item-id 20
    python -m src.neighbor_cf.cli similar --user-id 1 --threshold 4.5
"""
from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

from ..paths import ProjectPaths, get_repo_root
from ..utils import resolve_log_level, setup_logging
from .config import NeighborCFConfig, load_yaml
from .recommender import NeighborhoodRecommender


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Neighborhood collaborative filtering on MovieLens-100k")
    p.add_argument("--config", type=Path, default=None, help="Path to config YAML (default: <repo>/config.yaml)")
    p.add_argument("--data-dir", type=Path, default=None, help="Directory holding u.data / uN.base / uN.test")
    p.add_argument("--split", type=str, default=None, help="Split name (u1..u5, ua, ub); omit for u.data")

    sub = p.add_subparsers(dest="command", required=True)

    ev = sub.add_parser("evaluate", help="Predict the split's test ratings and report error statistics")
    ev.add_argument("--k", type=int, default=None, help="Only evaluate the first k test ratings")

    pop = sub.add_parser("popular", help="Show the most (and least) popular movies")
    pop.add_argument("--top", type=_positive_int, default=10, help="How many movies to show from each end")

    pr = sub.add_parser("predict", help="Predict one user's rating for one movie")
    pr.add_argument("--user-id", type=int, required=True)
    pr.add_argument("--item-id", type=int, required=True)

    si = sub.add_parser("similar", help="List users at or above a similarity threshold")
    si.add_argument("--user-id", type=int, required=True)
    si.add_argument("--threshold", type=float, default=4.8)
    si.add_argument("--limit", type=int, default=20)
    return p


def _load(args: argparse.Namespace) -> NeighborhoodRecommender:
    repo_root = get_repo_root()
    config_path = Path(args.config) if args.config is not None else repo_root / "config.yaml"
    cfg_yaml = load_yaml(config_path) if config_path.exists() else {}
    setup_logging(resolve_log_level(cfg_yaml))

    dataset_cfg = cfg_yaml.get("dataset", {}) if isinstance(cfg_yaml.get("dataset"), dict) else {}
    if args.data_dir is not None:
        raw_dir = Path(args.data_dir)
    else:
        raw_dir = ProjectPaths.from_repo_root(repo_root, raw_dir=str(dataset_cfg.get("raw_dir", "data/ml-100k"))).raw_dir

    split = args.split
    if split is None and args.command == "evaluate":
        split = dataset_cfg.get("split")

    return NeighborhoodRecommender.from_dataset(
        raw_dir,
        split,
        config=NeighborCFConfig.from_mapping(cfg_yaml),
    )


def main(argv: list[str] | None = None) -> None:
    args = build_arg_parser().parse_args(argv)
    rec = _load(args)

    if args.command == "evaluate":
        result = rec.evaluate(k=args.k)
        print("\n=== Evaluation ===")
        print(f"cases evaluated: {len(result.cases)}")
        print(f"average prediction error: {result.mean_abs_error:.6f}")
        print(f"variance: {result.variance:.6f}")
        print(f"root mean square: {result.rms:.6f}")

    elif args.command == "popular":
        top = int(args.top)
        ranking = rec.popularity_ranking()
        print(f"\n=== Top {top} by popularity ===")
        print(pd.DataFrame([p.__dict__ for p in rec.popular_items(top)]).to_string(index=False))
        tail = [
            {"movieId": i, "popularity": rec.popularity(i), "n_ratings": len(rec.store.ratings_of(i))}
            for i in ranking[max(len(ranking) - top, 0) :]
        ]
        print(f"\n=== Bottom {top} by popularity ===")
        print(pd.DataFrame(tail).to_string(index=False))

    elif args.command == "predict":
        pred = rec.predict(args.user_id, args.item_id)
        print(f"predicted rating for user {args.user_id} on movie {args.item_id}: {pred:.4f}")

    elif args.command == "similar":
        sims = rec.similar_users(args.user_id, threshold=float(args.threshold))[: int(args.limit)]
        print("\n=== Similar Users ===")
        if sims:
            print(pd.DataFrame([s.__dict__ for s in sims]).to_string(index=False))
        else:
            print("No similar users found (try lowering --threshold).")


if __name__ == "__main__":
    main()
