"""FastAPI service entrypoint for neighborhood CF predictions and popularity.

Run with:
    python -m src.service.app --port 8000
or equivalently:
    uvicorn src.service.app:app --port 8000
"""

from __future__ import annotations

import argparse
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException, Query

from ..neighbor_cf.config import NeighborCFConfig, load_yaml
from ..neighbor_cf.errors import EmptyCorpusError, NotFoundError
from ..neighbor_cf.recommender import NeighborhoodRecommender
from ..paths import ProjectPaths, get_repo_root
from ..utils import resolve_log_level, setup_logging
from .schemas import (
    PopularResponse,
    PredictRequest,
    PredictResponse,
    SimilarUsersRequest,
    SimilarUsersResponse,
)

logger = logging.getLogger(__name__)


def _get_env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    p = Path(str(raw))
    return p if p.is_absolute() else (get_repo_root() / p).resolve()


@asynccontextmanager
async def lifespan(app: FastAPI):
    repo_root = get_repo_root()
    config_path = _get_env_path("CONFIG_PATH", repo_root / "config.yaml")
    config = load_yaml(config_path)
    setup_logging(resolve_log_level(config))

    dataset_cfg = config.get("dataset", {}) if isinstance(config.get("dataset"), dict) else {}
    raw_dir = _get_env_path(
        "DATA_DIR",
        ProjectPaths.from_repo_root(repo_root, raw_dir=str(dataset_cfg.get("raw_dir", "data/ml-100k"))).raw_dir,
    )
    split = os.getenv("DATA_SPLIT") or dataset_cfg.get("split")

    logger.info("Starting service with config=%s data=%s split=%s", config_path, raw_dir, split)
    app.state.recommender = NeighborhoodRecommender.from_dataset(
        raw_dir,
        split,
        config=NeighborCFConfig.from_mapping(config),
    )
    yield


app = FastAPI(title="MovieLens Neighborhood CF Service", lifespan=lifespan)


def _recommender(app_: FastAPI) -> NeighborhoodRecommender:
    rec = getattr(app_.state, "recommender", None)
    if rec is None:
        raise HTTPException(status_code=503, detail="Recommender not initialized")
    return rec


@app.get("/health")
def health() -> dict:
    rec = getattr(app.state, "recommender", None)
    if rec is None:
        return {"status": "starting"}
    return {
        "status": "ok",
        "users": rec.store.n_users,
        "movies": rec.store.n_items,
        "ratings": rec.store.n_ratings,
    }


@app.post("/predict", response_model=PredictResponse)
def predict(req: PredictRequest) -> dict:
    """Predict a rating from the mean rating of similar users who rated the movie."""
    rec = _recommender(app)
    try:
        pred = rec.predict(int(req.userId), int(req.movieId))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except EmptyCorpusError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    return {"userId": int(req.userId), "movieId": int(req.movieId), "prediction": float(pred)}


@app.get("/popular", response_model=PopularResponse)
def popular(limit: int = Query(10, ge=1, le=2000)) -> dict:
    """Movies ordered by smoothed popularity, most popular first."""
    rec = _recommender(app)
    try:
        items = rec.popular_items(int(limit))
    except EmptyCorpusError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return {"limit": int(limit), "results": [p.__dict__ for p in items]}


@app.post("/similar_users", response_model=SimilarUsersResponse)
def similar_users(req: SimilarUsersRequest) -> dict:
    """Return users whose rating agreement with `userId` meets the threshold."""
    rec = _recommender(app)
    try:
        sims = rec.similar_users(int(req.userId), threshold=float(req.threshold))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except EmptyCorpusError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {
        "userId": int(req.userId),
        "threshold": float(req.threshold),
        "results": [s.__dict__ for s in sims[: int(req.top_n)]],
    }


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Serve neighborhood CF predictions over HTTP.")
    p.add_argument("--host", type=str, default="127.0.0.1", help="Bind address.")
    p.add_argument("--port", type=int, default=8000, help="Bind port.")
    p.add_argument("--reload", action="store_true", help="Auto-reload on code changes (development only).")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_arg_parser().parse_args(argv)
    uvicorn.run("src.service.app:app", host=args.host, port=int(args.port), reload=bool(args.reload))


if __name__ == "__main__":
    main()
