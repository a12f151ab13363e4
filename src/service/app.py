"""FastAPI service entrypoint for the user-user CF item scorer."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException

from ..data import load_ratings
from ..paths import ProjectPaths, get_repo_root
from ..store.ratings import InMemoryRatingStore
from ..user_cf.scorer import UserCFScoreConfig, UserUserItemScorer
from ..utils import config_section, load_yaml_config, setup_logging
from .schemas import (
    HealthResponse,
    NeighborsRequest,
    NeighborsResponse,
    ScoreRequest,
    ScoreResponse,
)

logger = logging.getLogger(__name__)


def _get_env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    p = Path(str(raw))
    return p if p.is_absolute() else (get_repo_root() / p).resolve()


def build_scorer(config_path: Path, ratings_path: Path | None = None) -> UserUserItemScorer:
    """Load config + ratings and wire an in-memory store into a scorer."""
    repo_root = get_repo_root()
    cfg_yaml = load_yaml_config(config_path) if config_path.exists() else {}
    dataset_cfg = config_section(cfg_yaml, "dataset")

    if ratings_path is None:
        paths = ProjectPaths.from_repo_root(
            repo_root,
            raw_dir=str(dataset_cfg.get("raw_dir", "data/raw")),
            ratings_file=str(dataset_cfg.get("ratings_file", "ratings.csv")),
        )
        ratings_path = paths.ratings_path

    ratings = load_ratings(
        ratings_path,
        min_rating=dataset_cfg.get("min_rating"),
        max_rating=dataset_cfg.get("max_rating"),
    )
    store = InMemoryRatingStore.from_frame(ratings)
    return UserUserItemScorer(store, UserCFScoreConfig.from_mapping(config_section(cfg_yaml, "user_cf")))


def ratings_path_override() -> Path | None:
    """Ratings CSV from `RATINGS_PATH`, or None to use the configured dataset."""
    if os.getenv("RATINGS_PATH", "").strip() == "":
        return None
    return _get_env_path("RATINGS_PATH", get_repo_root())


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    repo_root = get_repo_root()
    config_path = _get_env_path("CONFIG_PATH", repo_root / "config.yaml")
    ratings_path = ratings_path_override()

    logger.info("Starting service with config=%s", config_path)
    app.state.scorer = build_scorer(config_path, ratings_path)
    yield


app = FastAPI(title="User-User CF Scoring Service", lifespan=lifespan)


def _scorer(app_: FastAPI) -> UserUserItemScorer:
    scorer = getattr(app_.state, "scorer", None)
    if scorer is None:
        raise HTTPException(status_code=503, detail="Scorer not initialized")
    return scorer


@app.get("/health", response_model=HealthResponse)
def health() -> dict:
    scorer = _scorer(app)
    store = scorer.store
    return {
        "status": "ok",
        "users": len(store.user_ids()),
        "items": len(store.item_ids()),
        "ratings": len(store),
    }


@app.post("/user_cf/score", response_model=ScoreResponse)
def user_cf_score(req: ScoreRequest) -> dict:
    """Predict ratings for the requested items; items without a usable neighborhood are omitted."""
    scorer = _scorer(app)
    try:
        scored = scorer.score_with_details(int(req.userId), req.items)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {
        "userId": int(req.userId),
        "results": [{"itemId": s.itemId, "score": s.score, "neighbors": s.neighbors} for s in scored],
    }


@app.post("/user_cf/neighbors", response_model=NeighborsResponse)
def user_cf_neighbors(req: NeighborsRequest) -> dict:
    """Return the ranked, positively similar co-raters of an item."""
    scorer = _scorer(app)
    sims = scorer.neighbors_for(int(req.userId), int(req.itemId))
    return {
        "userId": int(req.userId),
        "itemId": int(req.itemId),
        "results": [s.__dict__ for s in sims],
    }
