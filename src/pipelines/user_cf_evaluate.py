from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

import numpy as np
import pandas as pd
from sklearn import model_selection

from ..data import load_ratings
from ..paths import ProjectPaths, get_repo_root, resolve_path
from ..store.ratings import InMemoryRatingStore
from ..user_cf.scorer import UserCFScoreConfig, UserUserItemScorer
from ..utils import config_section, load_yaml_config, setup_logging


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserCFEvalConfig:
    test_size: float = 0.1
    random_state: int = 42
    max_users: int | None = None


@dataclass(frozen=True)
class EvaluationReport:
    n_test: int
    n_predicted: int
    coverage: float
    rmse: float | None
    mae: float | None
    n_users: int


def split_ratings(ratings: pd.DataFrame, cfg: UserCFEvalConfig) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Random holdout split of the rating table."""
    if not 0.0 < float(cfg.test_size) < 1.0:
        raise ValueError(f"test_size must be in (0, 1), got {cfg.test_size}")
    df_train, df_test = model_selection.train_test_split(
        ratings,
        test_size=float(cfg.test_size),
        random_state=int(cfg.random_state),
    )
    return df_train.reset_index(drop=True), df_test.reset_index(drop=True)


def evaluate_scorer(
    scorer: UserUserItemScorer,
    test: pd.DataFrame,
    *,
    max_users: int | None = None,
) -> EvaluationReport:
    """Score every held-out (user, item) pair and compare with the true rating.

    Pairs without a prediction count against coverage but not against the
    error metrics.
    """
    users = test["userId"].drop_duplicates().astype("int64").tolist()
    if max_users is not None:
        users = users[: int(max_users)]
    test = test[test["userId"].isin(users)]

    errors: list[float] = []
    for uid, grp in test.groupby("userId", sort=False):
        truth = dict(zip(grp["itemId"].astype(int).tolist(), grp["rating"].astype(float).tolist()))
        preds = scorer.score(int(uid), truth.keys())
        errors.extend(preds[item] - truth[item] for item in preds)

    n_test = int(len(test))
    n_pred = len(errors)
    err = np.asarray(errors, dtype=np.float64)
    return EvaluationReport(
        n_test=n_test,
        n_predicted=n_pred,
        coverage=(float(n_pred) / n_test) if n_test else 0.0,
        rmse=float(np.sqrt(np.mean(err**2))) if n_pred else None,
        mae=float(np.mean(np.abs(err))) if n_pred else None,
        n_users=len(users),
    )


def run_evaluation(
    ratings: pd.DataFrame,
    *,
    score_cfg: UserCFScoreConfig,
    eval_cfg: UserCFEvalConfig,
) -> EvaluationReport:
    df_train, df_test = split_ratings(ratings, eval_cfg)
    logger.info("UserCF eval: train=%d test=%d", len(df_train), len(df_test))

    scorer = UserUserItemScorer(InMemoryRatingStore.from_frame(df_train), score_cfg)
    report = evaluate_scorer(scorer, df_test, max_users=eval_cfg.max_users)
    logger.info(
        "UserCF eval: users=%d predicted=%d/%d coverage=%.4f rmse=%s mae=%s",
        report.n_users,
        report.n_predicted,
        report.n_test,
        report.coverage,
        "n/a" if report.rmse is None else f"{report.rmse:.4f}",
        "n/a" if report.mae is None else f"{report.mae:.4f}",
    )
    return report


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Evaluate the user-user CF scorer on a holdout split.")
    p.add_argument("--config", type=Path, default=Path("config.yaml"), help="Path to config YAML.")
    p.add_argument("--out-dir", type=Path, default=None, help="Output directory for the metrics file")
    p.add_argument("--test-size", type=float, default=None, help="Override holdout fraction")
    p.add_argument("--max-users", type=int, default=None, help="Only evaluate the first N test users")
    p.add_argument("--neighborhood-size", type=int, default=None, help="Override neighborhood size (K)")
    return p


def main(argv: list[str] | None = None) -> None:
    setup_logging("INFO")
    args = build_arg_parser().parse_args(argv)
    repo_root = get_repo_root()
    cfg_yaml = load_yaml_config(resolve_path(repo_root, args.config))

    dataset_cfg = config_section(cfg_yaml, "dataset")
    paths = ProjectPaths.from_repo_root(
        repo_root,
        raw_dir=str(dataset_cfg.get("raw_dir", "data/raw")),
        ratings_file=str(dataset_cfg.get("ratings_file", "ratings.csv")),
    )
    ratings = load_ratings(
        paths.ratings_path,
        min_rating=dataset_cfg.get("min_rating"),
        max_rating=dataset_cfg.get("max_rating"),
    )

    user_cf_raw = dict(config_section(cfg_yaml, "user_cf"))
    if args.neighborhood_size is not None:
        user_cf_raw["neighborhood_size"] = args.neighborhood_size
    score_cfg = UserCFScoreConfig.from_mapping(user_cf_raw)

    eval_raw = config_section(cfg_yaml, "evaluation")
    max_users = args.max_users if args.max_users is not None else eval_raw.get("max_users")
    eval_cfg = UserCFEvalConfig(
        test_size=float(args.test_size if args.test_size is not None else eval_raw.get("test_size", 0.1)),
        random_state=int(eval_raw.get("random_state", 42)),
        max_users=(None if max_users is None else int(max_users)),
    )

    report = run_evaluation(ratings, score_cfg=score_cfg, eval_cfg=eval_cfg)

    out_dir = resolve_path(repo_root, args.out_dir) if args.out_dir is not None else paths.user_cf_dir
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / "user_cf_eval.json"
    payload = {
        "report": asdict(report),
        "score_config": asdict(score_cfg),
        "eval_config": asdict(eval_cfg),
        "ratings_path": str(paths.ratings_path),
    }
    out_path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n")
    logger.info("Wrote %s", out_path)


if __name__ == "__main__":
    main()
