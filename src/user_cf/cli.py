from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pandas as pd

from ..data import load_ratings
from ..paths import ProjectPaths, get_repo_root, resolve_path
from ..store.ratings import InMemoryRatingStore
from ..utils import config_section, load_yaml_config, setup_logging
from .scorer import UserCFScoreConfig, UserUserItemScorer


logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="User-user collaborative filtering item scorer")
    p.add_argument("--user-id", type=int, required=True, help="userId (raw id from ratings.csv)")
    p.add_argument("--items", type=int, nargs="+", required=True, help="itemIds to score")
    p.add_argument("--config", type=Path, default=Path("config.yaml"), help="Path to config YAML.")
    p.add_argument("--ratings", type=Path, default=None, help="Override ratings CSV path")
    p.add_argument("--neighborhood-size", type=int, default=None, help="Override neighborhood size (K)")
    p.add_argument("--min-neighbors", type=int, default=None, help="Override minimum neighborhood size")
    p.add_argument("--show-neighbors", action="store_true", help="Also print the neighborhood of each item")
    p.add_argument("--log-level", type=str, default="INFO")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level)

    repo_root = get_repo_root()
    config_path = resolve_path(repo_root, args.config)
    cfg_yaml = load_yaml_config(config_path) if config_path.exists() else {}

    dataset_cfg = config_section(cfg_yaml, "dataset")
    paths = ProjectPaths.from_repo_root(
        repo_root,
        raw_dir=str(dataset_cfg.get("raw_dir", "data/raw")),
        ratings_file=str(dataset_cfg.get("ratings_file", "ratings.csv")),
    )
    ratings_path = resolve_path(repo_root, args.ratings) if args.ratings is not None else paths.ratings_path

    user_cf_raw = dict(config_section(cfg_yaml, "user_cf"))
    if args.neighborhood_size is not None:
        user_cf_raw["neighborhood_size"] = args.neighborhood_size
    if args.min_neighbors is not None:
        user_cf_raw["min_neighbors"] = args.min_neighbors
    cfg = UserCFScoreConfig.from_mapping(user_cf_raw)

    ratings = load_ratings(
        ratings_path,
        min_rating=dataset_cfg.get("min_rating"),
        max_rating=dataset_cfg.get("max_rating"),
    )
    scorer = UserUserItemScorer(InMemoryRatingStore.from_frame(ratings), cfg)

    scored = scorer.score_with_details(int(args.user_id), args.items)

    print("\n=== Predicted Scores ===")
    if scored:
        df = pd.DataFrame([s.__dict__ for s in scored])
        print(df.to_string(index=False))
    else:
        print(f"No predictions (every item needs at least {cfg.min_neighbors} similar raters).")

    if args.show_neighbors:
        for item in dict.fromkeys(args.items):
            sims = scorer.neighbors_for(int(args.user_id), int(item))
            print(f"\n=== Neighbors for itemId={item} ===")
            if sims:
                print(pd.DataFrame([s.__dict__ for s in sims]).to_string(index=False))
            else:
                print("No positively similar raters.")


if __name__ == "__main__":
    main()
