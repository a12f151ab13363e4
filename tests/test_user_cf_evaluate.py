from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from src.pipelines.user_cf_evaluate import (
    UserCFEvalConfig,
    evaluate_scorer,
    main,
    run_evaluation,
    split_ratings,
)
from src.store.ratings import InMemoryRatingStore
from src.user_cf.scorer import UserCFScoreConfig, UserUserItemScorer


def test_evaluate_scorer_reports_coverage_and_errors(neighborhood_store: InMemoryRatingStore) -> None:
    scorer = UserUserItemScorer(neighborhood_store)
    test = pd.DataFrame({"userId": [1, 1], "itemId": [10, 999], "rating": [5.0, 3.0]})

    report = evaluate_scorer(scorer, test)

    assert report.n_test == 2
    assert report.n_predicted == 1
    assert report.n_users == 1
    assert report.coverage == pytest.approx(0.5)
    assert report.rmse == pytest.approx(1.0 / 3.0)
    assert report.mae == pytest.approx(1.0 / 3.0)


def test_evaluate_scorer_without_predictions(neighborhood_store: InMemoryRatingStore) -> None:
    test = pd.DataFrame({"userId": [7], "itemId": [10], "rating": [2.0]})
    report = evaluate_scorer(UserUserItemScorer(neighborhood_store), test)

    assert report.n_predicted == 0
    assert report.coverage == 0.0
    assert report.rmse is None
    assert report.mae is None


def test_split_ratings_is_reproducible() -> None:
    ratings = pd.DataFrame(
        {
            "userId": [u for u in range(1, 6) for _ in range(4)],
            "itemId": [i for _ in range(1, 6) for i in range(1, 5)],
            "rating": [float(1 + (u + i) % 5) for u in range(1, 6) for i in range(1, 5)],
        }
    )
    cfg = UserCFEvalConfig(test_size=0.25, random_state=7)

    train_a, test_a = split_ratings(ratings, cfg)
    train_b, test_b = split_ratings(ratings, cfg)

    assert len(train_a) == 15
    assert len(test_a) == 5
    pd.testing.assert_frame_equal(test_a, test_b)
    pd.testing.assert_frame_equal(train_a, train_b)


def test_split_ratings_rejects_bad_test_size() -> None:
    ratings = pd.DataFrame({"userId": [1, 2], "itemId": [1, 1], "rating": [4.0, 3.0]})
    with pytest.raises(ValueError):
        split_ratings(ratings, UserCFEvalConfig(test_size=1.5))


def test_run_evaluation_end_to_end(neighborhood_records: list[tuple[int, int, float]]) -> None:
    ratings = pd.DataFrame(neighborhood_records, columns=["userId", "itemId", "rating"])
    report = run_evaluation(
        ratings,
        score_cfg=UserCFScoreConfig(min_neighbors=1),
        eval_cfg=UserCFEvalConfig(test_size=0.3, random_state=0),
    )

    assert report.n_test == 4
    assert 0.0 <= report.coverage <= 1.0
    assert report.n_predicted <= report.n_test


def test_main_rejects_zero_test_size_instead_of_using_config_default(
    tmp_path: Path, neighborhood_records: list[tuple[int, int, float]]
) -> None:
    pd.DataFrame(neighborhood_records, columns=["userId", "itemId", "rating"]).to_csv(
        tmp_path / "ratings.csv", index=False
    )
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        f"dataset:\n  raw_dir: {tmp_path}\n  ratings_file: ratings.csv\n"
        "evaluation:\n  test_size: 0.3\n  random_state: 0\n"
    )

    with pytest.raises(ValueError, match="test_size"):
        main(["--config", str(cfg), "--test-size", "0", "--out-dir", str(tmp_path / "out")])
    assert not (tmp_path / "out").exists()
