from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from src.data import load_ratings
from src.store.ratings import InMemoryRatingStore, Rating
from src.user_cf.vectors import rater_groups, rating_vector_for


def test_rating_vector_only_contains_the_users_ratings(neighborhood_store: InMemoryRatingStore) -> None:
    assert rating_vector_for(neighborhood_store, 3) == {1: 4.0, 2: 2.0, 10: 6.0}
    assert rating_vector_for(neighborhood_store, 12345) == {}


def test_rating_vector_is_independent_of_record_order(neighborhood_records: list[tuple[int, int, float]]) -> None:
    forward = InMemoryRatingStore.from_records(neighborhood_records)
    backward = InMemoryRatingStore.from_records(list(reversed(neighborhood_records)))

    for uid in (1, 2, 3, 4):
        assert rating_vector_for(forward, uid) == rating_vector_for(backward, uid)


def test_rater_groups_group_by_item(neighborhood_store: InMemoryRatingStore) -> None:
    groups = rater_groups(neighborhood_store)

    assert set(groups) == {1, 2, 10}
    assert groups[10] == {2: 3.0, 3: 6.0, 4: 4.5}
    assert list(groups[1]) == [1, 2, 3, 4]


def test_store_rejects_duplicate_user_item_pairs() -> None:
    with pytest.raises(ValueError, match="duplicate"):
        InMemoryRatingStore.from_records([(1, 1, 4.0), (1, 1, 3.0)])


def test_store_lookup_helpers(neighborhood_store: InMemoryRatingStore) -> None:
    assert len(neighborhood_store) == 11
    assert neighborhood_store.has_user(2)
    assert not neighborhood_store.has_user(99)
    assert neighborhood_store.user_ids() == [1, 2, 3, 4]
    assert neighborhood_store.item_ids() == [1, 2, 10]
    assert list(neighborhood_store.ratings_by_user(2)) == [Rating(2, 1, 2.0), Rating(2, 2, 1.0), Rating(2, 10, 3.0)]


def test_store_from_frame() -> None:
    df = pd.DataFrame({"userId": [1, 1, 2], "itemId": [5, 6, 5], "rating": [4, 2, 3.5]})
    store = InMemoryRatingStore.from_frame(df)

    assert rating_vector_for(store, 1) == {5: 4.0, 6: 2.0}
    with pytest.raises(ValueError, match="missing required columns"):
        InMemoryRatingStore.from_frame(df.drop(columns=["rating"]))


def _write_csv(path: Path, rows: list[str]) -> Path:
    path.write_text("\n".join(rows) + "\n")
    return path


def test_load_ratings_accepts_movielens_columns(tmp_path: Path) -> None:
    csv = _write_csv(
        tmp_path / "ratings.csv",
        ["userId,movieId,rating,timestamp", "1,10,4.0,964982703", "1,20,3.5,964981247", "2,10,5.0,964982224"],
    )

    df = load_ratings(csv, min_rating=0.5, max_rating=5.0)

    assert list(df.columns) == ["userId", "itemId", "rating"]
    assert df["userId"].dtype == "int64"
    assert df["itemId"].tolist() == [10, 20, 10]
    assert df["rating"].tolist() == [4.0, 3.5, 5.0]


@pytest.mark.parametrize(
    "rows, message",
    [
        (["userId,itemId,rating", "1,10,4.0", "1,10,3.0"], "duplicate"),
        (["userId,itemId,rating", "1,10,7.0"], "above max_rating"),
        (["userId,itemId,rating", "1,10,0.0"], "below min_rating"),
        (["userId,itemId,rating", "1,10,abc"], "non-finite"),
        (["userId,rating", "1,4.0"], "missing columns"),
        (["userId,itemId,rating", "1.7,10,4.0"], "non-integer userId"),
        (["userId,itemId,rating", "2,10.9,3.0"], "non-integer itemId"),
    ],
)
def test_load_ratings_rejects_bad_input(tmp_path: Path, rows: list[str], message: str) -> None:
    csv = _write_csv(tmp_path / "ratings.csv", rows)
    with pytest.raises(ValueError, match=message):
        load_ratings(csv, min_rating=0.5, max_rating=5.0)


def test_load_ratings_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_ratings(tmp_path / "nope.csv")
