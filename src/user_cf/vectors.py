"""Per-user rating vectors and the item -> raters grouping."""

from __future__ import annotations

from typing import Dict

import numpy as np

from ..store.ratings import RatingStore


RatingVector = Dict[int, float]


def rating_vector_for(store: RatingStore, user_id: int) -> RatingVector:
    """Return every rating authored by `user_id` as an item -> value map.

    Unknown users yield an empty vector.
    """
    uid = int(user_id)
    vector: RatingVector = {}
    for r in store.ratings_by_user(uid):
        if int(r.user_id) != uid:
            continue
        vector[int(r.item_id)] = float(r.value)
    return vector


def rater_groups(store: RatingStore) -> dict[int, dict[int, float]]:
    """Group the full rating table by item: item -> {user -> rating}."""
    groups: dict[int, dict[int, float]] = {}
    for r in store.all_ratings():
        groups.setdefault(int(r.item_id), {})[int(r.user_id)] = float(r.value)
    return groups


def vector_mean(vector: RatingVector) -> float:
    """Arithmetic mean over the vector's own entries (0.0 when empty)."""
    if not vector:
        return 0.0
    return float(np.fromiter(vector.values(), dtype=np.float64, count=len(vector)).mean())


def mean_center(vector: RatingVector) -> RatingVector:
    """Return a new vector with the vector's own mean subtracted from every entry."""
    mean = vector_mean(vector)
    return {item: value - mean for item, value in vector.items()}
