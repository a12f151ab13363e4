from __future__ import annotations

import math

import numpy as np

from .vectors import RatingVector, mean_center


def _l2_norm(vector: RatingVector) -> float:
    if not vector:
        return 0.0
    return float(np.linalg.norm(np.fromiter(vector.values(), dtype=np.float64, count=len(vector))))


def cosine_similarity(a: RatingVector, b: RatingVector) -> float:
    """Mean-centered cosine similarity between two users' rating vectors.

    Each vector is centered on its own mean. The dot product runs over the
    items both users rated, while each norm covers that user's full vector.
    A user with no rating variance (no ratings, or all ratings equal) has no
    direction to compare, so the similarity is 0.0.
    """
    if len(set(a.values())) <= 1 or len(set(b.values())) <= 1:
        return 0.0

    a_c = mean_center(a)
    b_c = mean_center(b)

    norm_a = _l2_norm(a_c)
    norm_b = _l2_norm(b_c)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    small, large = (a_c, b_c) if len(a_c) <= len(b_c) else (b_c, a_c)
    dot = 0.0
    for item, value in small.items():
        other = large.get(item)
        if other is not None:
            dot += value * other

    sim = dot / (norm_a * norm_b)
    if not math.isfinite(sim):
        return 0.0
    return sim
