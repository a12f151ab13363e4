from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .similarity import cosine_similarity
from .vectors import RatingVector


DEFAULT_NEIGHBORHOOD_SIZE = 30


@dataclass(frozen=True)
class UserSimilarity:
    userId: int
    similarity: float


def rank_similar_users(
    target: RatingVector,
    candidates: Mapping[int, RatingVector],
) -> list[UserSimilarity]:
    """Score every candidate against `target`, best first.

    The sort is stable, so equal similarities keep the candidates' encounter order.
    """
    scored = [UserSimilarity(userId=int(uid), similarity=cosine_similarity(target, vec)) for uid, vec in candidates.items()]
    return sorted(scored, key=lambda s: s.similarity, reverse=True)


def top_neighbors(
    target: RatingVector,
    candidates: Mapping[int, RatingVector],
    k: int = DEFAULT_NEIGHBORHOOD_SIZE,
) -> dict[int, float]:
    """Select up to `k` most similar candidates with strictly positive similarity.

    Returns a user -> similarity map in rank order.
    """
    if int(k) < 1:
        raise ValueError(f"neighborhood size must be >= 1, got {k}")

    neighbors: dict[int, float] = {}
    for s in rank_similar_users(target, candidates)[: int(k)]:
        if s.similarity <= 0.0:
            # Sorted descending: nothing after this can be positive.
            break
        neighbors[s.userId] = s.similarity
    return neighbors
