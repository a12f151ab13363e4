from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from ..store.ratings import RatingStore
from .neighborhood import DEFAULT_NEIGHBORHOOD_SIZE, UserSimilarity, top_neighbors
from .vectors import RatingVector, rater_groups, rating_vector_for, vector_mean


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserCFScoreConfig:
    neighborhood_size: int = DEFAULT_NEIGHBORHOOD_SIZE
    # An item needs at least this many positively similar neighbors to be scored.
    min_neighbors: int = 3

    def __post_init__(self) -> None:
        if int(self.neighborhood_size) < 1:
            raise ValueError(f"neighborhood_size must be >= 1, got {self.neighborhood_size}")
        if int(self.min_neighbors) < 1:
            raise ValueError(f"min_neighbors must be >= 1, got {self.min_neighbors}")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "UserCFScoreConfig":
        """Build from the `user_cf` section of config.yaml (missing keys use defaults)."""
        raw = raw or {}
        return cls(
            neighborhood_size=int(raw.get("neighborhood_size", DEFAULT_NEIGHBORHOOD_SIZE)),
            min_neighbors=int(raw.get("min_neighbors", 3)),
        )


@dataclass(frozen=True)
class ScoredItem:
    itemId: int
    score: float
    neighbors: int
    user_mean: float


def predict(
    user_id: int,
    target_vector: RatingVector,
    item_id: int,
    rater_vectors: Mapping[int, RatingVector],
    *,
    k: int = DEFAULT_NEIGHBORHOOD_SIZE,
    min_neighbors: int = 3,
) -> ScoredItem | None:
    """Predict `user_id`'s rating for `item_id` from the item's raters.

    `rater_vectors` maps every user who rated the item to their full rating
    vector. Returns None when fewer than `min_neighbors` positively similar
    raters exist, or when the weighted average is undefined.
    """
    uid = int(user_id)
    item = int(item_id)
    candidates = {u: vec for u, vec in rater_vectors.items() if int(u) != uid and item in vec}

    neighbors = top_neighbors(target_vector, candidates, k=k)
    if len(neighbors) < int(min_neighbors):
        return None

    means = {v: vector_mean(candidates[v]) for v in neighbors}
    means[uid] = vector_mean(target_vector)

    num = 0.0
    den = 0.0
    for v, sim in neighbors.items():
        num += sim * (candidates[v][item] - means[v])
        den += sim

    if den == 0.0:
        return None
    score = means[uid] + num / den
    if not math.isfinite(score):
        return None
    return ScoredItem(itemId=item, score=float(score), neighbors=len(neighbors), user_mean=means[uid])


class UserUserItemScorer:
    """User-user item scorer over a rating store.

    Every call re-reads the store; nothing is cached between calls.
    """

    def __init__(self, store: RatingStore, config: UserCFScoreConfig | None = None) -> None:
        self.store = store
        self.config = config or UserCFScoreConfig()

    def score(self, user_id: int, item_ids: Iterable[int]) -> dict[int, float]:
        """Predicted scores for the items that have a usable neighborhood."""
        return {s.itemId: s.score for s in self.score_with_details(user_id, item_ids)}

    def score_with_details(self, user_id: int, item_ids: Iterable[int]) -> list[ScoredItem]:
        uid = int(user_id)
        items = list(dict.fromkeys(int(i) for i in item_ids))

        target = rating_vector_for(self.store, uid)
        groups = rater_groups(self.store)
        vectors: dict[int, RatingVector] = {uid: target}

        out: list[ScoredItem] = []
        for item in items:
            raters = groups.get(item)
            if not raters:
                logger.debug("user=%d item=%d: no raters", uid, item)
                continue

            rater_vectors = {u: self._vector(u, vectors) for u in raters}
            scored = predict(
                uid,
                target,
                item,
                rater_vectors,
                k=self.config.neighborhood_size,
                min_neighbors=self.config.min_neighbors,
            )
            if scored is None:
                logger.debug("user=%d item=%d: neighborhood too small", uid, item)
                continue
            out.append(scored)

        logger.debug("user=%d scored %d/%d items", uid, len(out), len(items))
        return out

    def neighbors_for(self, user_id: int, item_id: int) -> list[UserSimilarity]:
        """Ranked co-raters of `item_id` that would form the user's neighborhood."""
        uid = int(user_id)
        target = rating_vector_for(self.store, uid)
        raters = rater_groups(self.store).get(int(item_id), {})
        candidates = {u: rating_vector_for(self.store, u) for u in raters if u != uid}
        neighbors = top_neighbors(target, candidates, k=self.config.neighborhood_size)
        return [UserSimilarity(userId=u, similarity=sim) for u, sim in neighbors.items()]

    def _vector(self, user_id: int, cache: dict[int, RatingVector]) -> RatingVector:
        vec = cache.get(user_id)
        if vec is None:
            vec = rating_vector_for(self.store, user_id)
            cache[user_id] = vec
        return vec
