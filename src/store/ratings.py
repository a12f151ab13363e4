"""Rating records and the read-only rating store consumed by the scorer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Protocol

import pandas as pd


@dataclass(frozen=True)
class Rating:
    user_id: int
    item_id: int
    value: float


class RatingStore(Protocol):
    """Anything that can list all ratings and the ratings of one user."""

    def all_ratings(self) -> Iterable[Rating]:
        ...

    def ratings_by_user(self, user_id: int) -> Iterable[Rating]:
        ...


@dataclass(frozen=True)
class InMemoryRatingStore:
    """In-memory rating table with a per-user lookup index.

    Insertion order of `ratings` is preserved by `all_ratings()`, which in turn
    fixes the encounter order of raters seen by the neighborhood selector.
    """

    ratings: tuple[Rating, ...]
    user_to_rows: dict[int, tuple[int, ...]]

    @classmethod
    def from_ratings(cls, ratings: Iterable[Rating]) -> "InMemoryRatingStore":
        rows = tuple(ratings)
        user_rows: dict[int, list[int]] = {}
        seen: set[tuple[int, int]] = set()
        for i, r in enumerate(rows):
            key = (int(r.user_id), int(r.item_id))
            if key in seen:
                raise ValueError(f"duplicate rating for userId={key[0]} itemId={key[1]}")
            seen.add(key)
            user_rows.setdefault(key[0], []).append(i)

        return cls(
            ratings=rows,
            user_to_rows={u: tuple(idx) for u, idx in user_rows.items()},
        )

    @classmethod
    def from_records(cls, records: Iterable[tuple[int, int, float]]) -> "InMemoryRatingStore":
        """Build from plain `(user_id, item_id, value)` triples."""
        return cls.from_ratings(Rating(int(u), int(i), float(v)) for u, i, v in records)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "InMemoryRatingStore":
        """Build from a DataFrame with columns userId, itemId, rating."""
        required = {"userId", "itemId", "rating"}
        missing = required - set(df.columns)
        if missing:
            raise ValueError(f"ratings frame missing required columns: {sorted(missing)}")

        users = df["userId"].astype("int64").tolist()
        items = df["itemId"].astype("int64").tolist()
        values = df["rating"].astype("float64").tolist()
        return cls.from_ratings(Rating(int(u), int(i), float(v)) for u, i, v in zip(users, items, values))

    def all_ratings(self) -> Iterator[Rating]:
        return iter(self.ratings)

    def ratings_by_user(self, user_id: int) -> Iterator[Rating]:
        for i in self.user_to_rows.get(int(user_id), ()):
            yield self.ratings[i]

    def has_user(self, user_id: int) -> bool:
        return int(user_id) in self.user_to_rows

    def user_ids(self) -> list[int]:
        return list(self.user_to_rows)

    def item_ids(self) -> list[int]:
        return list(dict.fromkeys(r.item_id for r in self.ratings))

    def __len__(self) -> int:
        return len(self.ratings)
