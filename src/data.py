from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)


REQUIRED_COLUMNS: Tuple[str, ...] = ("userId", "itemId", "rating")

# MovieLens exports name the item column `movieId`.
ITEM_COLUMN_ALIASES: Tuple[str, ...] = ("itemId", "movieId", "item")


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    if "itemId" in df.columns:
        return df
    for alias in ITEM_COLUMN_ALIASES:
        if alias in df.columns:
            return df.rename(columns={alias: "itemId"})
    return df


def load_ratings(
    path: Path,
    *,
    min_rating: float | None = None,
    max_rating: float | None = None,
) -> pd.DataFrame:
    """Load a ratings CSV (userId, itemId|movieId, rating[, timestamp]).

    Notes
    -----
    Ids must be integral (a value such as 10.9 is rejected, not truncated);
    they are then cast to int64 and ratings to float64 so that the rating
    store sees the same values regardless of how the CSV was written.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"ratings file not found: {path}")

    df = pd.read_csv(path)
    df = _normalize_columns(df)
    validate_ratings(df, min_rating=min_rating, max_rating=max_rating)

    out = df[list(REQUIRED_COLUMNS)].copy()
    out["userId"] = out["userId"].astype("int64")
    out["itemId"] = out["itemId"].astype("int64")
    out["rating"] = out["rating"].astype("float64")
    logger.info(
        "Loaded ratings from %s: rows=%d users=%d items=%d",
        path,
        len(out),
        out["userId"].nunique(),
        out["itemId"].nunique(),
    )
    return out


def validate_ratings(
    df: pd.DataFrame,
    *,
    min_rating: float | None = None,
    max_rating: float | None = None,
) -> None:
    """Validate that required columns exist and basic constraints hold."""
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"ratings missing columns: {missing}")

    if df[list(REQUIRED_COLUMNS)].isna().any().any():
        raise ValueError("ratings contain null userId/itemId/rating values")

    for col in ("userId", "itemId"):
        ids = pd.to_numeric(df[col], errors="coerce").to_numpy(dtype=np.float64)
        if not np.isfinite(ids).all() or (ids != np.floor(ids)).any():
            raise ValueError(f"ratings contain non-integer {col} values")

    values = pd.to_numeric(df["rating"], errors="coerce").to_numpy(dtype=np.float64)
    if not np.isfinite(values).all():
        raise ValueError("ratings contain non-numeric or non-finite rating values")

    if min_rating is not None and (values < float(min_rating)).any():
        raise ValueError(f"ratings contain values below min_rating={min_rating}")
    if max_rating is not None and (values > float(max_rating)).any():
        raise ValueError(f"ratings contain values above max_rating={max_rating}")

    # A rating vector maps each item to exactly one value.
    if df.duplicated(subset=["userId", "itemId"]).any():
        raise ValueError("ratings contain duplicate (userId, itemId) rows")
