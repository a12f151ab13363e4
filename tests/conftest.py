from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `import src...` works when pytest uses importlib import mode.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from src.store.ratings import InMemoryRatingStore  # noqa: E402


# Target user 1 (mean 4.0) plus three raters of item 10 whose centered vectors
# are all parallel to {0, -1, 1}: each has similarity 0.5 to user 1.
NEIGHBORHOOD_RECORDS: list[tuple[int, int, float]] = [
    (1, 1, 5.0),
    (1, 2, 3.0),
    (2, 1, 2.0),
    (2, 2, 1.0),
    (2, 10, 3.0),
    (3, 1, 4.0),
    (3, 2, 2.0),
    (3, 10, 6.0),
    (4, 1, 3.5),
    (4, 2, 2.5),
    (4, 10, 4.5),
]


@pytest.fixture()
def neighborhood_records() -> list[tuple[int, int, float]]:
    return list(NEIGHBORHOOD_RECORDS)


@pytest.fixture()
def neighborhood_store(neighborhood_records: list[tuple[int, int, float]]) -> InMemoryRatingStore:
    return InMemoryRatingStore.from_records(neighborhood_records)
