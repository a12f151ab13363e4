"""Pydantic schemas for the online scoring API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ScoreRequest(BaseModel):
    """Request for user-user CF item scores."""

    userId: int = Field(..., description="userId from ratings.csv")
    items: list[int] = Field(..., min_length=1, max_length=1000, description="itemIds to score")


class ScoredItemResponse(BaseModel):
    itemId: int
    score: float
    neighbors: int


class ScoreResponse(BaseModel):
    userId: int
    results: list[ScoredItemResponse]


class NeighborsRequest(BaseModel):
    """Request for the neighborhood a user would get for one item."""

    userId: int
    itemId: int


class NeighborItem(BaseModel):
    userId: int
    similarity: float


class NeighborsResponse(BaseModel):
    userId: int
    itemId: int
    results: list[NeighborItem]


class HealthResponse(BaseModel):
    status: str
    users: int
    items: int
    ratings: int
