"""Pydantic schemas for the neighborhood CF API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PredictRequest(BaseModel):
    """Predict one user's rating for one movie."""

    userId: int = Field(..., ge=1, description="MovieLens user_id from the rating log")
    movieId: int = Field(..., ge=1, description="MovieLens item_id from the rating log")


class PredictResponse(BaseModel):
    userId: int
    movieId: int
    prediction: float


class PopularItem(BaseModel):
    movieId: int
    popularity: float
    n_ratings: int


class PopularResponse(BaseModel):
    limit: int
    results: list[PopularItem]


class SimilarUsersRequest(BaseModel):
    """Request for users whose rating agreement meets a threshold."""

    userId: int = Field(..., ge=1, description="MovieLens user_id from the rating log")
    threshold: float = Field(4.8, ge=0.0, le=5.0, description="Minimum similarity (0..5)")
    top_n: int = Field(20, ge=1, le=500, description="Maximum number of users to return")


class SimilarUserItem(BaseModel):
    userId: int
    similarity: float
    common_rated: int


class SimilarUsersResponse(BaseModel):
    userId: int
    threshold: float
    results: list[SimilarUserItem]
