"""Pydantic models for catalog records and request/response payloads."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Product(BaseModel):
    """A catalog entry. Absent or unusable text fields read as ``""``."""

    model_config = ConfigDict(frozen=True, extra="allow")

    code: str = ""
    name: str = ""
    category: str = ""
    description: str = ""

    @field_validator("code", "name", "category", "description", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        if isinstance(value, str):
            return value
        # JSON catalogs often carry numeric article codes.
        if isinstance(value, bool):
            return ""
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (int, float)):
            return str(value)
        return ""


class ProductCounts(BaseModel):
    count: int
    loadedAt: str | None = None
    error: str | None = None


class EnvironmentInfo(BaseModel):
    python: str
    platform: str
    env: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: float
    products: ProductCounts
    environment: EnvironmentInfo


class SearchResponse(BaseModel):
    query: str
    count: int
    results: list[Product]
    classification: str | None = None
    searchTimeMs: float = 0.0
    cached: bool = False
    message: str | None = None


class ErrorResponse(BaseModel):
    error: str
    message: str
    query: str | None = None
    count: int = 0
    results: list[Product] = Field(default_factory=list)


class ReloadResponse(BaseModel):
    success: bool
    productCount: int
    error: str | None = None
