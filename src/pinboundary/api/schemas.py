from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class PointIn(BaseModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


class ContainsResult(BaseModel):
    pincode: str
    inside: bool


class EntitiesIn(BaseModel):
    properties: list[dict[str, Any]] = Field(default_factory=list)
    projects: list[dict[str, Any]] = Field(default_factory=list)
    professionals: list[dict[str, Any]] = Field(default_factory=list)


class EntityCounts(BaseModel):
    properties: int = 0
    projects: int = 0
    professionals: int = 0


class EntitiesResult(BaseModel):
    success: bool = True
    pincode: str
    centroid: dict[str, float]
    entities: EntitiesIn
    counts: EntityCounts


class CacheClearIn(BaseModel):
    pincode: str | None = None


class CacheStats(BaseModel):
    success: bool = True
    size: int
    keys: list[str]
