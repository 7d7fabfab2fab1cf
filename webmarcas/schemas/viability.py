"""Viability check schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from webmarcas.schemas.checkout import ViabilityLevel


class ViabilityRequest(BaseModel):
    brand_name: str = Field(min_length=1, max_length=100)
    business_area: str = Field(min_length=1, max_length=200)


class FamousBrandMatchOut(BaseModel):
    brand: str
    similarity: int


class ViabilityResponse(BaseModel):
    level: ViabilityLevel
    title: str
    description: str
    classes: list[int] = Field(default_factory=list)
    class_descriptions: list[str] = Field(default_factory=list)
    famous_brand_match: FamousBrandMatchOut | None = None
