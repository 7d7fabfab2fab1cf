"""Promotion expiry run schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from webmarcas.models.enums import PromotionRunStatus


class PromotionRunRequest(BaseModel):
    test_mode: bool = False


class PromotionRunResponse(BaseModel):
    status: PromotionRunStatus
    test_mode: bool
    contracts_found: int
    contracts_updated: int
    contract_ids: list[int] = Field(default_factory=list)
    errors: list[dict] = Field(default_factory=list)
