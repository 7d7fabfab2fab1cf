"""Manual promotion expiry runs for API v1."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Header

from webmarcas.api.v1._authz import require, to_http_error
from webmarcas.core.exceptions import WebMarcasError
from webmarcas.database.db import get_db_session
from webmarcas.schemas.promotions import PromotionRunRequest, PromotionRunResponse
from webmarcas.services.promotion_service import PromotionService

router = APIRouter(prefix="/promotions", tags=["promotions"])


@router.post("/expire", response_model=PromotionRunResponse)
def expire(
    payload: PromotionRunRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> PromotionRunResponse:
    require(authorization, scopes=["promotions.run"])
    try:
        with get_db_session() as db:
            result = PromotionService(db=db).expire_promotions(test_mode=payload.test_mode)
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc
    return PromotionRunResponse(**asdict(result))
