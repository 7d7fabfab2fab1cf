"""Brand viability endpoint for API v1."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter

from webmarcas.api.v1._authz import to_http_error
from webmarcas.core.exceptions import WebMarcasError
from webmarcas.schemas.viability import ViabilityRequest, ViabilityResponse
from webmarcas.services.viability_service import ViabilityService

router = APIRouter(prefix="/viability", tags=["viability"])


@router.post("", response_model=ViabilityResponse)
def check(payload: ViabilityRequest) -> ViabilityResponse:
    try:
        result = ViabilityService().check_viability(payload.brand_name, payload.business_area)
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc
    return ViabilityResponse(**asdict(result))
