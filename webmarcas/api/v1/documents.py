"""Legal document generation endpoints for API v1."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Header

from webmarcas.api.v1._authz import require, to_http_error
from webmarcas.core.exceptions import WebMarcasError
from webmarcas.schemas.contracts import GenerateDocumentRequest, GenerateDocumentResponse
from webmarcas.services.contract_renderer import generate_document
from webmarcas.templates.defaults import DOCUMENT_TITLES

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/generate", response_model=GenerateDocumentResponse)
def generate(
    payload: GenerateDocumentRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> GenerateDocumentResponse:
    require(authorization, scopes=["documents.generate"])
    try:
        content = generate_document(payload.document_type, payload.variables, payload.today or date.today())
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc
    return GenerateDocumentResponse(
        document_type=payload.document_type,
        title=DOCUMENT_TITLES[payload.document_type.value],
        content=content,
    )
