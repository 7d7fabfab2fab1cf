"""Client import and export endpoints for API v1."""

from __future__ import annotations

import base64
import binascii

from fastapi import APIRouter, Header, HTTPException, Query, Response, status

from webmarcas.api.v1._authz import require, to_http_error
from webmarcas.core.exceptions import WebMarcasError
from webmarcas.database.db import get_db_session
from webmarcas.models import Profile
from webmarcas.schemas.clients import (
    ImportClientsRequest,
    ImportPreviewRequest,
    ImportPreviewResponse,
    ImportPreviewRow,
    ImportSummaryResponse,
)
from webmarcas.services.client_export import export_clients
from webmarcas.services.client_import_service import ClientImportService
from webmarcas.services.client_parser import (
    apply_field_mapping,
    parse_client_file,
    suggest_field_mapping,
    validate_clients,
)

router = APIRouter(prefix="/clients", tags=["clients"])

PREVIEW_ROWS = 20


def _decode(content_base64: str) -> bytes:
    payload = content_base64.split(",", 1)[-1] if content_base64.startswith("data:") else content_base64
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="content_base64 is not valid base64.") from exc


@router.post("/import/preview", response_model=ImportPreviewResponse)
def preview_import(
    payload: ImportPreviewRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> ImportPreviewResponse:
    require(authorization, scopes=["clients.import"])
    content = _decode(payload.content_base64)
    try:
        parsed = parse_client_file(payload.file_name, content)
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc

    mapping = suggest_field_mapping(parsed.headers)
    records = apply_field_mapping(parsed.rows, mapping)
    report = validate_clients(records)
    invalid = report.rows_with_errors()
    rows = [
        ImportPreviewRow(
            row=record.row_index + 1,
            data={key: (str(value) if value is not None else None) for key, value in record.to_dict().items() if key != "row_index"},
            errors=[error.message for error in report.for_row(record.row_index)],
        )
        for record in records[:PREVIEW_ROWS]
    ]
    return ImportPreviewResponse(
        format=parsed.format,
        headers=parsed.headers,
        mapping=mapping,
        total_rows=len(records),
        valid_rows=len(records) - len(invalid),
        invalid_rows=len(invalid),
        rows=rows,
    )


@router.post("/import", response_model=ImportSummaryResponse)
def import_clients(
    payload: ImportClientsRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> ImportSummaryResponse:
    require(authorization, scopes=["clients.import"])
    content = _decode(payload.content_base64)
    try:
        summary = ClientImportService().import_file(
            payload.file_name,
            content,
            mapping=payload.mapping,
            update_existing=payload.update_existing,
        )
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc
    return ImportSummaryResponse(
        total=summary.total,
        imported=summary.imported,
        updated=summary.updated,
        skipped=summary.skipped,
        errors=summary.errors,
        error_details=summary.error_details,
        warnings=summary.warnings,
    )


@router.get("/export")
def export(
    fmt: str = Query(default="csv", alias="format", pattern="^(csv|xlsx|xml|pdf)$"),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Response:
    require(authorization, scopes=["clients.export"])
    with get_db_session() as db:
        clients = db.query(Profile).order_by(Profile.created_at.desc()).all()
        try:
            content, media_type, filename = export_clients(clients, fmt)
        except WebMarcasError as exc:
            raise to_http_error(exc) from exc
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
