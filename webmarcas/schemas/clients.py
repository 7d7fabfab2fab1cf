"""Client import/export schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ImportPreviewRequest(BaseModel):
    file_name: str = Field(min_length=1)
    content_base64: str = Field(min_length=1)


class ImportPreviewRow(BaseModel):
    row: int
    data: dict[str, str | None]
    errors: list[str] = Field(default_factory=list)


class ImportPreviewResponse(BaseModel):
    format: str
    headers: list[str]
    mapping: dict[str, str | None]
    total_rows: int
    valid_rows: int
    invalid_rows: int
    rows: list[ImportPreviewRow]


class ImportClientsRequest(ImportPreviewRequest):
    mapping: dict[str, str | None] | None = None
    update_existing: bool = False


class ImportRowError(BaseModel):
    row: int
    email: str | None = None
    error: str | None = None


class ImportSummaryResponse(BaseModel):
    total: int
    imported: int
    updated: int
    skipped: int
    errors: int
    error_details: list[ImportRowError] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
