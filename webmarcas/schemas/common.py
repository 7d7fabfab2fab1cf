"""Common schema module."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ErrorEnvelope(BaseModel):
    status: str = "error"
    error_code: str
    detail: str
    field_errors: dict[str, list[str]] | None = None
    errors: list[dict[str, Any]] | None = None
