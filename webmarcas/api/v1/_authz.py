"""Shared authorization and error translation helpers for API v1 route modules."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from webmarcas.auth.rbac import require_scopes
from webmarcas.core.config import get_config
from webmarcas.core.dependencies import CurrentUser, get_current_user
from webmarcas.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DatabaseError,
    ExternalProviderError,
    InvalidTransitionError,
    NotFoundError,
    ServiceError,
    ValidationError,
    WebMarcasError,
)
from webmarcas.schemas.common import ErrorEnvelope

logger = logging.getLogger(__name__)


def _extract_bearer_token(authorization: str | None) -> str:
    if authorization is None or not authorization.strip():
        raise AuthenticationError("Authorization header is required.")
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Authorization header must use Bearer token.")
    return parts[1].strip()


def authorize(authorization: str | None, scopes: list[str]) -> CurrentUser:
    token = _extract_bearer_token(authorization)
    user = get_current_user(token=token, settings=get_config())
    require_scopes(user.role, scopes)
    return user


def map_auth_error(exc: Exception) -> tuple[int, str]:
    if isinstance(exc, AuthenticationError):
        return 401, str(exc)
    if isinstance(exc, AuthorizationError):
        return 403, str(exc)
    return 401, "Unauthorized."


def require(authorization: str | None, scopes: list[str]) -> CurrentUser:
    """``authorize`` with auth failures raised as ``HTTPException``."""
    try:
        return authorize(authorization=authorization, scopes=scopes)
    except (AuthenticationError, AuthorizationError) as exc:
        code, detail = map_auth_error(exc)
        raise HTTPException(status_code=code, detail=detail) from exc


def _error(status_code: int, error_code: str, detail: str, **extra) -> HTTPException:
    envelope = ErrorEnvelope(error_code=error_code, detail=detail, **extra)
    return HTTPException(status_code=status_code, detail=envelope.model_dump(exclude_none=True))


def to_http_error(exc: WebMarcasError) -> HTTPException:
    if isinstance(exc, ValidationError):
        if exc.field_errors:
            return _error(
                status.HTTP_422_UNPROCESSABLE_ENTITY, "validation_error", str(exc), field_errors=exc.field_errors
            )
        return _error(status.HTTP_400_BAD_REQUEST, "validation_error", str(exc))
    if isinstance(exc, NotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, "not_found", str(exc))
    if isinstance(exc, InvalidTransitionError):
        return _error(status.HTTP_409_CONFLICT, "invalid_transition", str(exc))
    if isinstance(exc, ExternalProviderError):
        return _error(status.HTTP_502_BAD_GATEWAY, "provider_error", str(exc), errors=exc.errors)
    if isinstance(exc, (AuthenticationError, AuthorizationError)):
        code, message = map_auth_error(exc)
        return _error(code, "unauthorized" if code == 401 else "forbidden", message)
    if isinstance(exc, ServiceError):
        return _error(status.HTTP_502_BAD_GATEWAY, "service_error", str(exc))
    if isinstance(exc, DatabaseError):
        logger.error("api.database_error", extra={"event": "api.database_error", "error": str(exc)})
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "database_error", "Database operation failed.")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", str(exc))
