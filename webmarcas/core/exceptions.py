"""Custom exceptions for the WebMarcas application."""

from __future__ import annotations

from typing import Any


class WebMarcasError(Exception):
    """Base exception for WebMarcas application."""

    pass


class ValidationError(WebMarcasError):
    """Raised when input validation fails before any side effect."""

    def __init__(self, message: str, field_errors: dict[str, list[str]] | None = None) -> None:
        super().__init__(message)
        self.field_errors = field_errors or {}


class NotFoundError(WebMarcasError):
    """Raised when a resource is not found."""

    pass


class DatabaseError(WebMarcasError):
    """Raised when a database operation fails."""

    pass


class ServiceError(WebMarcasError):
    """Raised when a service operation fails."""

    pass


class ExternalProviderError(ServiceError):
    """Raised when a third-party provider rejects or fails a request.

    ``errors`` keeps the provider's own error list untouched so callers can
    show it verbatim.
    """

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []
        self.status_code = status_code


class InvalidTransitionError(WebMarcasError, ValueError):
    """Raised when a disallowed state transition is attempted."""

    pass


class ConfigurationError(WebMarcasError):
    """Raised when configuration is invalid."""

    pass


class AuthenticationError(WebMarcasError):
    """Raised when authentication fails."""

    pass


class AuthorizationError(WebMarcasError):
    """Raised when an authenticated principal lacks permissions."""

    pass
