"""Dependency providers for API handlers and background workers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from webmarcas.auth.jwt import ACCESS, decode_jwt
from webmarcas.core.config import Config, get_config
from webmarcas.core.exceptions import AuthenticationError


@dataclass(frozen=True)
class CurrentUser:
    user_id: int
    role: str
    permissions_version: int
    claims: dict[str, Any]


def get_settings() -> Config:
    return get_config()


def get_current_user(token: str, settings: Config | None = None) -> CurrentUser:
    """Resolve the current principal from an access token."""
    cfg = settings or get_settings()
    claims = decode_jwt(token=token, secret=cfg.JWT_SECRET, expected_use=ACCESS)

    try:
        user = CurrentUser(
            user_id=int(claims["sub"]),
            role=str(claims["role"]).lower(),
            permissions_version=int(claims.get("permissions_version", 1)),
            claims=claims,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise AuthenticationError("Invalid auth claims.") from exc

    if user.permissions_version < cfg.JWT_PERMISSIONS_VERSION:
        raise AuthenticationError("Token permissions are outdated; sign in again.")
    return user
