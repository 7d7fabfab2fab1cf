"""HS256 session tokens for staff and client logins.

Access tokens are short lived and carry the role used for scope checks.
Refresh tokens only mint new pairs; ``/auth/refresh`` re-reads the role from
the users table before issuing them.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from webmarcas.core.exceptions import AuthenticationError

ALGORITHM = "HS256"
ACCESS = "access"
REFRESH = "refresh"

_WRONG_USE = {
    ACCESS: "Token is not an access token.",
    REFRESH: "Token is not a refresh token.",
}


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


def _segment(document: dict[str, Any]) -> str:
    raw = json.dumps(document, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _unsegment(segment: str) -> dict[str, Any]:
    try:
        raw = base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
        document = json.loads(raw.decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as exc:
        raise AuthenticationError("Invalid token payload.") from exc
    if not isinstance(document, dict):
        raise AuthenticationError("Invalid token payload.")
    return document


def _signature(signing_input: str, secret: str) -> str:
    mac = hmac.new(secret.encode("utf-8"), signing_input.encode("utf-8"), hashlib.sha256)
    return base64.urlsafe_b64encode(mac.digest()).decode("ascii").rstrip("=")


def _require_secret(secret: str) -> None:
    if not secret:
        raise AuthenticationError("JWT secret must be configured.")


def encode_jwt(payload: dict[str, Any], secret: str, ttl: timedelta) -> str:
    """Sign ``payload`` adding ``iat``, ``exp`` and ``jti`` unless already present."""
    _require_secret(secret)
    issued_at = datetime.now(timezone.utc)
    claims = {
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
        "jti": uuid.uuid4().hex,
        **payload,
    }
    signing_input = f"{_segment({'alg': ALGORITHM, 'typ': 'JWT'})}.{_segment(claims)}"
    return f"{signing_input}.{_signature(signing_input, secret)}"


def decode_jwt(
    token: str,
    secret: str,
    verify_exp: bool = True,
    expected_use: str | None = None,
) -> dict[str, Any]:
    """Verify signature, algorithm, expiry and (optionally) ``token_use``; return the claims."""
    _require_secret(secret)
    parts = (token or "").split(".")
    if len(parts) != 3:
        raise AuthenticationError("Invalid token format.")
    header_segment, payload_segment, signature_segment = parts

    signing_input = f"{header_segment}.{payload_segment}"
    if not hmac.compare_digest(_signature(signing_input, secret), signature_segment):
        raise AuthenticationError("Invalid token signature.")
    if _unsegment(header_segment).get("alg") != ALGORITHM:
        raise AuthenticationError("Unsupported token algorithm.")

    claims = _unsegment(payload_segment)
    if verify_exp:
        if "exp" not in claims:
            raise AuthenticationError("Token is missing exp claim.")
        if int(claims["exp"]) < int(datetime.now(timezone.utc).timestamp()):
            raise AuthenticationError("Token has expired.")
    if expected_use is not None and claims.get("token_use") != expected_use:
        raise AuthenticationError(_WRONG_USE.get(expected_use, "Unexpected token use."))
    return claims


def session_claims(user_id: int, role: str, permissions_version: int, token_use: str) -> dict[str, Any]:
    return {
        "sub": str(user_id),
        "role": role,
        "permissions_version": permissions_version,
        "token_use": token_use,
    }


def create_access_token(
    user_id: int,
    role: str,
    secret: str,
    permissions_version: int = 1,
    ttl_minutes: int = 15,
) -> str:
    claims = session_claims(user_id, role, permissions_version, ACCESS)
    return encode_jwt(claims, secret, ttl=timedelta(minutes=ttl_minutes))


def create_refresh_token(
    user_id: int,
    role: str,
    secret: str,
    permissions_version: int = 1,
    ttl_days: int = 14,
) -> str:
    claims = session_claims(user_id, role, permissions_version, REFRESH)
    return encode_jwt(claims, secret, ttl=timedelta(days=ttl_days))


def create_token_pair(
    user_id: int,
    role: str,
    secret: str,
    permissions_version: int = 1,
    access_ttl_minutes: int = 15,
    refresh_ttl_days: int = 14,
) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(user_id, role, secret, permissions_version, access_ttl_minutes),
        refresh_token=create_refresh_token(user_id, role, secret, permissions_version, refresh_ttl_days),
    )
