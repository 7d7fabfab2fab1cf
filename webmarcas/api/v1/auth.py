"""Auth endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from webmarcas.auth.jwt import REFRESH, create_token_pair, decode_jwt
from webmarcas.core.config import get_config
from webmarcas.core.exceptions import AuthenticationError
from webmarcas.core.security import verify_password
from webmarcas.database.db import get_db_session
from webmarcas.models import User
from webmarcas.schemas.auth import LoginRequest, RefreshRequest, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue(user_id: int, role: str, permissions_version: int) -> TokenResponse:
    cfg = get_config()
    tokens = create_token_pair(
        user_id=user_id,
        role=role,
        secret=cfg.JWT_SECRET,
        permissions_version=permissions_version,
        access_ttl_minutes=cfg.JWT_ACCESS_TTL_MINUTES,
        refresh_ttl_days=cfg.JWT_REFRESH_TTL_DAYS,
    )
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_type=tokens.token_type,
    )


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest) -> TokenResponse:
    email = payload.email.strip().lower()
    if not email or not payload.password.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials.")

    with get_db_session() as db:
        user = db.query(User).filter(User.email == email).first()
        if user is None or not user.is_active or not verify_password(payload.password, user.password_hash):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials.")
        return _issue(user.id, user.role.value, get_config().JWT_PERMISSIONS_VERSION)


@router.post("/refresh", response_model=TokenResponse)
def refresh(payload: RefreshRequest) -> TokenResponse:
    cfg = get_config()
    try:
        claims = decode_jwt(payload.refresh_token, secret=cfg.JWT_SECRET, expected_use=REFRESH)
    except AuthenticationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    if int(claims.get("permissions_version", 0)) < cfg.JWT_PERMISSIONS_VERSION:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token permissions are outdated.")

    # role is re-read from the users row
    with get_db_session() as db:
        user = db.get(User, int(claims["sub"]))
        if user is None or not user.is_active:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is not active.")
        return _issue(user.id, user.role.value, cfg.JWT_PERMISSIONS_VERSION)
