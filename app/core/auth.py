"""
Authentication Utility - JWT and session handling.

Provides:
- JWT creation/verification (the token carries the session id)
- FastAPI dependencies for protected routes

A valid signature is not enough: every authenticated request touches
the session, so logout, revocation and expiry take effect immediately.
"""

import secrets
from datetime import datetime
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import get_settings
from app.core.exceptions import AuthenticationException, AuthorizationException
from app.services.session_service import SessionService

settings = get_settings()

# Bearer token extractor (auto_error=False so we answer with our own 401)
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(session: dict) -> str:
    """Create JWT access token for a freshly created session."""
    to_encode = {
        "sub": session["user_id"],
        "sid": session["session_id"],
        "role": session["role"],
        "exp": session["expires_at"],
        "iat": datetime.utcnow(),
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def require_service_key(x_service_key: Optional[str] = Header(None)) -> None:
    """Dependency - only the auth gateway may issue sessions."""
    if not x_service_key or not secrets.compare_digest(x_service_key, settings.service_api_key):
        raise AuthenticationException("Invalid service key")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    if credentials is None:
        raise AuthenticationException("Not authenticated")

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sid"):
        raise AuthenticationException("Invalid or expired token")

    session = SessionService().touch(payload["sid"])
    if session is None or session["user_id"] != payload.get("sub"):
        raise AuthenticationException("Session expired or revoked")

    return {
        "user_id": session["user_id"],
        "role": session.get("role", "student"),
        "session_id": session["session_id"],
    }


async def get_current_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require admin role."""
    if user["role"] != "admin":
        raise AuthorizationException("Admins only")
    return user
