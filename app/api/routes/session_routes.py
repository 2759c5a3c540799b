"""
Session Routes

POST /sessions - Issue a session (auth gateway only, X-Service-Key)
GET /sessions - My active sessions
GET /sessions/me - Current session
DELETE /sessions/current - Logout
POST /sessions/revoke-all - Logout everywhere
"""

from datetime import timedelta
from typing import List
from fastapi import APIRouter, Depends, Request

from app.core.auth import create_access_token, get_current_user, require_service_key
from app.core.config import get_settings
from app.core.exceptions import AuthenticationException
from app.services.session_service import SessionService
from app.utils.request_meta import get_request_meta
from app.schemas.schemas import (
    SessionCreate, SessionTokenResponse, SessionResponse, CountResponse, MessageResponse
)

router = APIRouter(prefix="/sessions", tags=["Sessions"])
settings = get_settings()


@router.post(
    "",
    response_model=SessionTokenResponse,
    status_code=201,
    dependencies=[Depends(require_service_key)]
)
async def create_session(data: SessionCreate, request: Request):
    """
    Issue a session for a user whose Google identity the gateway has verified.

    Returns the bearer token to use on every other endpoint.
    """
    ttl = timedelta(minutes=data.ttl_minutes or settings.session_ttl_minutes)
    session = SessionService().create(
        user_id=data.user_id,
        external_id=data.google_id,
        ttl=ttl,
        device_info=data.device_info.model_dump() if data.device_info else None,
        request_meta=get_request_meta(request),
        role=data.role.value,
    )
    return SessionTokenResponse(
        access_token=create_access_token(session),
        session_id=session["session_id"],
        expires_at=session["expires_at"],
    )


@router.get("", response_model=List[SessionResponse])
async def list_my_sessions(user: dict = Depends(get_current_user)):
    """Active sessions of the current user, most recently used first."""
    return SessionService().list_active(user["user_id"])


@router.get("/me", response_model=SessionResponse)
async def get_my_session(user: dict = Depends(get_current_user)):
    """The session behind the current token."""
    session = SessionService().get(user["session_id"])
    if session is None:
        raise AuthenticationException("Session expired or revoked")
    return session


@router.delete("/current", response_model=MessageResponse)
async def logout(user: dict = Depends(get_current_user)):
    """Deactivate the current session."""
    SessionService().revoke(user["session_id"])
    return MessageResponse(message="Logged out")


@router.post("/revoke-all", response_model=CountResponse)
async def revoke_all_sessions(user: dict = Depends(get_current_user)):
    """Deactivate every session of the current user, this one included."""
    count = SessionService().revoke_all(user["user_id"])
    return CountResponse(message="All sessions revoked", count=count)
