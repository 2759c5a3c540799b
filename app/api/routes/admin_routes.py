"""
Admin Routes (admin role required)

POST /admin/activity - Record an admin action
GET /admin/activity - Recent activity feed
GET /admin/activity/admins/{admin_id} - Activity by admin
GET /admin/activity/actions/{action} - Activity by action type
GET /admin/activity/targets/{target_type}/{target_id} - Activity on a target
POST /admin/users/{user_id}/suspend - Revoke all sessions of a user
POST /admin/sessions/cleanup - Sweep expired/inactive sessions now
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request

from app.core.auth import get_current_admin
from app.services.admin_activity_service import AdminActivityService
from app.services.session_service import SessionService
from app.utils.request_meta import get_request_meta
from app.schemas.schemas import (
    AdminAction, AdminActivityCreate, AdminActivityResponse, CountResponse,
    SuspendUserRequest, TargetType
)

router = APIRouter(prefix="/admin", tags=["Admin"])


# ============================================================
# AUDIT LOG
# ============================================================

@router.post("/activity", response_model=AdminActivityResponse, status_code=201)
async def record_activity(
    data: AdminActivityCreate,
    request: Request,
    admin: dict = Depends(get_current_admin)
):
    """Append an entry to the audit log. Entries cannot be edited afterwards."""
    return AdminActivityService().record(
        admin_id=admin["user_id"],
        action=data.action,
        target_type=data.target_type,
        target_id=data.target_id,
        details=data.details,
        request_meta=get_request_meta(request),
    )


@router.get("/activity", response_model=List[AdminActivityResponse])
async def recent_activity(
    limit: int = Query(50, ge=1, le=200),
    admin: dict = Depends(get_current_admin)
):
    return AdminActivityService().recent(limit)


@router.get("/activity/admins/{admin_id}", response_model=List[AdminActivityResponse])
async def activity_by_admin(
    admin_id: str,
    limit: int = Query(50, ge=1, le=200),
    admin: dict = Depends(get_current_admin)
):
    return AdminActivityService().by_admin(admin_id, limit)


@router.get("/activity/actions/{action}", response_model=List[AdminActivityResponse])
async def activity_by_action(
    action: AdminAction,
    limit: int = Query(50, ge=1, le=200),
    admin: dict = Depends(get_current_admin)
):
    return AdminActivityService().by_action(action, limit)


@router.get("/activity/targets/{target_type}/{target_id}", response_model=List[AdminActivityResponse])
async def activity_by_target(
    target_type: TargetType,
    target_id: str,
    limit: int = Query(50, ge=1, le=200),
    admin: dict = Depends(get_current_admin)
):
    return AdminActivityService().by_target(target_type, target_id, limit)


# ============================================================
# SESSION MODERATION
# ============================================================

@router.post("/users/{user_id}/suspend", response_model=CountResponse)
async def suspend_user(
    user_id: str,
    request: Request,
    data: Optional[SuspendUserRequest] = None,
    admin: dict = Depends(get_current_admin)
):
    """Log a suspended user out of every device and audit the suspension."""
    count = SessionService().revoke_all(user_id)
    AdminActivityService().record(
        admin_id=admin["user_id"],
        action=AdminAction.user_suspended,
        target_type=TargetType.user,
        target_id=user_id,
        details=data.model_dump(exclude_none=True) if data else None,
        request_meta=get_request_meta(request),
    )
    return CountResponse(message=f"User {user_id} suspended", count=count)


@router.post("/sessions/cleanup", response_model=CountResponse)
async def cleanup_sessions(request: Request, admin: dict = Depends(get_current_admin)):
    """Run the expired/inactive session sweep immediately."""
    deleted = SessionService().cleanup_expired()
    AdminActivityService().record(
        admin_id=admin["user_id"],
        action=AdminAction.system_maintenance,
        target_type=TargetType.system,
        target_id="sessions",
        details={"reason": "session cleanup", "bulk_count": deleted},
        request_meta=get_request_meta(request),
    )
    return CountResponse(message="Expired sessions removed", count=deleted)
