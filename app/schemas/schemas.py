"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Response models read raw MongoDB documents, so "_id" is accepted
(and emitted) through an alias.
"""

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from typing import Optional, List, Dict, Any
from datetime import date, datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    admin = "admin"


class AdminAction(str, Enum):
    experience_approved = "experience_approved"
    experience_rejected = "experience_rejected"
    experience_deleted = "experience_deleted"
    user_promoted = "user_promoted"
    user_demoted = "user_demoted"
    user_suspended = "user_suspended"
    user_reactivated = "user_reactivated"
    bulk_approval = "bulk_approval"
    bulk_rejection = "bulk_rejection"
    system_maintenance = "system_maintenance"


class TargetType(str, Enum):
    experience = "experience"
    user = "user"
    system = "system"


class DocumentModel(BaseModel):
    """Base for models built from stored documents."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")


# ============================================================
# DEVICE INFO
# ============================================================

class DeviceInfo(BaseModel):
    browser: Optional[str] = None
    os: Optional[str] = None
    device: Optional[str] = None


# ============================================================
# RATING SCHEMAS
# ============================================================

class RatingSubmit(BaseModel):
    rating: StrictInt = Field(..., ge=1, le=5)
    label: str = Field(..., min_length=1, max_length=100)

class RatingResponse(DocumentModel):
    rating: int
    label: str
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    timestamp: datetime

class RatingSubmitResponse(BaseModel):
    message: str
    rating: RatingResponse

class RatingStat(BaseModel):
    rating: int
    count: int
    label: str

class RatingStatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    stats: List[RatingStat]
    total_ratings: int = Field(..., alias="totalRatings")
    average_rating: float = Field(..., alias="averageRating")


# ============================================================
# SESSION SCHEMAS
# ============================================================

class SessionCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    google_id: str = Field(..., min_length=1)
    role: UserRole = UserRole.student
    device_info: Optional[DeviceInfo] = None
    ttl_minutes: Optional[int] = Field(None, ge=1)

class SessionTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    session_id: str
    expires_at: datetime

class SessionResponse(BaseModel):
    session_id: str
    user_id: str
    external_id: str
    is_active: bool
    expires_at: datetime
    last_accessed_at: datetime
    device_info: Optional[DeviceInfo] = None
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime


# ============================================================
# ADMIN ACTIVITY SCHEMAS
# ============================================================

class AdminActivityDetails(BaseModel):
    """Known detail fields; anything else the caller sends is kept as-is."""
    model_config = ConfigDict(extra="allow")

    experience_title: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    reason: Optional[str] = None
    previous_status: Optional[str] = None
    new_status: Optional[str] = None
    bulk_count: Optional[int] = Field(None, ge=0)

class AdminActivityCreate(BaseModel):
    action: AdminAction
    target_type: TargetType
    target_id: str = Field(..., min_length=1)
    details: Optional[AdminActivityDetails] = None

class AdminActivityResponse(DocumentModel):
    admin_id: str
    action: AdminAction
    target_type: TargetType
    target_id: str
    details: Dict[str, Any] = {}
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

class SuspendUserRequest(BaseModel):
    reason: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None


# ============================================================
# ANALYTICS SCHEMAS
# ============================================================

class PageViewTrack(BaseModel):
    page: Optional[str] = Field(None, max_length=200)

class DailyMetricsUpdate(BaseModel):
    day: Optional[date] = None  # defaults to today (UTC)
    metrics: Dict[str, StrictInt]

class TopCompany(BaseModel):
    name: str
    count: int = Field(..., ge=0)

class TopGraduationYear(BaseModel):
    year: int = Field(..., ge=1900, le=2100)
    count: int = Field(..., ge=0)

class TopListsUpdate(BaseModel):
    top_companies: Optional[List[TopCompany]] = None
    top_graduation_years: Optional[List[TopGraduationYear]] = None

class PerformanceUpdate(BaseModel):
    avg_response_time: Optional[float] = Field(None, ge=0)
    error_rate: Optional[float] = Field(None, ge=0, le=100)
    uptime: Optional[float] = Field(None, ge=0, le=100)

class DailyMetrics(BaseModel):
    daily_active_users: int = 0
    new_registrations: int = 0
    experiences_submitted: int = 0
    experiences_approved: int = 0
    experiences_rejected: int = 0
    page_views: int = 0
    search_queries: int = 0
    top_companies: List[TopCompany] = []
    top_graduation_years: List[TopGraduationYear] = []

class PerformanceStats(BaseModel):
    avg_response_time: float = 0
    error_rate: float = 0
    uptime: float = 100

class AnalyticsDayResponse(BaseModel):
    date: datetime
    metrics: DailyMetrics
    performance: PerformanceStats
    pages: Dict[str, int] = {}

class ViewSummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_views: int = Field(..., alias="totalViews")
    today_views: int = Field(..., alias="todayViews")
    page_views: Dict[str, int] = Field(..., alias="pageViews")


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class CountResponse(BaseModel):
    message: str
    count: int

class ErrorResponse(BaseModel):
    error: str
    message: str
