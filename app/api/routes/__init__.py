"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.rating_routes import router as rating_router
from app.api.routes.session_routes import router as session_router
from app.api.routes.admin_routes import router as admin_router
from app.api.routes.analytics_routes import router as analytics_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(rating_router)
api_router.include_router(session_router)
api_router.include_router(admin_router)
api_router.include_router(analytics_router)
