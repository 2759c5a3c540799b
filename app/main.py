"""
PlacedIn - Main Application

FastAPI backend for the PlacedIn placement-experience platform:
- MongoDB for sessions, admin audit log, daily analytics and ratings
- JWT bearer tokens bound to server-side sessions
- React frontend hosted separately (Netlify)

Run: uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.exceptions import register_exception_handlers
from app.core.logger import configure_logging
from app.db.mongodb import init_mongo_indexes, test_mongo_connection
from app.services.session_cleanup import SessionCleanupTask

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create indexes and start the session sweeper; stop it on shutdown."""
    try:
        init_mongo_indexes()
    except PyMongoError as e:
        logger.warning("MongoDB index initialization failed: %s", e)

    sweeper = None
    if settings.session_cleanup_interval_seconds > 0:
        sweeper = SessionCleanupTask(settings.session_cleanup_interval_seconds)
        sweeper.start()

    try:
        yield
    finally:
        if sweeper is not None:
            await sweeper.stop()
        logger.info("PlacedIn API shut down")


# Create FastAPI app
app = FastAPI(
    title="PlacedIn API",
    description="""
    Backend for PlacedIn, where students share placement and internship experiences.

    ## Features
    - **Sessions**: server-side login sessions with TTL expiry and revocation
    - **Admin audit log**: append-only record of moderation actions
    - **Analytics**: one rollup document per day with atomic counters
    - **Ratings**: site feedback with score statistics
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-Service-Key"],
)

register_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
