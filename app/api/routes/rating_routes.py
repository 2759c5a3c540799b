"""
Rating Routes

POST /ratings/submit - Submit a rating (1-5 with label)
GET /ratings/all - All ratings, newest first
GET /ratings/stats - Histogram, total and average
"""

from typing import List
from fastapi import APIRouter, Request

from app.services.rating_service import RatingService
from app.utils.request_meta import get_request_meta
from app.schemas.schemas import (
    RatingSubmit, RatingResponse, RatingSubmitResponse, RatingStatsResponse
)

router = APIRouter(prefix="/ratings", tags=["Ratings"])


@router.post("/submit", response_model=RatingSubmitResponse, status_code=201)
async def submit_rating(data: RatingSubmit, request: Request):
    """Submit a rating from the feedback popup."""
    rating = RatingService().submit(data.rating, data.label, get_request_meta(request))
    return RatingSubmitResponse(message="Rating submitted successfully", rating=rating)


@router.get("/all", response_model=List[RatingResponse])
async def list_ratings():
    """Get all ratings, newest first."""
    return RatingService().list_all()


@router.get("/stats", response_model=RatingStatsResponse)
async def rating_stats():
    """Count per score (ascending), total count and average (0 when empty)."""
    return RatingService().stats()
