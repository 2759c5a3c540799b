"""
Rating Service - site feedback ratings (1-5 with a text label).

Ratings are write-once: submitted from the rating popup, never edited.
"""

import logging
from datetime import datetime
from typing import List, Optional

from pymongo import DESCENDING
from pymongo.collection import Collection

from app.core.exceptions import ValidationException
from app.db.mongodb import get_collection, COLLECTIONS
from app.services.mongo_service import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class RatingService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["ratings"])

    def submit(self, rating: int, label: str, request_meta: Optional[dict] = None) -> dict:
        """
        Store a rating.

        Raises:
            ValidationException: rating is not an integer in [1, 5] or label is empty.
                Nothing is written in that case.
        """
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise ValidationException("Rating must be an integer")
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationException(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        if not label or not label.strip():
            raise ValidationException("Label is required")

        meta = request_meta or {}
        doc = {
            "rating": rating,
            "label": label.strip(),
            "user_agent": meta.get("user_agent"),
            "ip_address": meta.get("ip_address"),
            "timestamp": datetime.utcnow(),
        }
        self.collection.insert_one(doc)
        return serialize_doc(doc)

    def list_all(self) -> List[dict]:
        """All ratings, newest first."""
        return serialize_docs(self.collection.find().sort("timestamp", DESCENDING))

    def stats(self) -> dict:
        """
        Histogram by score plus overall count and average.

        Returns:
            {
                "stats": [{"rating": 3, "count": 1, "label": "Ok"}, ...],  # ascending by score
                "total_ratings": 3,
                "average_rating": 4.33...  # 0 when there are no ratings
            }
        """
        histogram = self.collection.aggregate([
            {
                "$group": {
                    "_id": "$rating",
                    "count": {"$sum": 1},
                    "label": {"$first": "$label"}
                }
            },
            {"$sort": {"_id": 1}}
        ])
        stats = [
            {"rating": row["_id"], "count": row["count"], "label": row["label"]}
            for row in histogram
        ]

        average = list(self.collection.aggregate([
            {"$group": {"_id": None, "avg_rating": {"$avg": "$rating"}}}
        ]))

        return {
            "stats": stats,
            "total_ratings": self.collection.count_documents({}),
            "average_rating": (average[0]["avg_rating"] or 0) if average else 0,
        }
