"""
MongoDB Service - shared helpers for the collection services.

Collections in this database (one service class each):
1. sessions          - Login sessions (SessionService)
2. admin_activities  - Append-only admin audit trail (AdminActivityService)
3. analytics         - Daily metric rollups (AnalyticsService)
4. ratings           - Site feedback ratings (RatingService)
"""

from typing import Optional


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


def serialize_docs(docs) -> list:
    """Convert a cursor or list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


def clamp_limit(limit: int, default: int = 50, maximum: int = 200) -> int:
    """Keep list queries bounded."""
    if limit is None or limit <= 0:
        return default
    return min(limit, maximum)
