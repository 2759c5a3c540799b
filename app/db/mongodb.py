"""
MongoDB Connection Utility

MongoDB stores every PlacedIn entity, one collection each:
- sessions: login sessions (TTL-indexed on expires_at)
- admin_activities: append-only admin audit trail
- analytics: one rollup document per calendar day
- ratings: site feedback ratings

Relationships between them are plain ids, never embedded documents.
"""
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(
            settings.mongodb_uri,
            maxPoolSize=20,
            minPoolSize=5,
            maxIdleTimeMS=30000,
            serverSelectionTimeoutMS=5000,
            socketTimeoutMS=45000,
        )
    return _client


def get_mongo_db() -> Database:
    """Get the PlacedIn database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def set_mongo_db(db: Database) -> None:
    """Replace the active database (tests inject an in-memory one)."""
    global _db
    _db = db


def get_collection(name: str) -> Collection:
    """Get a specific collection by name (see COLLECTIONS)."""
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        # ping command checks connection
        get_mongo_db().command('ping')
        return True
    except PyMongoError as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "sessions": "sessions",
    "admin_activities": "admin_activities",
    "analytics": "analytics",
    "ratings": "ratings",
}


def init_mongo_indexes():
    """
    Create indexes for every collection.
    Call this once during app startup; create_index is idempotent.
    """
    db = get_mongo_db()

    # Sessions: lookups by token, by owner and by external identity
    sessions = db[COLLECTIONS["sessions"]]
    sessions.create_index("session_id", unique=True)
    sessions.create_index("user_id")
    sessions.create_index("external_id")
    # TTL: MongoDB deletes the document once expires_at has passed
    sessions.create_index("expires_at", expireAfterSeconds=0)
    sessions.create_index([("session_id", ASCENDING), ("is_active", ASCENDING)])
    sessions.create_index([
        ("user_id", ASCENDING),
        ("is_active", ASCENDING),
        ("last_accessed_at", DESCENDING)
    ])
    sessions.create_index([("external_id", ASCENDING), ("is_active", ASCENDING)])

    # Admin activities: per-admin, per-action, per-target and global feeds
    activities = db[COLLECTIONS["admin_activities"]]
    activities.create_index("admin_id")
    activities.create_index("target_id")
    activities.create_index([("admin_id", ASCENDING), ("created_at", DESCENDING)])
    activities.create_index([("action", ASCENDING), ("created_at", DESCENDING)])
    activities.create_index([
        ("target_type", ASCENDING),
        ("target_id", ASCENDING),
        ("created_at", DESCENDING)
    ])
    activities.create_index([("created_at", DESCENDING)])

    # Analytics: exactly one document per day
    db[COLLECTIONS["analytics"]].create_index("date", unique=True)

    # Ratings: newest-first listing and grouping by score
    ratings = db[COLLECTIONS["ratings"]]
    ratings.create_index([("timestamp", DESCENDING)])
    ratings.create_index("rating")

    logger.info("MongoDB indexes created successfully")
