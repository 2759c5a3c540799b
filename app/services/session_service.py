"""
Session Service - login session lifecycle.

A session is created when the auth gateway hands us a verified Google
identity, refreshed (touched) on every authenticated request, and ends
in one of three ways:
- expires_at passes: the TTL index deletes it, and reads ignore it before then
- logout / revocation: is_active flips to False
- cleanup_expired(): deletes expired and inactive rows in one sweep

Every write here is a single-document or single update_many operation,
so MongoDB's per-document atomicity is the only concurrency control.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import List, Optional, Union

from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection

from app.core.exceptions import ValidationException
from app.db.mongodb import get_collection, COLLECTIONS
from app.services.mongo_service import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

DEVICE_FIELDS = ("browser", "os", "device")


def new_session_id() -> str:
    """Opaque, unguessable session token (256 bits)."""
    return secrets.token_urlsafe(32)


def normalize_device_info(device_info: Optional[dict]) -> Optional[dict]:
    """Fixed key order so stored device_info compares equal in queries."""
    if not device_info:
        return None
    normalized = {field: device_info.get(field) for field in DEVICE_FIELDS}
    if all(value is None for value in normalized.values()):
        return None
    return normalized


class SessionService:
    """
    Handles session storage.

    Sessions are soft references to users: user_id is whatever id the
    user store issued, external_id is the Google account id.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["sessions"])

    def create(
        self,
        user_id: str,
        external_id: str,
        ttl: Union[timedelta, int, float],
        device_info: Optional[dict] = None,
        request_meta: Optional[dict] = None,
        role: str = "student",
    ) -> dict:
        """
        Issue a new active session.

        Args:
            user_id: Owning user id
            external_id: Google identity id
            ttl: Lifetime as timedelta or seconds, must be positive
            device_info: {"browser", "os", "device"} reported by the client
            request_meta: {"ip_address", "user_agent"} of the login request
            role: Role granted for the lifetime of the session

        Returns:
            The stored session document

        An older active session of the same user on an identical device
        is deactivated first, so each device holds at most one live session.
        """
        if not isinstance(ttl, timedelta):
            ttl = timedelta(seconds=ttl)
        if ttl <= timedelta(0):
            raise ValidationException("Session TTL must be positive")

        now = datetime.utcnow()
        device_info = normalize_device_info(device_info)
        meta = request_meta or {}

        if device_info is not None:
            replaced = self.collection.update_many(
                {"user_id": user_id, "is_active": True, "device_info": device_info},
                {"$set": {"is_active": False, "last_accessed_at": now, "updated_at": now}}
            )
            if replaced.modified_count:
                logger.info(
                    "Replaced %d session(s) for user %s on the same device",
                    replaced.modified_count, user_id
                )

        doc = {
            "session_id": new_session_id(),
            "user_id": user_id,
            "external_id": external_id,
            "role": role,
            "user_agent": meta.get("user_agent"),
            "ip_address": meta.get("ip_address"),
            "is_active": True,
            "expires_at": now + ttl,
            "last_accessed_at": now,
            "device_info": device_info,
            "created_at": now,
            "updated_at": now,
        }
        self.collection.insert_one(doc)
        logger.info("Created session for user %s (expires %s)", user_id, doc["expires_at"].isoformat())
        return serialize_doc(doc)

    def get(self, session_id: str) -> Optional[dict]:
        """Fetch a session without refreshing it."""
        doc = self.collection.find_one({"session_id": session_id})
        return serialize_doc(doc)

    def touch(self, session_id: str) -> Optional[dict]:
        """
        Refresh last_accessed_at for a live session.

        Returns None when the session is unknown, inactive or past
        expires_at; callers treat that as "not authenticated".
        """
        now = datetime.utcnow()
        doc = self.collection.find_one_and_update(
            {"session_id": session_id, "is_active": True, "expires_at": {"$gt": now}},
            {"$set": {"last_accessed_at": now, "updated_at": now}},
            return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)

    def list_active(self, user_id: str) -> List[dict]:
        """Live sessions of a user, most recently used first."""
        cursor = self.collection.find(
            {"user_id": user_id, "is_active": True, "expires_at": {"$gt": datetime.utcnow()}}
        ).sort("last_accessed_at", DESCENDING)
        return serialize_docs(cursor)

    def revoke(self, session_id: str) -> bool:
        """Deactivate a single session (logout)."""
        now = datetime.utcnow()
        result = self.collection.update_one(
            {"session_id": session_id, "is_active": True},
            {"$set": {"is_active": False, "last_accessed_at": now, "updated_at": now}}
        )
        return result.modified_count > 0

    def revoke_all(self, user_id: str) -> int:
        """
        Deactivate every active session of a user.
        Used on password change and account suspension.

        Returns:
            Number of sessions deactivated
        """
        now = datetime.utcnow()
        result = self.collection.update_many(
            {"user_id": user_id, "is_active": True},
            {"$set": {"is_active": False, "last_accessed_at": now, "updated_at": now}}
        )
        logger.info("Revoked %d session(s) for user %s", result.modified_count, user_id)
        return result.modified_count

    def cleanup_expired(self) -> int:
        """
        Delete expired and inactive sessions.

        Safe to run alongside live traffic and idempotent: a second run
        with no new sessions deletes nothing.

        Returns:
            Number of sessions deleted
        """
        result = self.collection.delete_many({
            "$or": [
                {"expires_at": {"$lt": datetime.utcnow()}},
                {"is_active": False}
            ]
        })
        return result.deleted_count
