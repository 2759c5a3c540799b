"""
Admin Activity Service - append-only audit trail of admin actions.

One document per action. Nothing here updates or deletes an entry;
a correction is recorded as a new entry.
"""

import logging
from datetime import datetime
from typing import List, Optional, Union

from pydantic import ValidationError
from pymongo import DESCENDING
from pymongo.collection import Collection

from app.core.exceptions import ValidationException
from app.db.mongodb import get_collection, COLLECTIONS
from app.schemas.schemas import AdminAction, AdminActivityDetails, TargetType
from app.services.mongo_service import clamp_limit, serialize_doc, serialize_docs

logger = logging.getLogger(__name__)


def parse_action(action: Union[AdminAction, str]) -> AdminAction:
    try:
        return AdminAction(action)
    except ValueError:
        raise ValidationException(
            f"Invalid admin action: {action!r}",
            details={"allowed": [a.value for a in AdminAction]}
        )


def parse_target_type(target_type: Union[TargetType, str]) -> TargetType:
    try:
        return TargetType(target_type)
    except ValueError:
        raise ValidationException(
            f"Invalid target type: {target_type!r}",
            details={"allowed": [t.value for t in TargetType]}
        )


class AdminActivityService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["admin_activities"])

    def record(
        self,
        admin_id: str,
        action: Union[AdminAction, str],
        target_type: Union[TargetType, str],
        target_id: str,
        details: Union[AdminActivityDetails, dict, None] = None,
        request_meta: Optional[dict] = None,
    ) -> dict:
        """
        Append an audit entry.

        Everything is validated before the single insert_one, so an
        invalid call leaves no row behind.

        Args:
            admin_id: Acting admin's user id
            action: One of AdminAction
            target_type: experience, user or system
            target_id: Id of the affected entity (required even for system)
            details: Free-form detail bag (known keys are type-checked)
            request_meta: {"ip_address", "user_agent"}
        """
        action = parse_action(action)
        target_type = parse_target_type(target_type)
        if not admin_id:
            raise ValidationException("admin_id is required")
        if not target_id:
            raise ValidationException("target_id is required")

        if details is None:
            details = {}
        elif isinstance(details, AdminActivityDetails):
            details = details.model_dump(exclude_none=True)
        else:
            try:
                details = AdminActivityDetails.model_validate(details).model_dump(exclude_none=True)
            except ValidationError as e:
                raise ValidationException("Invalid activity details", details={"errors": [err["msg"] for err in e.errors()]})

        meta = request_meta or {}
        doc = {
            "admin_id": str(admin_id),
            "action": action.value,
            "target_type": target_type.value,
            "target_id": str(target_id),
            "details": details,
            "ip_address": meta.get("ip_address"),
            "user_agent": meta.get("user_agent"),
            "created_at": datetime.utcnow(),
        }
        self.collection.insert_one(doc)
        logger.info(
            "Admin %s: %s on %s %s", doc["admin_id"], doc["action"], doc["target_type"], doc["target_id"]
        )
        return serialize_doc(doc)

    # ============================================================
    # QUERIES (all newest first)
    # ============================================================

    def _find(self, query: dict, limit: int) -> List[dict]:
        cursor = self.collection.find(query).sort("created_at", DESCENDING).limit(clamp_limit(limit))
        return serialize_docs(cursor)

    def by_admin(self, admin_id: str, limit: int = 50) -> List[dict]:
        return self._find({"admin_id": admin_id}, limit)

    def by_action(self, action: Union[AdminAction, str], limit: int = 50) -> List[dict]:
        return self._find({"action": parse_action(action).value}, limit)

    def by_target(self, target_type: Union[TargetType, str], target_id: str, limit: int = 50) -> List[dict]:
        return self._find(
            {"target_type": parse_target_type(target_type).value, "target_id": target_id},
            limit
        )

    def recent(self, limit: int = 50) -> List[dict]:
        """Unfiltered activity feed for the admin dashboard."""
        return self._find({}, limit)
