"""
Analytics Service - daily metric rollups.

One document per calendar day (UTC midnight, unique index on date).
Counters only ever grow: every update is a single upsert with $inc, so
concurrent requests for the same day never lose an increment.

Top-N lists and performance stats are snapshots supplied by the caller;
nothing here re-ranks them.
"""

import logging
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Union

from pymongo import ASCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ValidationException
from app.db.mongodb import get_collection, COLLECTIONS
from app.services.mongo_service import serialize_doc, serialize_docs

logger = logging.getLogger(__name__)

COUNTER_FIELDS = (
    "daily_active_users",
    "new_registrations",
    "experiences_submitted",
    "experiences_approved",
    "experiences_rejected",
    "page_views",
    "search_queries",
)

# Dotted path -> value written when a day's document is first created
DOCUMENT_DEFAULTS = {
    **{f"metrics.{name}": 0 for name in COUNTER_FIELDS},
    "metrics.top_companies": [],
    "metrics.top_graduation_years": [],
    "performance.avg_response_time": 0,
    "performance.error_rate": 0,
    "performance.uptime": 100,
}

# Tracked page path -> key under the day document's "pages" counters.
# Other paths still count towards metrics.page_views.
TRACKED_PAGES = {
    "/": "home",
    "/experiences": "experiences",
    "/post": "post",
    "/admin": "admin",
}

# Two writers racing to create the same day: the loser gets a
# DuplicateKeyError and its retry lands on the now-existing document.
MAX_UPSERT_ATTEMPTS = 3


def truncate_to_day(value: Union[date, datetime]) -> datetime:
    """Midnight (naive UTC) of the given day."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return datetime(value.year, value.month, value.day)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise ValidationException(f"Expected a date, got {type(value).__name__}")


def validate_counter_delta(delta: Dict[str, int]) -> Dict[str, int]:
    """Known counter names with non-negative integer increments."""
    if not delta:
        raise ValidationException("No metrics to update")
    unknown = sorted(set(delta) - set(COUNTER_FIELDS))
    if unknown:
        raise ValidationException(
            f"Unknown metrics: {', '.join(unknown)}",
            details={"allowed": list(COUNTER_FIELDS)}
        )
    for name, amount in delta.items():
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValidationException(f"Metric {name} must be an integer")
        if amount < 0:
            raise ValidationException(f"Metric {name} cannot be decremented")
    return delta


class AnalyticsService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["analytics"])

    def _upsert_day(self, day: datetime, update: dict, written_paths) -> dict:
        """
        Apply update to the day's document, creating it if absent.

        Fields not written by the update get their defaults on insert;
        $setOnInsert may not touch a path the update already writes.
        """
        now = datetime.utcnow()
        on_insert = {
            path: value for path, value in DOCUMENT_DEFAULTS.items()
            if path not in written_paths
        }
        on_insert["created_at"] = now
        update = {**update, "$setOnInsert": on_insert}
        update.setdefault("$set", {})["updated_at"] = now

        for attempt in range(1, MAX_UPSERT_ATTEMPTS + 1):
            try:
                doc = self.collection.find_one_and_update(
                    {"date": day},
                    update,
                    upsert=True,
                    return_document=ReturnDocument.AFTER
                )
                return serialize_doc(doc)
            except DuplicateKeyError:
                if attempt == MAX_UPSERT_ATTEMPTS:
                    raise
                logger.debug("Concurrent insert for %s, retrying (attempt %d)", day.date(), attempt)

    def update_daily_metrics(self, day: Union[date, datetime], delta: Dict[str, int]) -> dict:
        """
        Increment counters for a day.

        Args:
            day: Any moment of the day (truncated to midnight)
            delta: Counter name -> amount, e.g. {"page_views": 1}

        Returns:
            The day's document after the increment
        """
        delta = validate_counter_delta(delta)
        inc = {f"metrics.{name}": amount for name, amount in delta.items()}
        return self._upsert_day(truncate_to_day(day), {"$inc": inc}, inc.keys())

    def track_page_view(self, page: Optional[str] = None) -> dict:
        """Count one page view for today, and for the page if it is tracked."""
        inc = {"metrics.page_views": 1}
        slug = TRACKED_PAGES.get(page)
        if slug:
            inc[f"pages.{slug}"] = 1
        return self._upsert_day(truncate_to_day(datetime.utcnow()), {"$inc": inc}, inc.keys())

    def view_summary(self) -> dict:
        """
        Page view totals across all days.

        Returns:
            {"total_views", "today_views", "page_views": {path: count}}
        """
        today = truncate_to_day(datetime.utcnow())
        summary = {
            "total_views": 0,
            "today_views": 0,
            "page_views": {path: 0 for path in TRACKED_PAGES},
        }
        cursor = self.collection.find({}, {"date": 1, "metrics.page_views": 1, "pages": 1})
        for doc in cursor:
            views = doc.get("metrics", {}).get("page_views", 0)
            summary["total_views"] += views
            if doc["date"] == today:
                summary["today_views"] = views
            pages = doc.get("pages", {})
            for path, slug in TRACKED_PAGES.items():
                summary["page_views"][path] += pages.get(slug, 0)
        return summary

    def set_top_lists(
        self,
        day: Union[date, datetime],
        top_companies: Optional[List[dict]] = None,
        top_graduation_years: Optional[List[dict]] = None,
    ) -> dict:
        """Replace the day's top-N snapshots with pre-aggregated lists."""
        fields = {}
        if top_companies is not None:
            fields["metrics.top_companies"] = [
                {"name": c["name"], "count": c["count"]} for c in top_companies
            ]
        if top_graduation_years is not None:
            fields["metrics.top_graduation_years"] = [
                {"year": y["year"], "count": y["count"]} for y in top_graduation_years
            ]
        if not fields:
            raise ValidationException("No top lists to update")
        return self._upsert_day(truncate_to_day(day), {"$set": fields}, fields.keys())

    def record_performance(
        self,
        day: Union[date, datetime],
        avg_response_time: Optional[float] = None,
        error_rate: Optional[float] = None,
        uptime: Optional[float] = None,
    ) -> dict:
        """Overwrite the day's performance stats (only the ones provided)."""
        provided = {
            "avg_response_time": avg_response_time,
            "error_rate": error_rate,
            "uptime": uptime,
        }
        fields = {f"performance.{k}": v for k, v in provided.items() if v is not None}
        if not fields:
            raise ValidationException("No performance stats to update")
        return self._upsert_day(truncate_to_day(day), {"$set": fields}, fields.keys())

    def get_day(self, day: Union[date, datetime]) -> Optional[dict]:
        doc = self.collection.find_one({"date": truncate_to_day(day)})
        return serialize_doc(doc)

    def get_range(self, start: Union[date, datetime], end: Union[date, datetime]) -> List[dict]:
        """Days from start to end inclusive, oldest first. Missing days are absent."""
        start_day, end_day = truncate_to_day(start), truncate_to_day(end)
        if start_day > end_day:
            raise ValidationException("start must not be after end")
        cursor = self.collection.find(
            {"date": {"$gte": start_day, "$lte": end_day}}
        ).sort("date", ASCENDING)
        return serialize_docs(cursor)
