#!/usr/bin/env python3
"""
Session Cleanup Script

Deletes expired and revoked sessions once. Use from cron when the
in-process sweeper is disabled (SESSION_CLEANUP_INTERVAL_SECONDS=0).
Usage: python scripts/cleanup_sessions.py
"""
import sys
sys.path.insert(0, '.')

from app.core.config import get_settings
from app.core.logger import configure_logging
from app.services.session_service import SessionService


def main():
    configure_logging(get_settings().log_level)
    deleted = SessionService().cleanup_expired()
    print(f"Removed {deleted} expired/inactive session(s)")


if __name__ == "__main__":
    main()
