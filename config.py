import os
from contextvars import ContextVar
from datetime import date, datetime, timedelta, timezone
from typing import Optional

DB_PATH = os.environ.get("TRACKER_DB_PATH", "tracker.db")
LOG_LEVEL = os.environ.get("TRACKER_LOG_LEVEL", "INFO").upper()

TOTAL_TREATMENT_DAYS = 90

# Persistence slot names, shared with the browser build's localStorage keys.
START_DATE_SLOT = "medicationStartDate"
RECORD_SLOT = "medicationData"

CSRF_COOKIE_NAME = "csrf_token"
TZ_OFFSET_COOKIE_NAME = "tz_offset"

_client_now: ContextVar[Optional[datetime]] = ContextVar("_client_now", default=None)

PUBLIC_PATHS = {"/setup", "/api/start-date"}


def _set_client_clock(tz_offset_cookie: str):
    """Set per-request client-local clock derived from JS timezone offset cookie."""
    offset = None
    try:
        offset = int((tz_offset_cookie or "").strip())
    except ValueError:
        offset = None
    if offset is not None and -840 <= offset <= 840:
        _client_now.set(datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=offset))
        return
    _client_now.set(datetime.now())


def _now_local() -> datetime:
    return _client_now.get() or datetime.now()


def _today_local() -> date:
    return _now_local().date()
