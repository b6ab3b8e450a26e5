"""DateKey canonicalization and date arithmetic for the treatment window.

Every conversion between calendar dates and their persisted string form goes
through ``date_key`` / ``parse_date_key`` so keys always round-trip.
"""
from datetime import date, datetime, time, timedelta

from config import TOTAL_TREATMENT_DAYS
from errors import MalformedPersistedData

HEBREW_DAYS = ["ראשון", "שני", "שלישי", "רביעי", "חמישי", "שישי", "שבת"]


def date_key(d: date) -> str:
    return d.isoformat()


def parse_date_key(key: str) -> date:
    try:
        return date.fromisoformat(key)
    except (TypeError, ValueError):
        raise MalformedPersistedData(f"invalid date key: {key!r}") from None


def day_number_of(start: date, d: date) -> int:
    return (d - start).days + 1


def date_of_day(start: date, day_number: int) -> date:
    return start + timedelta(days=day_number - 1)


def window_fits(start: date) -> bool:
    """True when one day on either side of the treatment window is still a
    representable date, so stepping off either edge cannot overflow."""
    try:
        start - timedelta(days=1)
        date_of_day(start, TOTAL_TREATMENT_DAYS + 1)
    except OverflowError:
        return False
    return True


def start_date_to_storage(start: date) -> str:
    return datetime.combine(start, time()).isoformat()


def start_date_from_storage(value: str) -> date:
    """Parse the persisted start date slot.

    Accepts a plain date, a naive date-time, or a UTC date-time with a
    trailing ``Z`` as written by ``Date.toISOString()``.
    """
    text = (value or "").strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        start = datetime.fromisoformat(text).date()
    except ValueError:
        try:
            start = date.fromisoformat(text)
        except ValueError:
            raise MalformedPersistedData(f"invalid start date: {value!r}") from None
    if not window_fits(start):
        raise MalformedPersistedData(f"start date out of range: {value!r}")
    return start


def format_date_for_display(d: date) -> str:
    # weekday() counts from Monday; the Hebrew week starts on Sunday
    day_of_week = HEBREW_DAYS[(d.weekday() + 1) % 7]
    return f"יום {day_of_week}, {d.day}.{d.month:02d}.{d.year}"
