import logging
import threading
from datetime import date
from typing import Optional

from config import RECORD_SLOT, START_DATE_SLOT, TOTAL_TREATMENT_DAYS
from dates import date_of_day, day_number_of, start_date_from_storage
from errors import MalformedPersistedData, NotInitialized
from navigator import DayNavigator
from store import AdherenceStore, deserialize_record

logger = logging.getLogger(__name__)


class TreatmentSession:
    """Process-wide tracker state: start date, view cursor and dose record."""

    def __init__(self, start_date: Optional[date] = None, view_date: Optional[date] = None,
                 record: Optional[dict] = None):
        self.start_date = start_date
        self.view_date = view_date if view_date is not None else start_date
        self.record = record if record is not None else {}
        # Requests run in a threadpool; store and navigator calls hold this
        self.lock = threading.RLock()

    @property
    def initialized(self) -> bool:
        return self.start_date is not None

    def require_start_date(self) -> date:
        if self.start_date is None:
            raise NotInitialized("treatment start date has not been set")
        return self.start_date

    def day_number_of(self, d: date) -> int:
        return day_number_of(self.require_start_date(), d)


def _clamp_to_window(start: date, today: date) -> date:
    last = date_of_day(start, TOTAL_TREATMENT_DAYS)
    return min(max(today, start), last)


def load_session(storage, today: date) -> TreatmentSession:
    """Build the session from the two persisted slots.

    Unreadable slots are treated as absent: the dose record is working state
    that can be rebuilt, so a corrupt blob never blocks startup.
    """
    start = None
    raw_start = storage.read(START_DATE_SLOT)
    if raw_start:
        try:
            start = start_date_from_storage(raw_start)
        except MalformedPersistedData:
            logger.warning("Ignoring unreadable %s slot: %r", START_DATE_SLOT, raw_start)

    record = {}
    raw_record = storage.read(RECORD_SLOT)
    if start is not None and raw_record:
        try:
            record = deserialize_record(raw_record)
        except MalformedPersistedData as exc:
            logger.warning("Discarding unreadable %s slot: %s", RECORD_SLOT, exc)

    view = _clamp_to_window(start, today) if start is not None else None
    return TreatmentSession(start_date=start, view_date=view, record=record)


class Tracker:
    def __init__(self, session: TreatmentSession, storage):
        self.session = session
        self.storage = storage
        self.store = AdherenceStore(session, storage)
        self.navigator = DayNavigator(session, self.store, storage)

    @property
    def lock(self):
        return self.session.lock


def open_tracker(storage, today: date) -> Tracker:
    return Tracker(load_session(storage, today), storage)
