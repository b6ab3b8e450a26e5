import json
import logging
from datetime import date
from enum import Enum

from config import RECORD_SLOT
from dates import date_key, parse_date_key
from errors import InvalidIndex, MalformedPersistedData
from schedule import find_medication, resolve_medications

logger = logging.getLogger(__name__)


class DayStatus(str, Enum):
    FUTURE = "future"
    EMPTY = "empty"
    PARTIAL = "partial"
    COMPLETE = "complete"


def serialize_record(record: dict) -> str:
    return json.dumps(
        {date_key(d): {med_id: list(doses) for med_id, doses in meds.items()}
         for d, meds in record.items()},
        ensure_ascii=False,
    )


def deserialize_record(text: str) -> dict:
    try:
        raw = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise MalformedPersistedData(f"record is not valid JSON: {exc}") from None
    if not isinstance(raw, dict):
        raise MalformedPersistedData("record must be a JSON object")
    record = {}
    for key, meds in raw.items():
        if not isinstance(meds, dict):
            raise MalformedPersistedData(f"entry for {key!r} must be an object")
        day = {}
        for med_id, doses in meds.items():
            if not isinstance(doses, list) or not all(isinstance(x, bool) for x in doses):
                raise MalformedPersistedData(f"doses for {key!r}/{med_id!r} must be a list of booleans")
            day[med_id] = doses
        record[parse_date_key(key)] = day
    return record


class AdherenceStore:
    """Sole owner and writer of the session's dose record.

    Entries are created lazily: the first ``ensure_materialized`` (or
    ``get_doses``) for a date and medication stores an all-False list sized
    from the schedule for that day. Only ``toggle_dose`` flips values and
    only ``toggle_dose`` and ``reset`` write the record back to storage.
    """

    def __init__(self, session, storage):
        self.session = session
        self.storage = storage
        self._observers = []

    @property
    def record(self) -> dict:
        return self.session.record

    def subscribe(self, callback):
        self._observers.append(callback)

    def ensure_materialized(self, d: date, medication_id: str) -> bool:
        with self.session.lock:
            meds = self.record.get(d)
            if meds is not None and medication_id in meds:
                return False
            med = find_medication(self.session.day_number_of(d), medication_id)
            if med is None:
                return False
            self.record.setdefault(d, {})[medication_id] = [False] * med.dose_count
            return True

    def get_doses(self, d: date, medication_id: str) -> list:
        with self.session.lock:
            self.ensure_materialized(d, medication_id)
            meds = self.record.get(d)
            if meds is None or medication_id not in meds:
                return []
            return meds[medication_id]

    def toggle_dose(self, d: date, medication_id: str, index: int):
        with self.session.lock:
            doses = self.get_doses(d, medication_id)
            if not 0 <= index < len(doses):
                raise InvalidIndex(medication_id, index, len(doses))
            doses[index] = not doses[index]
            self.save()
            logger.debug("Toggled %s dose %d on %s -> %s", medication_id, index, date_key(d), doses[index])
            for callback in self._observers:
                callback(d, medication_id)

    def day_counts(self, d: date, day_number: int) -> tuple:
        total = taken = 0
        with self.session.lock:
            for med in resolve_medications(day_number):
                doses = self.get_doses(d, med.id)
                total += len(doses)
                taken += sum(1 for x in doses if x)
        return taken, total

    def day_status(self, d: date, day_number: int) -> DayStatus:
        taken, total = self.day_counts(d, day_number)
        # No scheduled doses and nothing taken render the same way
        if total == 0 or taken == 0:
            return DayStatus.EMPTY
        if taken < total:
            return DayStatus.PARTIAL
        return DayStatus.COMPLETE

    def reset(self):
        with self.session.lock:
            self.record.clear()
            self.save()

    def save(self):
        with self.session.lock:
            self.storage.write(RECORD_SLOT, serialize_record(self.record))
