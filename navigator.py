import logging
from datetime import date, timedelta

from config import START_DATE_SLOT, TOTAL_TREATMENT_DAYS
from dates import date_key, date_of_day, start_date_to_storage, window_fits
from store import DayStatus

logger = logging.getLogger(__name__)


class DayNavigator:
    """Moves the view cursor across the treatment window.

    Backward/forward steps refuse to leave the window; ``jump_to_day`` does
    not check, its callers only pass grid day numbers.
    """

    def __init__(self, session, store, storage):
        self.session = session
        self.store = store
        self.storage = storage
        self._observers = []

    def subscribe(self, callback):
        self._observers.append(callback)

    def _show(self, d: date):
        self.session.view_date = d
        for callback in self._observers:
            callback(d)

    def day_number_of(self, d: date) -> int:
        return self.session.day_number_of(d)

    def current_day_number(self) -> int:
        self.session.require_start_date()
        return self.day_number_of(self.session.view_date)

    def step_backward(self) -> bool:
        with self.session.lock:
            start = self.session.require_start_date()
            if self.session.view_date <= start:
                return False
            self._show(self.session.view_date - timedelta(days=1))
            return True

    def step_forward(self) -> bool:
        with self.session.lock:
            self.session.require_start_date()
            if self.current_day_number() >= TOTAL_TREATMENT_DAYS:
                return False
            self._show(self.session.view_date + timedelta(days=1))
            return True

    def jump_to_day(self, day_number: int):
        with self.session.lock:
            self._show(date_of_day(self.session.require_start_date(), day_number))

    def can_step_backward(self) -> bool:
        return self.session.view_date > self.session.require_start_date()

    def can_step_forward(self) -> bool:
        return self.current_day_number() < TOTAL_TREATMENT_DAYS

    def set_start_date(self, start: date):
        """Save a new treatment start.

        Records are keyed by calendar date, so anything recorded under the
        previous start is dropped rather than re-aligned.
        """
        if not window_fits(start):
            raise ValueError(f"start date out of range: {start}")
        with self.session.lock:
            had_records = bool(self.session.record)
            self.storage.write(START_DATE_SLOT, start_date_to_storage(start))
            self.session.start_date = start
            self.store.reset()
            logger.info(
                "Treatment start date set to %s%s",
                date_key(start),
                " (previous dose record discarded)" if had_records else "",
            )
            self._show(start)

    def progress_grid(self, today: date) -> list:
        with self.session.lock:
            start = self.session.require_start_date()
            cells = []
            for day in range(1, TOTAL_TREATMENT_DAYS + 1):
                d = date_of_day(start, day)
                if d > today:
                    status = DayStatus.FUTURE
                else:
                    status = self.store.day_status(d, day)
                cells.append({
                    "day": day,
                    "date": date_key(d),
                    "status": status.value,
                    "current": d == self.session.view_date,
                })
            return cells
