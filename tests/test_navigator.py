import threading
import unittest
from datetime import date, timedelta

from config import RECORD_SLOT, START_DATE_SLOT
from db import MemoryStorage
from errors import NotInitialized
from schedule import FML, PAIN, TEARS, VIGAMOX, resolve_medications
from session import Tracker, TreatmentSession

START = date(2024, 1, 1)


def _day(n):
    return START + timedelta(days=n - 1)


class DayNavigatorTests(unittest.TestCase):
    def setUp(self):
        self.storage = MemoryStorage()
        self.tracker = Tracker(TreatmentSession(start_date=START), self.storage)
        self.nav = self.tracker.navigator
        self.session = self.tracker.session

    def test_day_number_of(self):
        self.assertEqual(self.nav.day_number_of(START), 1)
        self.assertEqual(self.nav.day_number_of(_day(90)), 90)
        self.assertEqual(self.nav.day_number_of(START - timedelta(days=1)), 0)
        self.assertEqual(self.nav.day_number_of(date(2024, 3, 31)), 91)

    def test_day_number_across_leap_day(self):
        self.assertEqual(self.nav.day_number_of(date(2024, 3, 1)), 61)

    def test_step_backward_refuses_before_start(self):
        self.assertFalse(self.nav.step_backward())
        self.assertEqual(self.session.view_date, START)

    def test_step_forward_refuses_past_last_day(self):
        self.nav.jump_to_day(90)
        self.assertFalse(self.nav.step_forward())
        self.assertEqual(self.session.view_date, _day(90))

    def test_steps_move_one_day(self):
        self.assertTrue(self.nav.step_forward())
        self.assertEqual(self.nav.current_day_number(), 2)
        self.assertTrue(self.nav.step_backward())
        self.assertEqual(self.nav.current_day_number(), 1)

    def test_can_step_flags(self):
        self.assertFalse(self.nav.can_step_backward())
        self.assertTrue(self.nav.can_step_forward())
        self.nav.jump_to_day(90)
        self.assertTrue(self.nav.can_step_backward())
        self.assertFalse(self.nav.can_step_forward())

    def test_navigation_notifies_observers(self):
        seen = []
        self.nav.subscribe(seen.append)
        self.nav.step_forward()
        self.nav.step_backward()
        self.nav.step_backward()
        self.nav.jump_to_day(10)
        self.assertEqual(seen, [_day(2), _day(1), _day(10)])

    def test_jump_to_day_does_not_check_range(self):
        self.nav.jump_to_day(120)
        self.assertEqual(self.session.view_date, _day(120))
        self.nav.jump_to_day(0)
        self.assertEqual(self.session.view_date, START - timedelta(days=1))

    def test_operations_need_start_date(self):
        tracker = Tracker(TreatmentSession(), MemoryStorage())
        with self.assertRaises(NotInitialized):
            tracker.navigator.day_number_of(START)
        with self.assertRaises(NotInitialized):
            tracker.navigator.step_backward()
        with self.assertRaises(NotInitialized):
            tracker.navigator.step_forward()
        with self.assertRaises(NotInitialized):
            tracker.navigator.jump_to_day(1)
        with self.assertRaises(NotInitialized):
            tracker.navigator.progress_grid(START)

    def test_set_start_date_persists_and_resets_cursor(self):
        self.nav.jump_to_day(12)
        self.nav.set_start_date(date(2024, 2, 1))
        self.assertEqual(self.storage.slots[START_DATE_SLOT], "2024-02-01T00:00:00")
        self.assertEqual(self.storage.slots[RECORD_SLOT], "{}")
        self.assertEqual(self.session.view_date, date(2024, 2, 1))
        self.assertEqual(self.nav.current_day_number(), 1)

    def test_changing_start_date_discards_recorded_doses(self):
        self.tracker.store.toggle_dose(_day(1), FML, 0)
        self.tracker.store.toggle_dose(_day(2), TEARS, 4)
        self.nav.set_start_date(date(2023, 12, 31))
        # Entries are not shifted to the new window; they are dropped
        self.assertEqual(self.session.record, {})
        self.assertEqual(self.tracker.store.get_doses(_day(1), FML), [False] * 4)

    def test_progress_grid_marks_future_and_current(self):
        self.tracker.store.toggle_dose(_day(1), FML, 0)
        for med in resolve_medications(2):
            for i in range(med.dose_count):
                self.tracker.store.toggle_dose(_day(2), med.id, i)
        self.nav.jump_to_day(2)
        cells = self.nav.progress_grid(today=_day(3))
        self.assertEqual(len(cells), 90)
        self.assertEqual([c["day"] for c in cells], list(range(1, 91)))
        self.assertEqual(cells[0]["status"], "partial")
        self.assertEqual(cells[1]["status"], "complete")
        self.assertEqual(cells[2]["status"], "empty")
        self.assertTrue(all(c["status"] == "future" for c in cells[3:]))
        self.assertEqual([c["day"] for c in cells if c["current"]], [2])
        self.assertEqual(cells[89]["date"], "2024-03-30")

    def test_start_date_near_calendar_edges_is_rejected(self):
        for start in (date.min, date.max - timedelta(days=89)):
            with self.assertRaises(ValueError):
                self.nav.set_start_date(start)
        self.assertEqual(self.session.start_date, START)
        self.assertNotIn(START_DATE_SLOT, self.storage.slots)

    def test_steps_at_earliest_usable_start(self):
        self.nav.set_start_date(date.min + timedelta(days=1))
        self.assertFalse(self.nav.step_backward())
        self.nav.jump_to_day(90)
        self.assertFalse(self.nav.step_forward())

    def test_steps_at_latest_usable_start(self):
        start = date.max - timedelta(days=90)
        self.nav.set_start_date(start)
        self.assertFalse(self.nav.step_backward())
        self.nav.jump_to_day(90)
        self.assertFalse(self.nav.step_forward())
        self.assertEqual(len(self.nav.progress_grid(today=date.max)), 90)

    def test_concurrent_saves_and_grid_reads(self):
        errors = []
        done = threading.Event()

        def keep_saving():
            try:
                while not done.is_set():
                    self.tracker.store.save()
            except Exception as exc:
                errors.append(exc)

        worker = threading.Thread(target=keep_saving)
        worker.start()
        try:
            for _ in range(50):
                self.tracker.store.reset()
                self.nav.progress_grid(today=_day(90))
        finally:
            done.set()
            worker.join()
        self.assertEqual(errors, [])
        self.assertEqual(len(self.session.record), 90)

    def test_future_days_are_not_materialized(self):
        self.nav.progress_grid(today=START)
        self.assertEqual(set(self.session.record), {START})


class EndToEndTests(unittest.TestCase):
    def test_treatment_walkthrough(self):
        storage = MemoryStorage()
        tracker = Tracker(TreatmentSession(), storage)
        tracker.navigator.set_start_date(date(2024, 1, 1))

        view = tracker.session.view_date
        day = tracker.navigator.current_day_number()
        self.assertEqual(day, 1)
        self.assertEqual(
            [(m.id, m.dose_count) for m in resolve_medications(day)],
            [(FML, 4), (VIGAMOX, 4), (TEARS, 5), (PAIN, 6)],
        )

        tracker.store.toggle_dose(view, FML, 0)
        self.assertEqual(tracker.store.day_counts(view, 1), (1, 19))
        self.assertEqual(tracker.store.day_status(view, 1).value, "partial")

        tracker.navigator.jump_to_day(31)
        day = tracker.navigator.current_day_number()
        self.assertEqual(tracker.session.view_date, date(2024, 1, 31))
        self.assertEqual([(m.id, m.dose_count) for m in resolve_medications(day)], [(FML, 2), (TEARS, 5)])
        self.assertEqual(tracker.store.get_doses(tracker.session.view_date, VIGAMOX), [])


if __name__ == "__main__":
    unittest.main()
