import tempfile
import unittest
from datetime import date

from config import RECORD_SLOT, START_DATE_SLOT
from db import MemoryStorage
from schedule import FML, TEARS
from session import load_session, open_tracker

START = date(2024, 1, 1)


class LoadSessionTests(unittest.TestCase):
    def test_first_run_has_no_start_date(self):
        session = load_session(MemoryStorage(), date(2024, 5, 1))
        self.assertFalse(session.initialized)
        self.assertIsNone(session.view_date)
        self.assertEqual(session.record, {})

    def test_reads_both_slots(self):
        storage = MemoryStorage({
            START_DATE_SLOT: "2024-01-01T00:00:00",
            RECORD_SLOT: '{"2024-01-02": {"fml": [true, false, false, false]}}',
        })
        session = load_session(storage, date(2024, 1, 5))
        self.assertEqual(session.start_date, START)
        self.assertEqual(session.record, {date(2024, 1, 2): {FML: [True, False, False, False]}})

    def test_browser_iso_timestamp_is_accepted(self):
        storage = MemoryStorage({START_DATE_SLOT: "2024-01-01T00:00:00.000Z"})
        self.assertEqual(load_session(storage, START).start_date, START)

    def test_plain_date_is_accepted(self):
        storage = MemoryStorage({START_DATE_SLOT: "2024-01-01"})
        self.assertEqual(load_session(storage, START).start_date, START)

    def test_malformed_record_is_treated_as_absent(self):
        storage = MemoryStorage({
            START_DATE_SLOT: "2024-01-01T00:00:00",
            RECORD_SLOT: "{not json",
        })
        with self.assertLogs("session", level="WARNING"):
            session = load_session(storage, START)
        self.assertTrue(session.initialized)
        self.assertEqual(session.record, {})

    def test_malformed_start_date_is_treated_as_absent(self):
        storage = MemoryStorage({START_DATE_SLOT: "yesterday"})
        with self.assertLogs("session", level="WARNING"):
            session = load_session(storage, START)
        self.assertFalse(session.initialized)

    def test_start_date_at_calendar_edge_is_treated_as_absent(self):
        for value in ("9999-12-01T00:00:00", "0001-01-01T00:00:00"):
            storage = MemoryStorage({
                START_DATE_SLOT: value,
                RECORD_SLOT: "{}",
            })
            with self.assertLogs("session", level="WARNING"):
                session = load_session(storage, date(2024, 1, 1))
            self.assertFalse(session.initialized, value)
            self.assertEqual(session.record, {})

    def test_view_cursor_starts_at_today_within_window(self):
        storage = MemoryStorage({START_DATE_SLOT: "2024-01-01T00:00:00"})
        self.assertEqual(load_session(storage, date(2024, 1, 20)).view_date, date(2024, 1, 20))
        self.assertEqual(load_session(storage, date(2023, 12, 1)).view_date, START)
        self.assertEqual(load_session(storage, date(2024, 6, 1)).view_date, date(2024, 3, 30))

    def test_open_tracker_shares_one_session(self):
        storage = MemoryStorage({START_DATE_SLOT: "2024-01-01T00:00:00"})
        tracker = open_tracker(storage, START)
        self.assertIs(tracker.store.session, tracker.session)
        self.assertIs(tracker.navigator.session, tracker.session)
        tracker.store.toggle_dose(START, TEARS, 0)
        reloaded = load_session(storage, START)
        self.assertEqual(reloaded.record, tracker.session.record)


class SlotStorageTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        import db

        self._db = db
        self._old_db_path = db.DB_PATH
        db.DB_PATH = f"{self.tmp.name}/test.db"
        db.init_db()

    def tearDown(self):
        self._db.DB_PATH = self._old_db_path
        self.tmp.cleanup()

    def test_slots_round_trip(self):
        storage = self._db.SlotStorage()
        self.assertIsNone(storage.read(RECORD_SLOT))
        storage.write(RECORD_SLOT, '{"2024-01-01": {}}')
        storage.write(RECORD_SLOT, "{}")
        self.assertEqual(storage.read(RECORD_SLOT), "{}")
        storage.delete(RECORD_SLOT)
        self.assertIsNone(storage.read(RECORD_SLOT))

    def test_session_survives_restart(self):
        tracker = open_tracker(self._db.SlotStorage(), START)
        tracker.navigator.set_start_date(START)
        tracker.store.toggle_dose(START, FML, 3)
        restarted = open_tracker(self._db.SlotStorage(), START)
        self.assertEqual(restarted.session.start_date, START)
        self.assertEqual(restarted.store.get_doses(START, FML), [False, False, False, True])


if __name__ == "__main__":
    unittest.main()
