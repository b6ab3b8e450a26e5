"""
Seed script: populates a demo treatment in the local tracker database.

- Sets the treatment start date DAYS_ELAPSED days before today, which
  discards whatever dose record was there before.
- Marks doses taken on every elapsed day with a fixed per-medication
  adherence rate, using a seeded RNG so the demo is reproducible.

Usage:
    python3 seed.py
"""

import random
from datetime import date, timedelta

from config import TOTAL_TREATMENT_DAYS
from dates import date_of_day
from db import SlotStorage, init_db
from schedule import FML, PAIN, TEARS, VIGAMOX, resolve_medications
from session import Tracker, TreatmentSession

DAYS_ELAPSED = 20

ADHERENCE_RATES = {
    FML:     0.90,
    VIGAMOX: 0.95,
    TEARS:   0.70,
    PAIN:    0.80,
}


def seed(storage, today: date, days_elapsed: int = DAYS_ELAPSED, rng=None) -> dict:
    rng = rng or random.Random(42)
    tracker = Tracker(TreatmentSession(), storage)
    start = today - timedelta(days=days_elapsed - 1)
    tracker.navigator.set_start_date(start)

    taken = 0
    for day in range(1, min(days_elapsed, TOTAL_TREATMENT_DAYS) + 1):
        d = date_of_day(start, day)
        for med in resolve_medications(day):
            for i in range(med.dose_count):
                if rng.random() < ADHERENCE_RATES[med.id]:
                    tracker.store.toggle_dose(d, med.id, i)
                    taken += 1
    return {"start_date": start, "doses_taken": taken}


if __name__ == "__main__":
    init_db()
    result = seed(SlotStorage(), date.today())
    print(f"Treatment start date: {result['start_date'].isoformat()}")
    print(f"Marked {result['doses_taken']} doses as taken.")
