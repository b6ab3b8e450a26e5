"""Built-in post-operative eye-drop schedule.

Four independent rules are evaluated for every day; each yields at most one
entry, and entries always come out in the same order (corticosteroid,
antibiotic, lubricant, analgesic) so the day view and tests can rely on it.
"""
from functools import lru_cache
from typing import NamedTuple, Optional

from config import TOTAL_TREATMENT_DAYS


class MedicationSpec(NamedTuple):
    id: str
    display_name: str
    dose_count: int


FML = "fml"
VIGAMOX = "vigamox"
TEARS = "tears"
PAIN = "pain"

MEDICATION_NAMES = {
    FML:     "FML (סטרואידים)",
    VIGAMOX: "Vigamox (אנטיביוטיקה)",
    TEARS:   "דמעות מלאכותיות",
    PAIN:    "Dicloftil/Nevanac (משכך כאבים)",
}

# (medication id, first day, last day, doses per day); ranges are inclusive
_RULES = [
    (FML,     1,  30, 4),
    (FML,     31, 60, 2),
    (FML,     61, 90, 1),
    (VIGAMOX, 1,  7,  4),
    (TEARS,   1,  90, 5),
    (PAIN,    1,  3,  6),
]


@lru_cache(maxsize=None)
def resolve_medications(day_number: int) -> tuple:
    if day_number < 1 or day_number > TOTAL_TREATMENT_DAYS:
        return ()
    meds = []
    for med_id, first, last, doses in _RULES:
        if first <= day_number <= last:
            meds.append(MedicationSpec(med_id, MEDICATION_NAMES[med_id], doses))
    return tuple(meds)


def find_medication(day_number: int, medication_id: str) -> Optional[MedicationSpec]:
    for med in resolve_medications(day_number):
        if med.id == medication_id:
            return med
    return None


def total_doses(day_number: int) -> int:
    return sum(med.dose_count for med in resolve_medications(day_number))
