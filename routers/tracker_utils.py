"""View models shared by the HTML pages (tracker.py) and the JSON API (tracker_api.py)."""
from datetime import date

from fastapi import Request

from config import TOTAL_TREATMENT_DAYS
from dates import date_key, date_of_day, format_date_for_display
from schedule import resolve_medications


def get_tracker(request: Request):
    return request.app.state.tracker


def _phase(day_number: int) -> str:
    if day_number <= 0:
        return "not_started"
    if day_number > TOTAL_TREATMENT_DAYS:
        return "ended"
    return "active"


def day_view(tracker, today: date) -> dict:
    """Everything the day page needs for the date under the view cursor."""
    nav, store = tracker.navigator, tracker.store
    with tracker.lock:
        view = tracker.session.view_date
        day_number = nav.current_day_number()
        phase = _phase(day_number)
        medications = []
        if phase == "active":
            for med in resolve_medications(day_number):
                doses = store.get_doses(view, med.id)
                medications.append({
                    "id": med.id,
                    "name": med.display_name,
                    "dose_count": med.dose_count,
                    "doses": list(doses),
                })
            taken, total = store.day_counts(view, day_number)
            status = store.day_status(view, day_number).value
        else:
            taken = total = 0
            status = None
        return {
            "date": date_key(view),
            "date_display": format_date_for_display(view),
            "day_number": day_number,
            "total_days": TOTAL_TREATMENT_DAYS,
            "phase": phase,
            "is_future": view > today,
            "medications": medications,
            "taken": taken,
            "total": total,
            "status": status,
            "can_go_back": nav.can_step_backward(),
            "can_go_forward": nav.can_step_forward(),
        }


def adherence_summary(tracker, today: date) -> list:
    """Per-medication taken/expected counts from day 1 through today (capped at the last day)."""
    totals = {}
    with tracker.lock:
        start = tracker.session.require_start_date()
        last_day = min(tracker.navigator.day_number_of(today), TOTAL_TREATMENT_DAYS)
        for day in range(1, last_day + 1):
            d = date_of_day(start, day)
            for med in resolve_medications(day):
                entry = totals.setdefault(med.id, {"id": med.id, "name": med.display_name, "expected": 0, "taken": 0})
                doses = tracker.store.get_doses(d, med.id)
                entry["expected"] += len(doses)
                entry["taken"] += sum(1 for x in doses if x)
    result = []
    for entry in totals.values():
        expected = entry["expected"]
        entry["pct"] = round(entry["taken"] / expected * 100, 1) if expected > 0 else None
        result.append(entry)
    return result
