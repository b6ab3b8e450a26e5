from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from config import TOTAL_TREATMENT_DAYS, _today_local
from dates import date_key, window_fits
from routers.tracker_utils import adherence_summary, day_view, get_tracker

router = APIRouter()


def _parse_date(value) -> Optional[date]:
    try:
        return date.fromisoformat(str(value or ""))
    except ValueError:
        return None


@router.get("/api/day")
def api_day(tracker=Depends(get_tracker)):
    return JSONResponse(day_view(tracker, _today_local()))


@router.get("/api/progress")
def api_progress(tracker=Depends(get_tracker)):
    return JSONResponse({"days": tracker.navigator.progress_grid(_today_local())})


@router.get("/api/adherence")
def api_adherence(tracker=Depends(get_tracker)):
    return JSONResponse({"medications": adherence_summary(tracker, _today_local())})


@router.post("/api/start-date")
def api_start_date(payload: dict = Body(...), tracker=Depends(get_tracker)):
    start = _parse_date(payload.get("start_date"))
    if start is None:
        return JSONResponse({"ok": False, "error": "Invalid start date"}, status_code=400)
    if not window_fits(start):
        return JSONResponse({"ok": False, "error": "Start date out of range"}, status_code=400)
    tracker.navigator.set_start_date(start)
    return JSONResponse({"ok": True, "start_date": date_key(start)})


@router.post("/api/navigate")
def api_navigate(payload: dict = Body(...), tracker=Depends(get_tracker)):
    nav = tracker.navigator
    direction = payload.get("direction")
    day = None
    if direction not in ("prev", "next"):
        if "day" not in payload:
            return JSONResponse({"ok": False, "error": "Specify direction or day"}, status_code=400)
        try:
            day = int(payload["day"])
        except (TypeError, ValueError):
            day = 0
        if not 1 <= day <= TOTAL_TREATMENT_DAYS:
            return JSONResponse(
                {"ok": False, "error": f"Day must be between 1 and {TOTAL_TREATMENT_DAYS}"},
                status_code=400,
            )
    with tracker.lock:
        if direction == "prev":
            moved = nav.step_backward()
        elif direction == "next":
            moved = nav.step_forward()
        else:
            nav.jump_to_day(day)
            moved = True
        view_date = tracker.session.view_date
    return JSONResponse({"ok": True, "moved": moved, "date": date_key(view_date)})


@router.post("/api/doses/toggle")
def api_doses_toggle(payload: dict = Body(...), tracker=Depends(get_tracker)):
    d = _parse_date(payload.get("date"))
    if d is None:
        return JSONResponse({"ok": False, "error": "Invalid date"}, status_code=400)
    medication_id = str(payload.get("medication_id", ""))
    try:
        index = int(payload.get("index"))
    except (TypeError, ValueError):
        return JSONResponse({"ok": False, "error": "Invalid dose index"}, status_code=400)
    with tracker.lock:
        tracker.store.toggle_dose(d, medication_id, index)
        doses = list(tracker.store.get_doses(d, medication_id))
    return JSONResponse({"ok": True, "date": date_key(d), "medication_id": medication_id, "doses": doses})
