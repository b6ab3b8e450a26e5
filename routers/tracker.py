import html
import logging
from datetime import date
from urllib.parse import quote_plus

from fastapi import APIRouter, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse

from config import TOTAL_TREATMENT_DAYS, _today_local
from dates import date_key, format_date_for_display, window_fits
from errors import InvalidIndex
from routers.tracker_utils import day_view, get_tracker
from ui import PAGE_STYLE, _error_banner, _nav_bar, _status_style

logger = logging.getLogger(__name__)

router = APIRouter()


def _error_url(base_path: str, message: str) -> str:
    return f"{base_path}?error={quote_plus(message)}"


@router.get("/")
def root(tracker=Depends(get_tracker)):
    if not tracker.session.initialized:
        return RedirectResponse(url="/setup", status_code=303)
    return RedirectResponse(url="/day", status_code=303)


# ── Setup ────────────────────────────────────────────────────────────────────

@router.get("/setup", response_class=HTMLResponse)
def setup_get(error: str = "", tracker=Depends(get_tracker)):
    session = tracker.session
    default_date = session.start_date or _today_local()
    warning = ""
    if session.initialized:
        warning = (
            '<div class="warning">'
            f'תאריך ההתחלה הנוכחי: {html.escape(format_date_for_display(session.start_date))}. '
            'שמירת תאריך חדש תמחק את כל המנות שסומנו.'
            '</div>'
        )
    return f"""<!DOCTYPE html>
<html lang="he" dir="rtl">
<head>{PAGE_STYLE}<title>תאריך תחילת טיפול</title></head>
<body>
  {_nav_bar('setup')}
  <div class="container">
    <h1>תאריך תחילת טיפול</h1>
    {_error_banner(error)}
    {warning}
    <div class="card">
      <form method="post" action="/setup">
        <div class="form-group">
          <label for="start-date">תאריך תחילת הטיפול</label>
          <input type="date" id="start-date" name="start_date" value="{date_key(default_date)}">
        </div>
        <button type="submit" class="btn-primary" id="save-start-date">שמירה</button>
      </form>
    </div>
  </div>
</body>
</html>"""


@router.post("/setup")
def setup_post(start_date: str = Form(""), tracker=Depends(get_tracker)):
    if not start_date.strip():
        return RedirectResponse(url=_error_url("/setup", "נא להזין תאריך תחילת טיפול"), status_code=303)
    try:
        start = date.fromisoformat(start_date.strip())
    except ValueError:
        return RedirectResponse(url=_error_url("/setup", "תאריך לא תקין"), status_code=303)
    if not window_fits(start):
        return RedirectResponse(url=_error_url("/setup", "תאריך מחוץ לטווח"), status_code=303)
    tracker.navigator.set_start_date(start)
    return RedirectResponse(url="/day", status_code=303)


# ── Day view ─────────────────────────────────────────────────────────────────

def _medication_cards(view: dict) -> str:
    if view["phase"] == "not_started":
        return '<p class="empty">הטיפול טרם התחיל</p>'
    if view["phase"] == "ended":
        return '<p class="empty">הטיפול הסתיים</p>'
    cards = ""
    for med in view["medications"]:
        med_id = html.escape(med["id"])
        rows = ""
        for i, taken in enumerate(med["doses"]):
            label_cls = ' class="dose-taken"' if taken else ""
            if taken:
                button = '<button type="submit" class="btn taken-btn">נלקח &#10003;</button>'
            else:
                button = '<button type="submit" class="btn take-btn">לקחתי</button>'
            rows += (
                f'<li class="dose-item">'
                f'<span{label_cls}>מנה {i + 1}</span>'
                f'<form method="post" action="/doses/toggle" style="margin:0;">'
                f'<input type="hidden" name="date" value="{view["date"]}">'
                f'<input type="hidden" name="medication_id" value="{med_id}">'
                f'<input type="hidden" name="index" value="{i}">'
                f'{button}'
                f'</form>'
                f'</li>'
            )
        cards += f"""
      <div class="card medication-card" data-medication="{med_id}">
        <div class="medication-header"><h3>{html.escape(med["name"])}</h3></div>
        <ul class="dose-list">{rows}</ul>
      </div>"""
    return cards


def _progress_grid(cells: list) -> str:
    boxes = ""
    for cell in cells:
        current = " day-current" if cell["current"] else ""
        boxes += (
            f'<form method="post" action="/day/jump" style="margin:0;">'
            f'<input type="hidden" name="day" value="{cell["day"]}">'
            f'<button type="submit" class="day-box day-{cell["status"]}{current}"'
            f' style="{_status_style(cell["status"])}" title="{cell["date"]}">{cell["day"]}</button>'
            f'</form>'
        )
    return f'<div class="progress-grid" id="progress-grid">{boxes}</div>'


@router.get("/day", response_class=HTMLResponse)
def day_get(error: str = "", tracker=Depends(get_tracker)):
    today = _today_local()
    with tracker.lock:
        view = day_view(tracker, today)
        cells = tracker.navigator.progress_grid(today)
    prev_disabled = "" if view["can_go_back"] else " disabled"
    next_disabled = "" if view["can_go_forward"] else " disabled"
    summary = ""
    if view["phase"] == "active":
        summary = (
            f'<p style="font-size:13px;color:#6b7280;text-align:center;">'
            f'{view["taken"]} מתוך {view["total"]} מנות נלקחו</p>'
        )
    return f"""<!DOCTYPE html>
<html lang="he" dir="rtl">
<head>{PAGE_STYLE}<title>מעקב טיפות עיניים</title></head>
<body>
  {_nav_bar('day')}
  <div class="container">
    {_error_banner(error)}
    <div class="day-header">
      <form method="post" action="/day/prev" style="margin:0;">
        <button type="submit" class="btn-nav" id="prev-day"{prev_disabled}>&#8594; הקודם</button>
      </form>
      <div class="day-title" id="current-date">{html.escape(view["date_display"])} - יום {view["day_number"]} לטיפול</div>
      <form method="post" action="/day/next" style="margin:0;">
        <button type="submit" class="btn-nav" id="next-day"{next_disabled}>הבא &#8592;</button>
      </form>
    </div>
    {summary}
    <div id="medications-container">{_medication_cards(view)}</div>
    <h2 style="font-size:16px;margin-top:24px;">התקדמות</h2>
    {_progress_grid(cells)}
  </div>
</body>
</html>"""


@router.post("/day/prev")
def day_prev(tracker=Depends(get_tracker)):
    tracker.navigator.step_backward()
    return RedirectResponse(url="/day", status_code=303)


@router.post("/day/next")
def day_next(tracker=Depends(get_tracker)):
    tracker.navigator.step_forward()
    return RedirectResponse(url="/day", status_code=303)


@router.post("/day/jump")
def day_jump(day: int = Form(...), tracker=Depends(get_tracker)):
    if 1 <= day <= TOTAL_TREATMENT_DAYS:
        tracker.navigator.jump_to_day(day)
    return RedirectResponse(url="/day", status_code=303)


@router.post("/doses/toggle")
def doses_toggle(
    date_str: str = Form(..., alias="date"),
    medication_id: str = Form(...),
    index: int = Form(...),
    tracker=Depends(get_tracker),
):
    try:
        d = date.fromisoformat(date_str)
    except ValueError:
        return RedirectResponse(url=_error_url("/day", "תאריך לא תקין"), status_code=303)
    try:
        tracker.store.toggle_dose(d, medication_id, index)
    except InvalidIndex as exc:
        logger.warning("Rejected dose toggle: %s", exc)
        return RedirectResponse(url=_error_url("/day", "מנה לא קיימת"), status_code=303)
    return RedirectResponse(url="/day", status_code=303)
