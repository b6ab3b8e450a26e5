import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from config import LOG_LEVEL, PUBLIC_PATHS, TZ_OFFSET_COOKIE_NAME, _set_client_clock, _today_local
from db import SlotStorage, init_db
from errors import InvalidIndex, NotInitialized
from routers import tracker, tracker_api
from security import _csrf_header_valid, _ensure_csrf_cookie, _is_same_origin
from session import open_tracker

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

init_db()

app = FastAPI()
app.state.tracker = open_tracker(SlotStorage(), _today_local())
app.state.tracker.store.subscribe(
    lambda d, medication_id: logger.debug("Dose record changed for %s on %s", medication_id, d)
)

app.include_router(tracker.router)
app.include_router(tracker_api.router)


@app.middleware("http")
async def tracker_middleware(request: Request, call_next):
    _set_client_clock(request.cookies.get(TZ_OFFSET_COOKIE_NAME, ""))
    path = request.url.path
    if request.method in {"POST", "PUT", "PATCH", "DELETE"}:
        if not _is_same_origin(request):
            if path.startswith("/api/"):
                return JSONResponse({"error": "forbidden"}, status_code=403)
            return RedirectResponse(url="/day?error=Forbidden+request", status_code=303)
        if path.startswith("/api/") and not _csrf_header_valid(request):
            return JSONResponse({"error": "forbidden"}, status_code=403)

    # Everything past setup needs a treatment start date
    if path not in PUBLIC_PATHS and path != "/" and not request.app.state.tracker.session.initialized:
        if path.startswith("/api/"):
            return JSONResponse({"error": "not_initialized"}, status_code=409)
        return RedirectResponse(url="/setup", status_code=303)
    return _ensure_csrf_cookie(request, await call_next(request))


@app.exception_handler(NotInitialized)
async def not_initialized_handler(request: Request, exc: NotInitialized):
    if request.url.path.startswith("/api/"):
        return JSONResponse({"error": "not_initialized"}, status_code=409)
    return RedirectResponse(url="/setup", status_code=303)


@app.exception_handler(InvalidIndex)
async def invalid_index_handler(request: Request, exc: InvalidIndex):
    logger.warning("Rejected dose toggle: %s", exc)
    return JSONResponse({"ok": False, "error": "invalid_index", "detail": str(exc)}, status_code=400)
