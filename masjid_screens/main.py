import logging
import os
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from masjid_screens.api import content, dashboard, device, masjid, pairing, prayer_times, schedules, screens
from masjid_screens.db import dispose_db, init_db
from masjid_screens.services.cors import CorsPolicy
from masjid_screens.services.errors import Internal, ScreenServiceError

logger = logging.getLogger(__name__)

QUIET_ACCESS_LOG = os.getenv("MASJID_QUIET_ACCESS_LOG", "1").strip().lower() in {"1", "true", "yes", "on"}

if QUIET_ACCESS_LOG:
    # Screens poll every few seconds; keep warnings and errors only.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

app = FastAPI(title="masjid-screens")
cors_policy = CorsPolicy()


def _error_response(error: ScreenServiceError) -> JSONResponse:
    return JSONResponse({"detail": error.message, "code": error.code}, status_code=error.status_code)


@app.exception_handler(ScreenServiceError)
async def screen_service_error_handler(request: Request, exc: ScreenServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
        return _error_response(Internal())
    logger.info("%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, exc.message)
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    message = "; ".join(problems) or "Invalid request"
    logger.info("%s %s -> 400 (%s)", request.method, request.url.path, message)
    return JSONResponse({"detail": message, "code": "validation_error"}, status_code=400)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(Internal())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(Internal())


@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    headers = cors_policy.headers_for(request.headers.get("origin"))
    if request.method.upper() == "OPTIONS":
        return Response(status_code=204, headers=headers)
    try:
        response = await call_next(request)
    except Exception:
        # Unhandled errors would otherwise leave through ServerErrorMiddleware without CORS headers.
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = _error_response(Internal())
    response.headers.update(headers)
    return response


@app.get("/")
def root():
    return {
        "ok": True,
        "service": "masjid-screens",
        "time_utc": datetime.now(timezone.utc).isoformat(),
        "docs": "/docs",
    }


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.on_event("startup")
async def startup_events() -> None:
    init_db()


@app.on_event("shutdown")
async def shutdown_events() -> None:
    dispose_db()


# Pairing routes must win over /screens/{screen_id}.
app.include_router(pairing.router)
app.include_router(screens.router)
app.include_router(device.router)
app.include_router(schedules.router)
app.include_router(content.router)
app.include_router(masjid.router)
app.include_router(prayer_times.router)
app.include_router(dashboard.router)
