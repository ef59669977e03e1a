"""Screen lifecycle: pairing, claiming, heartbeats and liveness.

A screen starts as a pending row created by the device itself
(``PAIRING``, inactive, holding a short pairing code). An admin claims it
with that code, which issues the API key and activates it in one
conditional UPDATE. The device then collects the key once through the
pairing-status poll (or the legacy completion call) and from then on only
talks to the authenticated device endpoints.

Online/offline for display purposes is never stored: it is derived from
``last_seen`` every time a screen is read.
"""

import logging
import os
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from masjid_screens.models.content_schedule import ContentSchedule
from masjid_screens.models.masjid import Masjid
from masjid_screens.models.screen import (
    ORIENTATION_LANDSCAPE,
    SCREEN_ORIENTATIONS,
    STATUS_OFFLINE,
    STATUS_ONLINE,
    STATUS_PAIRING,
    Screen,
    ScreenContentOverride,
)
from masjid_screens.services.clock import utcnow
from masjid_screens.services.errors import Internal, InvalidOrExpired, NotFound, ValidationError
from masjid_screens.services.pairing import generate_api_key, generate_code, normalize_code

logger = logging.getLogger(__name__)

PAIRING_CODE_TTL_MIN = int(os.getenv("MASJID_PAIRING_CODE_TTL_MIN", "15"))
PAIRING_CHECK_INTERVAL_MS = int(os.getenv("MASJID_PAIRING_CHECK_INTERVAL_MS", "5000"))
PAIRING_CODE_ATTEMPTS = int(os.getenv("MASJID_PAIRING_CODE_ATTEMPTS", "5"))
SCREEN_OFFLINE_AFTER_SEC = int(os.getenv("MASJID_SCREEN_OFFLINE_AFTER_SEC", "300"))
DEFAULT_DEVICE_TYPE = "DISPLAY"
UNPAIRED_SCREEN_NAME = "Unpaired Display"
HEARTBEAT_STATUSES = {STATUS_ONLINE, STATUS_OFFLINE}


def derive_liveness(screen: Screen, now: datetime | None = None) -> str:
    if screen.last_seen is None:
        return STATUS_OFFLINE
    current_time = now or utcnow()
    age = (current_time - screen.last_seen).total_seconds()
    return STATUS_ONLINE if age <= SCREEN_OFFLINE_AFTER_SEC else STATUS_OFFLINE


def normalize_orientation(value: str | None) -> str:
    orientation = (value or ORIENTATION_LANDSCAPE).strip().upper()
    if orientation not in SCREEN_ORIENTATIONS:
        raise ValidationError("orientation must be LANDSCAPE or PORTRAIT")
    return orientation


def screen_payload(screen: Screen, now: datetime | None = None) -> dict:
    return {
        "id": str(screen.id),
        "masjid_id": screen.masjid_id,
        "name": screen.name,
        "location": screen.location,
        "device_type": screen.device_type,
        "status": screen.status,
        "liveness": derive_liveness(screen, now),
        "is_active": bool(screen.is_active),
        "last_seen": screen.last_seen.isoformat() if screen.last_seen else None,
        "orientation": screen.orientation,
        "schedule_id": screen.schedule_id,
        "content_config": screen.content_config,
        "created_at": screen.created_at.isoformat() if screen.created_at else None,
    }


# ---------------------------------------------------------------------------
# Pairing
# ---------------------------------------------------------------------------


def purge_expired_pairings(db: Session, now: datetime | None = None) -> int:
    """Drop pending screens whose code lapsed and disarm stale handoffs."""
    current_time = now or utcnow()
    removed = (
        db.query(Screen)
        .filter(
            Screen.is_active.is_(False),
            Screen.status == STATUS_PAIRING,
            Screen.pairing_code_expiry <= current_time,
        )
        .delete(synchronize_session=False)
    )
    (
        db.query(Screen)
        .filter(Screen.handoff_code.isnot(None), Screen.handoff_expiry <= current_time)
        .update({Screen.handoff_code: None, Screen.handoff_expiry: None}, synchronize_session=False)
    )
    db.commit()
    if removed:
        logger.info("Purged %s expired pairing request(s)", removed)
    return removed


def _code_in_use(db: Session, code: str, now: datetime) -> bool:
    live = (
        db.query(Screen.id)
        .filter(
            or_(
                (Screen.pairing_code == code) & (Screen.pairing_code_expiry > now),
                (Screen.handoff_code == code) & (Screen.handoff_expiry > now),
            )
        )
        .first()
    )
    return live is not None


def request_pairing(
    db: Session,
    device_type: str | None = None,
    orientation: str | None = None,
    now: datetime | None = None,
    code_factory: Callable[[], str] = generate_code,
) -> dict:
    current_time = now or utcnow()
    resolved_orientation = normalize_orientation(orientation)
    purge_expired_pairings(db, current_time)

    expires_at = current_time + timedelta(minutes=PAIRING_CODE_TTL_MIN)
    for attempt in range(1, PAIRING_CODE_ATTEMPTS + 1):
        code = code_factory()
        if _code_in_use(db, code, current_time):
            logger.info("Pairing code collision on attempt %s, drawing again", attempt)
            continue
        screen = Screen(
            name=UNPAIRED_SCREEN_NAME,
            device_type=(device_type or "").strip() or DEFAULT_DEVICE_TYPE,
            orientation=resolved_orientation,
            status=STATUS_PAIRING,
            is_active=False,
            pairing_code=code,
            pairing_code_expiry=expires_at,
        )
        db.add(screen)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning("Pairing code %s taken by a concurrent request, drawing again", code)
            continue
        logger.info("Issued pairing code for new screen %s", screen.id)
        return {
            "pairing_code": code,
            "expires_at": expires_at,
            "check_interval_ms": PAIRING_CHECK_INTERVAL_MS,
        }

    raise Internal("Failed to generate pairing code")


def _pending_query(db: Session, code: str, now: datetime) -> Query:
    return db.query(Screen).filter(
        Screen.pairing_code == code,
        Screen.pairing_code_expiry > now,
        Screen.is_active.is_(False),
    )


def _handoff_query(db: Session, code: str, now: datetime) -> Query:
    return db.query(Screen).filter(
        Screen.handoff_code == code,
        Screen.handoff_expiry > now,
        Screen.is_active.is_(True),
    )


def _consume_handoff(db: Session, code: str, now: datetime, touch: bool = False) -> Screen | None:
    screen = _handoff_query(db, code, now).first()
    if screen is None:
        return None
    values = {Screen.handoff_code: None, Screen.handoff_expiry: None}
    if touch:
        values[Screen.last_seen] = now
        values[Screen.status] = STATUS_ONLINE
    consumed = _handoff_query(db, code, now).filter(Screen.id == screen.id).update(values, synchronize_session=False)
    if consumed != 1:
        db.rollback()
        return None
    db.commit()
    db.refresh(screen)
    return screen


def check_pairing_status(db: Session, pairing_code: str, now: datetime | None = None) -> dict:
    code = normalize_code(pairing_code)
    if not code:
        raise ValidationError("Pairing code is required")
    current_time = now or utcnow()

    if _pending_query(db, code, current_time).first() is not None:
        return {"paired": False, "check_again_in_ms": PAIRING_CHECK_INTERVAL_MS}

    screen = _consume_handoff(db, code, current_time)
    if screen is None:
        raise NotFound("Invalid or expired pairing code")
    logger.info("Screen %s collected its API key", screen.id)
    return {"paired": True, "api_key": screen.api_key, "masjid_id": screen.masjid_id}


def claim_screen(
    db: Session,
    pairing_code: str,
    name: str,
    masjid_id: str,
    location: str | None = None,
    now: datetime | None = None,
) -> Screen:
    code = normalize_code(pairing_code)
    screen_name = (name or "").strip()
    if not code or not screen_name:
        raise ValidationError("Pairing code and screen name are required")
    if db.query(Masjid).get(masjid_id) is None:
        raise NotFound("Masjid not found")
    current_time = now or utcnow()

    screen = _pending_query(db, code, current_time).first()
    if screen is None:
        raise NotFound("Invalid or expired pairing code")

    claimed = (
        _pending_query(db, code, current_time)
        .filter(Screen.id == screen.id)
        .update(
            {
                Screen.name: screen_name,
                Screen.location: (location or "").strip() or None,
                Screen.masjid_id: masjid_id,
                Screen.api_key: generate_api_key(),
                Screen.is_active: True,
                Screen.status: STATUS_ONLINE,
                Screen.handoff_code: code,
                Screen.handoff_expiry: screen.pairing_code_expiry,
                Screen.pairing_code: None,
                Screen.pairing_code_expiry: None,
            },
            synchronize_session=False,
        )
    )
    if claimed != 1:
        db.rollback()
        raise NotFound("Invalid or expired pairing code")
    db.commit()
    db.refresh(screen)
    logger.info("Screen %s claimed for masjid %s", screen.id, masjid_id)
    return screen


def complete_pairing(db: Session, pairing_code: str, now: datetime | None = None) -> dict:
    """Legacy device-side completion.

    Kept for older display builds that call ``PUT /screens/pair`` instead
    of polling. It is an alias of the credential handoff: it only succeeds
    after an admin claimed the code, and never activates a screen itself.
    """
    code = normalize_code(pairing_code)
    if not code:
        raise ValidationError("Pairing code is required")
    current_time = now or utcnow()
    screen = _consume_handoff(db, code, current_time, touch=True)
    if screen is None:
        raise InvalidOrExpired()
    logger.info("Screen %s completed pairing through the legacy endpoint", screen.id)
    return {"screen_id": str(screen.id), "api_key": screen.api_key}


# ---------------------------------------------------------------------------
# Paired screens
# ---------------------------------------------------------------------------


def record_heartbeat(
    db: Session,
    screen_id: str,
    status: str | None = None,
    metrics: dict | None = None,
    now: datetime | None = None,
) -> Screen:
    next_status = (status or STATUS_ONLINE).strip().upper()
    if next_status not in HEARTBEAT_STATUSES:
        raise ValidationError("status must be ONLINE or OFFLINE")
    screen = db.query(Screen).get(screen_id)
    if screen is None:
        raise NotFound("Screen not found")

    screen.last_seen = now or utcnow()
    screen.status = next_status
    if metrics is not None:
        config = dict(screen.content_config or {})
        config["metrics"] = metrics
        screen.content_config = config
    db.commit()
    db.refresh(screen)
    return screen


def get_screen(db: Session, screen_id: str, masjid_id: str) -> Screen:
    screen = db.query(Screen).filter(Screen.id == screen_id, Screen.masjid_id == masjid_id).first()
    if screen is None:
        raise NotFound("Screen not found")
    return screen


def list_screens(db: Session, masjid_id: str) -> list[Screen]:
    return db.query(Screen).filter(Screen.masjid_id == masjid_id).order_by(Screen.created_at.desc()).all()


def update_screen(
    db: Session,
    screen_id: str,
    masjid_id: str,
    name: str | None = None,
    location: str | None = None,
    orientation: str | None = None,
) -> Screen:
    screen = get_screen(db, screen_id, masjid_id)
    if name is not None:
        if not name.strip():
            raise ValidationError("Screen name cannot be empty")
        screen.name = name.strip()
    if location is not None:
        screen.location = location.strip() or None
    if orientation is not None:
        screen.orientation = normalize_orientation(orientation)
    db.commit()
    db.refresh(screen)
    return screen


def assign_schedule(db: Session, screen_id: str, masjid_id: str, schedule_id: str | None) -> Screen:
    screen = get_screen(db, screen_id, masjid_id)
    if schedule_id:
        schedule = (
            db.query(ContentSchedule)
            .filter(ContentSchedule.id == schedule_id, ContentSchedule.masjid_id == masjid_id)
            .first()
        )
        if schedule is None:
            raise NotFound("Schedule not found")
    screen.schedule_id = schedule_id or None
    db.commit()
    db.refresh(screen)
    return screen


def delete_screen(db: Session, screen_id: str, masjid_id: str) -> None:
    screen = get_screen(db, screen_id, masjid_id)
    db.query(ScreenContentOverride).filter(ScreenContentOverride.screen_id == screen.id).delete(
        synchronize_session=False
    )
    db.delete(screen)
    db.commit()
    logger.info("Screen %s deleted from masjid %s", screen_id, masjid_id)
