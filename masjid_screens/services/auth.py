"""Credential checks for the two kinds of callers.

Devices present ``X-Screen-ID`` plus ``Authorization: Bearer <apiKey>``.
Admin users present ``Authorization: Bearer <session token>``. The two
are looked up in different tables, so one can never stand in for the
other.
"""

import logging
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from masjid_screens.models.screen import STATUS_ONLINE, Screen
from masjid_screens.models.user import ROLE_ADMIN, User, UserSession
from masjid_screens.services.clock import utcnow
from masjid_screens.services.errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)

SESSION_HOURS = int(os.getenv("MASJID_SESSION_HOURS", "8"))


@dataclass(frozen=True)
class SessionPrincipal:
    user_id: str
    role: str
    masjid_id: str | None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def parse_bearer(authorization: str | None) -> str | None:
    raw = (authorization or "").strip()
    scheme, _, credential = raw.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credential.strip() or None


def mark_screen_seen(db: Session, screen: Screen, now: datetime | None = None) -> Screen:
    screen.last_seen = now or utcnow()
    screen.status = STATUS_ONLINE
    db.commit()
    db.refresh(screen)
    return screen


def authenticate_device(
    db: Session,
    screen_id: str | None,
    api_key: str | None,
    now: datetime | None = None,
) -> Screen:
    """Validate a device credential and record that the device was seen.

    Succeeding here refreshes ``last_seen`` and sets the stored status to
    ONLINE; every authenticated device request therefore counts as a
    heartbeat.
    """
    screen_id = (screen_id or "").strip()
    api_key = (api_key or "").strip()
    if not screen_id or not api_key:
        raise Unauthorized("Missing screen credentials")

    screen = db.query(Screen).get(screen_id)
    if screen is None or not screen.api_key or not screen.is_active:
        logger.info("Rejected device credentials for screen %s", screen_id)
        raise Unauthorized("Invalid screen credentials")
    if not secrets.compare_digest(screen.api_key, api_key):
        logger.info("Rejected device credentials for screen %s", screen_id)
        raise Unauthorized("Invalid screen credentials")

    return mark_screen_seen(db, screen, now)


def issue_session(db: Session, user: User, hours: int | None = None, now: datetime | None = None) -> UserSession:
    current_time = now or utcnow()
    session = UserSession(
        user_id=user.id,
        token=secrets.token_urlsafe(32),
        expires_at=current_time + timedelta(hours=hours or SESSION_HOURS),
        last_active=current_time,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def resolve_session(db: Session, token: str | None, now: datetime | None = None) -> SessionPrincipal:
    if not token:
        raise Unauthorized("Authentication required")
    current_time = now or utcnow()
    session = db.query(UserSession).filter(UserSession.token == token).first()
    if session is None or session.expires_at <= current_time:
        raise Unauthorized("Session expired or invalid")
    user = db.query(User).get(session.user_id)
    if user is None:
        raise Unauthorized("Session expired or invalid")

    session.last_active = current_time
    db.commit()
    return SessionPrincipal(user_id=str(user.id), role=user.role, masjid_id=user.masjid_id)


def require_tenant(principal: SessionPrincipal) -> str:
    if not principal.masjid_id:
        raise Unauthorized("User is not attached to a masjid")
    return principal.masjid_id


def ensure_masjid_access(principal: SessionPrincipal, masjid_id: str) -> None:
    if principal.masjid_id == masjid_id or principal.is_admin:
        return
    raise Forbidden()
