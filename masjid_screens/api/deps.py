from fastapi import Depends, Header
from sqlalchemy.orm import Session

from masjid_screens.db import get_db
from masjid_screens.models.screen import Screen
from masjid_screens.services.auth import (
    SessionPrincipal,
    authenticate_device,
    parse_bearer,
    require_tenant,
    resolve_session,
)


def require_device(
    authorization: str | None = Header(None),
    x_screen_id: str | None = Header(None, alias="X-Screen-ID"),
    db: Session = Depends(get_db),
) -> Screen:
    return authenticate_device(db, x_screen_id, parse_bearer(authorization))


def require_admin_session(
    authorization: str | None = Header(None),
    db: Session = Depends(get_db),
) -> SessionPrincipal:
    return resolve_session(db, parse_bearer(authorization))


def require_masjid_id(principal: SessionPrincipal = Depends(require_admin_session)) -> str:
    return require_tenant(principal)
