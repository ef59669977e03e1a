from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from masjid_screens.api.deps import require_admin_session
from masjid_screens.db import get_db
from masjid_screens.models.masjid import Masjid
from masjid_screens.services.auth import SessionPrincipal, ensure_masjid_access, require_tenant
from masjid_screens.services.errors import NotFound

router = APIRouter(prefix="/masjid", tags=["masjid"])


def _masjid_payload(masjid: Masjid) -> dict:
    return {
        "id": str(masjid.id),
        "name": masjid.name,
        "latitude": masjid.latitude,
        "longitude": masjid.longitude,
        "timezone": masjid.timezone,
        "calculation_method": masjid.calculation_method,
        "madhab": masjid.madhab,
    }


def _load(db: Session, masjid_id: str) -> Masjid:
    masjid = db.query(Masjid).get(masjid_id)
    if masjid is None:
        raise NotFound("Masjid not found")
    return masjid


@router.get("/current")
def current_masjid(principal: SessionPrincipal = Depends(require_admin_session), db: Session = Depends(get_db)):
    return _masjid_payload(_load(db, require_tenant(principal)))


@router.get("/{masjid_id}")
def get_masjid(
    masjid_id: str,
    principal: SessionPrincipal = Depends(require_admin_session),
    db: Session = Depends(get_db),
):
    ensure_masjid_access(principal, masjid_id)
    return _masjid_payload(_load(db, masjid_id))
