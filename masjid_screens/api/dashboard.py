from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from masjid_screens.api.deps import require_masjid_id
from masjid_screens.db import get_db
from masjid_screens.services.dashboard import dashboard_summary

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
def dashboard(masjid_id: str = Depends(require_masjid_id), db: Session = Depends(get_db)):
    return dashboard_summary(db, masjid_id)
