from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from masjid_screens.api.deps import require_masjid_id
from masjid_screens.db import get_db
from masjid_screens.schemas.prayer_time import PrayerTimeUpsertIn
from masjid_screens.services import prayer_times

router = APIRouter(prefix="/prayer-times", tags=["prayer-times"])


@router.get("")
def list_prayer_times(
    date_from: date | None = None,
    date_to: date | None = None,
    masjid_id: str = Depends(require_masjid_id),
    db: Session = Depends(get_db),
):
    rows = prayer_times.list_prayer_times(db, masjid_id, date_from=date_from, date_to=date_to)
    return [prayer_times.prayer_time_payload(row) for row in rows]


@router.post("")
def upsert_prayer_times(
    payload: PrayerTimeUpsertIn,
    masjid_id: str = Depends(require_masjid_id),
    db: Session = Depends(get_db),
):
    rows = prayer_times.upsert_prayer_times(
        db,
        masjid_id,
        [row.model_dump() for row in payload.rows],
        source=payload.source,
    )
    return [prayer_times.prayer_time_payload(row) for row in rows]
