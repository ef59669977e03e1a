from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from masjid_screens.api.deps import require_masjid_id
from masjid_screens.db import get_db
from masjid_screens.schemas.content_schedule import (
    DuplicateScheduleIn,
    ScheduleCreateIn,
    ScheduleUpdateIn,
    ToggleActiveIn,
)
from masjid_screens.services import schedules

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.get("")
def list_schedules(masjid_id: str = Depends(require_masjid_id), db: Session = Depends(get_db)):
    return [schedules.schedule_payload(db, item) for item in schedules.list_schedules(db, masjid_id)]


@router.post("", status_code=201)
def create_schedule(payload: ScheduleCreateIn, masjid_id: str = Depends(require_masjid_id), db: Session = Depends(get_db)):
    schedule = schedules.create_schedule(
        db,
        masjid_id,
        payload.name,
        description=payload.description,
        is_active=payload.is_active,
        content_item_ids=payload.content_item_ids,
    )
    return schedules.schedule_payload(db, schedule)


@router.post("/duplicate")
def duplicate_schedule(
    payload: DuplicateScheduleIn,
    masjid_id: str = Depends(require_masjid_id),
    db: Session = Depends(get_db),
):
    schedule = schedules.duplicate_schedule(db, payload.source_schedule_id, masjid_id, payload.name)
    return schedules.schedule_payload(db, schedule)


@router.get("/{schedule_id}")
def get_schedule(schedule_id: str, masjid_id: str = Depends(require_masjid_id), db: Session = Depends(get_db)):
    return schedules.schedule_payload(db, schedules.get_schedule(db, schedule_id, masjid_id))


@router.put("/{schedule_id}")
def update_schedule(
    schedule_id: str,
    payload: ScheduleUpdateIn,
    masjid_id: str = Depends(require_masjid_id),
    db: Session = Depends(get_db),
):
    schedule = schedules.update_schedule(
        db,
        schedule_id,
        masjid_id,
        name=payload.name,
        description=payload.description,
        is_active=payload.is_active,
        content_item_ids=payload.content_item_ids,
    )
    return schedules.schedule_payload(db, schedule)


@router.patch("/{schedule_id}/toggle-active")
def toggle_active(
    schedule_id: str,
    payload: ToggleActiveIn,
    masjid_id: str = Depends(require_masjid_id),
    db: Session = Depends(get_db),
):
    schedule = schedules.toggle_active(db, schedule_id, masjid_id, payload.is_active)
    return schedules.schedule_payload(db, schedule)


@router.post("/{schedule_id}/default")
def set_default(schedule_id: str, masjid_id: str = Depends(require_masjid_id), db: Session = Depends(get_db)):
    return schedules.schedule_payload(db, schedules.set_default(db, schedule_id, masjid_id))


@router.delete("/{schedule_id}")
def delete_schedule(schedule_id: str, masjid_id: str = Depends(require_masjid_id), db: Session = Depends(get_db)):
    schedules.delete_schedule(db, schedule_id, masjid_id)
    return {"success": True}
