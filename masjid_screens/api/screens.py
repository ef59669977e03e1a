from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from masjid_screens.api.deps import require_masjid_id
from masjid_screens.db import get_db
from masjid_screens.schemas.screen import AssignScheduleIn, ScreenUpdateIn
from masjid_screens.services import screen_registry
from masjid_screens.services.clock import utcnow

router = APIRouter(prefix="/screens", tags=["screens"])


@router.get("")
def list_screens(masjid_id: str = Depends(require_masjid_id), db: Session = Depends(get_db)):
    now = utcnow()
    return [screen_registry.screen_payload(screen, now) for screen in screen_registry.list_screens(db, masjid_id)]


@router.get("/{screen_id}")
def get_screen(screen_id: str, masjid_id: str = Depends(require_masjid_id), db: Session = Depends(get_db)):
    return screen_registry.screen_payload(screen_registry.get_screen(db, screen_id, masjid_id))


@router.put("/{screen_id}")
def update_screen(
    screen_id: str,
    payload: ScreenUpdateIn,
    masjid_id: str = Depends(require_masjid_id),
    db: Session = Depends(get_db),
):
    screen = screen_registry.update_screen(
        db,
        screen_id,
        masjid_id,
        name=payload.name,
        location=payload.location,
        orientation=payload.orientation,
    )
    return screen_registry.screen_payload(screen)


@router.post("/{screen_id}/assign-schedule")
def assign_schedule(
    screen_id: str,
    payload: AssignScheduleIn,
    masjid_id: str = Depends(require_masjid_id),
    db: Session = Depends(get_db),
):
    screen = screen_registry.assign_schedule(db, screen_id, masjid_id, payload.schedule_id)
    return screen_registry.screen_payload(screen)


@router.delete("/{screen_id}")
def delete_screen(screen_id: str, masjid_id: str = Depends(require_masjid_id), db: Session = Depends(get_db)):
    screen_registry.delete_screen(db, screen_id, masjid_id)
    return {"success": True}
