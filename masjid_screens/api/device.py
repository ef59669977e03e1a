from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from masjid_screens.api.deps import require_device
from masjid_screens.db import get_db
from masjid_screens.models.screen import Screen
from masjid_screens.schemas.screen import HeartbeatIn
from masjid_screens.services import screen_registry
from masjid_screens.services.schedule_resolver import resolve_screen_content

router = APIRouter(prefix="/screen", tags=["device"])


@router.get("/content")
def screen_content(screen: Screen = Depends(require_device), db: Session = Depends(get_db)):
    return resolve_screen_content(db, str(screen.id))


@router.post("/heartbeat")
def heartbeat(
    payload: HeartbeatIn | None = Body(None),
    screen: Screen = Depends(require_device),
    db: Session = Depends(get_db),
):
    payload = payload or HeartbeatIn()
    screen_registry.record_heartbeat(db, str(screen.id), status=payload.status, metrics=payload.metrics)
    return {"success": True}
