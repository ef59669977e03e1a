from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from masjid_screens.api.deps import require_masjid_id
from masjid_screens.db import get_db
from masjid_screens.schemas.screen import ClaimScreenIn, PairingCodeIn, UnpairedScreenIn
from masjid_screens.services import screen_registry
from masjid_screens.services.clock import iso_utc

router = APIRouter(prefix="/screens", tags=["pairing"])


@router.post("/unpaired")
def request_pairing_code(payload: UnpairedScreenIn | None = Body(None), db: Session = Depends(get_db)):
    payload = payload or UnpairedScreenIn()
    issued = screen_registry.request_pairing(db, device_type=payload.device_type, orientation=payload.orientation)
    return {
        "pairingCode": issued["pairing_code"],
        "expiresAt": iso_utc(issued["expires_at"]),
        "checkInterval": issued["check_interval_ms"],
    }


@router.post("/unpaired/check")
def check_pairing_status(payload: PairingCodeIn, db: Session = Depends(get_db)):
    result = screen_registry.check_pairing_status(db, payload.pairing_code)
    if not result["paired"]:
        return {"paired": False, "checkAgainIn": result["check_again_in_ms"]}
    return {"paired": True, "apiKey": result["api_key"], "masjidId": result["masjid_id"]}


@router.put("/pair")
def complete_pairing(payload: PairingCodeIn, db: Session = Depends(get_db)):
    result = screen_registry.complete_pairing(db, payload.pairing_code)
    return {"screenId": result["screen_id"], "apiKey": result["api_key"]}


@router.post("/pair")
def claim_screen(
    payload: ClaimScreenIn,
    masjid_id: str = Depends(require_masjid_id),
    db: Session = Depends(get_db),
):
    screen = screen_registry.claim_screen(
        db,
        payload.pairing_code,
        payload.name,
        masjid_id,
        location=payload.location,
    )
    return {"success": True, "screen": screen_registry.screen_payload(screen)}
