from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from masjid_screens.api.deps import require_masjid_id
from masjid_screens.db import get_db
from masjid_screens.schemas.content import ContentItemIn, ContentItemUpdateIn
from masjid_screens.services import content_items
from masjid_screens.services.content_items import UNSET

router = APIRouter(prefix="/content", tags=["content"])


@router.get("")
def list_content(type: str | None = None, masjid_id: str = Depends(require_masjid_id), db: Session = Depends(get_db)):
    return [content_items.content_item_payload(item) for item in content_items.list_content_items(db, masjid_id, type)]


@router.post("", status_code=201)
def create_content(payload: ContentItemIn, masjid_id: str = Depends(require_masjid_id), db: Session = Depends(get_db)):
    item = content_items.create_content_item(
        db,
        masjid_id,
        payload.type,
        payload.title,
        content=payload.content,
        duration=payload.duration,
        is_active=payload.is_active,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    return content_items.content_item_payload(item)


@router.get("/{item_id}")
def get_content(item_id: str, masjid_id: str = Depends(require_masjid_id), db: Session = Depends(get_db)):
    return content_items.content_item_payload(content_items.get_content_item(db, item_id, masjid_id))


@router.put("/{item_id}")
def update_content(
    item_id: str,
    payload: ContentItemUpdateIn,
    masjid_id: str = Depends(require_masjid_id),
    db: Session = Depends(get_db),
):
    # Only fields present in the body are touched; an explicit null clears a date.
    provided = payload.model_fields_set
    item = content_items.update_content_item(
        db,
        item_id,
        masjid_id,
        title=payload.title,
        content=payload.content if "content" in provided else UNSET,
        duration=payload.duration,
        is_active=payload.is_active,
        start_date=payload.start_date if "start_date" in provided else UNSET,
        end_date=payload.end_date if "end_date" in provided else UNSET,
    )
    return content_items.content_item_payload(item)


@router.delete("/{item_id}")
def delete_content(item_id: str, masjid_id: str = Depends(require_masjid_id), db: Session = Depends(get_db)):
    content_items.delete_content_item(db, item_id, masjid_id)
    return {"success": True}
