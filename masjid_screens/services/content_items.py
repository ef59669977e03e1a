import logging
from datetime import datetime

from sqlalchemy.orm import Session

from masjid_screens.models.content import CONTENT_TYPES, ContentItem
from masjid_screens.models.content_schedule import ContentScheduleItem
from masjid_screens.services.clock import as_naive_utc
from masjid_screens.services.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

UNSET = object()


def _normalize_type(value: str | None) -> str:
    content_type = (value or "").strip().upper()
    if content_type not in CONTENT_TYPES:
        raise ValidationError(f"type must be one of {', '.join(sorted(CONTENT_TYPES))}")
    return content_type


def _validate_window(start_date: datetime | None, end_date: datetime | None) -> None:
    if start_date is not None and end_date is not None and start_date > end_date:
        raise ValidationError("start_date must not be after end_date")


def _validate_duration(duration: int) -> int:
    if duration <= 0:
        raise ValidationError("duration must be a positive number of seconds")
    return duration


def content_item_payload(item: ContentItem) -> dict:
    return {
        "id": str(item.id),
        "masjid_id": item.masjid_id,
        "type": item.type,
        "title": item.title,
        "content": item.content,
        "duration": item.duration,
        "is_active": bool(item.is_active),
        "start_date": item.start_date.isoformat() if item.start_date else None,
        "end_date": item.end_date.isoformat() if item.end_date else None,
        "created_at": item.created_at.isoformat() if item.created_at else None,
    }


def list_content_items(db: Session, masjid_id: str, content_type: str | None = None) -> list[ContentItem]:
    query = db.query(ContentItem).filter(ContentItem.masjid_id == masjid_id)
    if content_type:
        query = query.filter(ContentItem.type == _normalize_type(content_type))
    return query.order_by(ContentItem.created_at.desc()).all()


def get_content_item(db: Session, item_id: str, masjid_id: str) -> ContentItem:
    item = db.query(ContentItem).filter(ContentItem.id == item_id, ContentItem.masjid_id == masjid_id).first()
    if item is None:
        raise NotFound("Content item not found")
    return item


def create_content_item(
    db: Session,
    masjid_id: str,
    content_type: str,
    title: str,
    content: object = None,
    duration: int = 30,
    is_active: bool = True,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> ContentItem:
    if not (title or "").strip():
        raise ValidationError("title is required")
    start_date = as_naive_utc(start_date)
    end_date = as_naive_utc(end_date)
    _validate_window(start_date, end_date)
    item = ContentItem(
        masjid_id=masjid_id,
        type=_normalize_type(content_type),
        title=title.strip(),
        content=content,
        duration=_validate_duration(duration),
        is_active=is_active,
        start_date=start_date,
        end_date=end_date,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def update_content_item(
    db: Session,
    item_id: str,
    masjid_id: str,
    title: str | None = None,
    content: object = UNSET,
    duration: int | None = None,
    is_active: bool | None = None,
    start_date: datetime | None | object = UNSET,
    end_date: datetime | None | object = UNSET,
) -> ContentItem:
    item = get_content_item(db, item_id, masjid_id)
    if title is not None:
        if not title.strip():
            raise ValidationError("title cannot be empty")
        item.title = title.strip()
    if content is not UNSET:
        item.content = content
    if duration is not None:
        item.duration = _validate_duration(duration)
    if is_active is not None:
        item.is_active = is_active
    next_start = item.start_date if start_date is UNSET else as_naive_utc(start_date)
    next_end = item.end_date if end_date is UNSET else as_naive_utc(end_date)
    _validate_window(next_start, next_end)
    item.start_date = next_start
    item.end_date = next_end
    db.commit()
    db.refresh(item)
    return item


def delete_content_item(db: Session, item_id: str, masjid_id: str) -> None:
    item = get_content_item(db, item_id, masjid_id)
    affected_schedule_ids = {
        row[0]
        for row in db.query(ContentScheduleItem.schedule_id)
        .filter(ContentScheduleItem.content_item_id == item.id)
        .all()
    }
    removed = (
        db.query(ContentScheduleItem)
        .filter(ContentScheduleItem.content_item_id == item.id)
        .delete(synchronize_session=False)
    )
    # Keep `order` dense in every schedule that lost an entry.
    for schedule_id in affected_schedule_ids:
        entries = (
            db.query(ContentScheduleItem)
            .filter(ContentScheduleItem.schedule_id == schedule_id)
            .order_by(ContentScheduleItem.order.asc(), ContentScheduleItem.id.asc())
            .all()
        )
        for index, entry in enumerate(entries):
            entry.order = index
    db.delete(item)
    db.commit()
    logger.info("Deleted content item %s (%s schedule entries removed)", item_id, removed)
