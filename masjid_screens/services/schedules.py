import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from masjid_screens.models.content import ContentItem
from masjid_screens.models.content_schedule import ContentSchedule, ContentScheduleItem
from masjid_screens.models.screen import Screen
from masjid_screens.services.errors import Conflict, NotFound, ValidationError

logger = logging.getLogger(__name__)


def _schedule_items(db: Session, schedule_id: str) -> list[tuple[ContentScheduleItem, ContentItem]]:
    return (
        db.query(ContentScheduleItem, ContentItem)
        .join(ContentItem, ContentItem.id == ContentScheduleItem.content_item_id)
        .filter(ContentScheduleItem.schedule_id == schedule_id)
        .order_by(ContentScheduleItem.order.asc(), ContentScheduleItem.id.asc())
        .all()
    )


def schedule_payload(db: Session, schedule: ContentSchedule) -> dict:
    return {
        "id": str(schedule.id),
        "masjid_id": schedule.masjid_id,
        "name": schedule.name,
        "description": schedule.description,
        "is_default": bool(schedule.is_default),
        "is_active": bool(schedule.is_active),
        "items": [
            {
                "id": entry.id,
                "order": entry.order,
                "content_item_id": str(item.id),
                "content_item": {
                    "id": str(item.id),
                    "type": item.type,
                    "title": item.title,
                    "duration": item.duration,
                    "is_active": bool(item.is_active),
                },
            }
            for entry, item in _schedule_items(db, str(schedule.id))
        ],
        "created_at": schedule.created_at.isoformat() if schedule.created_at else None,
        "updated_at": schedule.updated_at.isoformat() if schedule.updated_at else None,
    }


def get_schedule(db: Session, schedule_id: str, masjid_id: str) -> ContentSchedule:
    schedule = (
        db.query(ContentSchedule)
        .filter(ContentSchedule.id == schedule_id, ContentSchedule.masjid_id == masjid_id)
        .first()
    )
    if schedule is None:
        raise NotFound("Schedule not found")
    return schedule


def list_schedules(db: Session, masjid_id: str) -> list[ContentSchedule]:
    return (
        db.query(ContentSchedule)
        .filter(ContentSchedule.masjid_id == masjid_id)
        .order_by(ContentSchedule.created_at.asc())
        .all()
    )


def _validate_content_item_ids(db: Session, masjid_id: str, content_item_ids: list[str]) -> list[str]:
    normalized = [str(value or "").strip() for value in content_item_ids]
    if any(not value for value in normalized):
        raise ValidationError("content_item_ids must not contain empty values")
    if not normalized:
        return []
    found = {
        row[0]
        for row in db.query(ContentItem.id)
        .filter(ContentItem.id.in_(sorted(set(normalized))), ContentItem.masjid_id == masjid_id)
        .all()
    }
    missing = sorted(set(normalized) - found)
    if missing:
        raise NotFound(f"Unknown content item: {', '.join(missing)}")
    return normalized


def _replace_items(db: Session, schedule_id: str, content_item_ids: list[str]) -> None:
    db.query(ContentScheduleItem).filter(ContentScheduleItem.schedule_id == schedule_id).delete(
        synchronize_session=False
    )
    for index, content_item_id in enumerate(content_item_ids):
        db.add(ContentScheduleItem(schedule_id=schedule_id, content_item_id=content_item_id, order=index))


def _commit_default_change(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("Cannot have multiple default schedules") from exc


def create_schedule(
    db: Session,
    masjid_id: str,
    name: str,
    description: str | None = None,
    is_active: bool = True,
    content_item_ids: list[str] | None = None,
) -> ContentSchedule:
    schedule_name = (name or "").strip()
    if not schedule_name:
        raise ValidationError("Name is required")
    item_ids = _validate_content_item_ids(db, masjid_id, content_item_ids or [])
    is_first = db.query(ContentSchedule.id).filter(ContentSchedule.masjid_id == masjid_id).first() is None

    schedule = ContentSchedule(
        masjid_id=masjid_id,
        name=schedule_name,
        description=(description or "").strip() or None,
        is_active=True if is_first else is_active,
        is_default=is_first,
    )
    db.add(schedule)
    db.flush()
    _replace_items(db, str(schedule.id), item_ids)
    _commit_default_change(db)
    db.refresh(schedule)
    logger.info("Created schedule %s for masjid %s (default=%s)", schedule.id, masjid_id, schedule.is_default)
    return schedule


def update_schedule(
    db: Session,
    schedule_id: str,
    masjid_id: str,
    name: str | None = None,
    description: str | None = None,
    is_active: bool | None = None,
    content_item_ids: list[str] | None = None,
) -> ContentSchedule:
    schedule = get_schedule(db, schedule_id, masjid_id)
    if schedule.is_default and is_active is False:
        raise Conflict("Cannot deactivate default schedule")
    if name is not None:
        if not name.strip():
            raise ValidationError("Name cannot be empty")
        schedule.name = name.strip()
    if description is not None:
        schedule.description = description.strip() or None
    if is_active is not None:
        schedule.is_active = is_active
    if content_item_ids is not None:
        _replace_items(db, str(schedule.id), _validate_content_item_ids(db, masjid_id, content_item_ids))
    db.commit()
    db.refresh(schedule)
    return schedule


def toggle_active(db: Session, schedule_id: str, masjid_id: str, is_active: bool) -> ContentSchedule:
    schedule = get_schedule(db, schedule_id, masjid_id)
    if schedule.is_default and not is_active:
        raise Conflict("Cannot deactivate default schedule")
    schedule.is_active = is_active
    db.commit()
    db.refresh(schedule)
    return schedule


def set_default(db: Session, schedule_id: str, masjid_id: str) -> ContentSchedule:
    schedule = get_schedule(db, schedule_id, masjid_id)
    if schedule.is_default:
        return schedule
    (
        db.query(ContentSchedule)
        .filter(
            ContentSchedule.masjid_id == masjid_id,
            ContentSchedule.is_default.is_(True),
            ContentSchedule.id != schedule.id,
        )
        .update({ContentSchedule.is_default: False}, synchronize_session=False)
    )
    # The old default must be cleared in the database before the partial
    # unique index sees the new one.
    db.flush()
    schedule.is_default = True
    schedule.is_active = True
    _commit_default_change(db)
    db.refresh(schedule)
    logger.info("Schedule %s is now the default for masjid %s", schedule.id, masjid_id)
    return schedule


def duplicate_schedule(db: Session, source_schedule_id: str, masjid_id: str, name: str) -> ContentSchedule:
    try:
        source = get_schedule(db, source_schedule_id, masjid_id)
    except NotFound as exc:
        raise NotFound("Source schedule not found") from exc
    copy_name = (name or "").strip()
    if not copy_name:
        raise ValidationError("Name is required")

    duplicate = ContentSchedule(
        masjid_id=masjid_id,
        name=copy_name,
        description=source.description,
        is_active=True,
        is_default=False,
    )
    db.add(duplicate)
    db.flush()
    source_items = (
        db.query(ContentScheduleItem)
        .filter(ContentScheduleItem.schedule_id == source.id)
        .order_by(ContentScheduleItem.order.asc(), ContentScheduleItem.id.asc())
        .all()
    )
    for entry in source_items:
        db.add(ContentScheduleItem(schedule_id=duplicate.id, content_item_id=entry.content_item_id, order=entry.order))
    db.commit()
    db.refresh(duplicate)
    return duplicate


def delete_schedule(db: Session, schedule_id: str, masjid_id: str) -> None:
    schedule = get_schedule(db, schedule_id, masjid_id)
    remaining = db.query(ContentSchedule.id).filter(ContentSchedule.masjid_id == masjid_id).count()
    if remaining <= 1:
        raise Conflict("Cannot delete the last schedule")
    if schedule.is_default:
        raise Conflict("Cannot delete the default schedule")

    db.query(Screen).filter(Screen.schedule_id == schedule.id).update(
        {Screen.schedule_id: None}, synchronize_session=False
    )
    db.query(ContentScheduleItem).filter(ContentScheduleItem.schedule_id == schedule.id).delete(
        synchronize_session=False
    )
    db.delete(schedule)
    db.commit()
    logger.info("Deleted schedule %s from masjid %s", schedule_id, masjid_id)
