"""Work out what a paired screen should display right now.

The snapshot is assembled from three independent reads (schedule items,
today's prayer times, per-screen overrides). They are not wrapped in one
transaction, so an admin edit landing between them can show up in one
part of the response and not yet in another. Screens poll continuously
and converge on the next request.
"""

import logging
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.orm import Session

from masjid_screens.models.content import ContentItem
from masjid_screens.models.content_schedule import ContentSchedule, ContentScheduleItem
from masjid_screens.models.masjid import Masjid
from masjid_screens.models.prayer_time import PRAYER_TIME_FIELDS, PrayerTime
from masjid_screens.models.screen import Screen, ScreenContentOverride
from masjid_screens.services.clock import iso_utc, utcnow
from masjid_screens.services.errors import NotAssociated, NotFound

logger = logging.getLogger(__name__)


def _iso(value: datetime | date | None) -> str | None:
    if isinstance(value, datetime):
        return iso_utc(value)
    return value.isoformat() if value else None


def is_item_eligible(item: ContentItem, now: datetime) -> bool:
    if not item.is_active:
        return False
    if item.start_date is not None and item.start_date > now:
        return False
    if item.end_date is not None and item.end_date < now:
        return False
    return True


def masjid_today(masjid: Masjid, now: datetime) -> date:
    try:
        tz = ZoneInfo(masjid.timezone) if masjid.timezone else None
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r for masjid %s, using UTC", masjid.timezone, masjid.id)
        tz = None
    if tz is None:
        return now.date()
    return now.replace(tzinfo=ZoneInfo("UTC")).astimezone(tz).date()


def resolve_effective_schedule(db: Session, screen: Screen) -> ContentSchedule | None:
    if screen.schedule_id:
        explicit = (
            db.query(ContentSchedule)
            .filter(
                ContentSchedule.id == screen.schedule_id,
                ContentSchedule.masjid_id == screen.masjid_id,
                ContentSchedule.is_active.is_(True),
            )
            .first()
        )
        if explicit is not None:
            return explicit
    return (
        db.query(ContentSchedule)
        .filter(ContentSchedule.masjid_id == screen.masjid_id, ContentSchedule.is_default.is_(True))
        .first()
    )


def load_schedule_items(db: Session, schedule: ContentSchedule) -> list[tuple[ContentScheduleItem, ContentItem]]:
    return (
        db.query(ContentScheduleItem, ContentItem)
        .join(ContentItem, ContentItem.id == ContentScheduleItem.content_item_id)
        .filter(
            ContentScheduleItem.schedule_id == schedule.id,
            ContentItem.masjid_id == schedule.masjid_id,
        )
        .order_by(ContentScheduleItem.order.asc(), ContentScheduleItem.id.asc())
        .all()
    )


def content_item_wire(item: ContentItem) -> dict:
    return {
        "id": str(item.id),
        "type": item.type,
        "title": item.title,
        "content": item.content,
        "duration": item.duration,
        "isActive": bool(item.is_active),
        "startDate": _iso(item.start_date),
        "endDate": _iso(item.end_date),
    }


def prayer_time_wire(row: PrayerTime | None) -> dict | None:
    if row is None:
        return None
    payload = {"id": str(row.id), "date": _iso(row.date)}
    for field in PRAYER_TIME_FIELDS:
        head, *rest = field.split("_")
        payload[head + "".join(part.capitalize() for part in rest)] = getattr(row, field)
    return payload


def today_prayer_time(db: Session, masjid: Masjid, now: datetime) -> PrayerTime | None:
    today = masjid_today(masjid, now)
    return (
        db.query(PrayerTime)
        .filter(
            PrayerTime.masjid_id == masjid.id,
            PrayerTime.date >= today,
            PrayerTime.date < today + timedelta(days=1),
        )
        .order_by(PrayerTime.date.asc())
        .first()
    )


def resolve_screen_content(db: Session, screen_id: str, now: datetime | None = None) -> dict:
    current_time = now or utcnow()
    screen = db.query(Screen).get(screen_id)
    if screen is None:
        raise NotFound("Screen not found")
    if not screen.masjid_id:
        raise NotAssociated()
    masjid = db.query(Masjid).get(screen.masjid_id)
    if masjid is None:
        raise NotAssociated()

    schedule_payload = None
    schedule = resolve_effective_schedule(db, screen)
    if schedule is not None:
        items = []
        for entry, content_item in load_schedule_items(db, schedule):
            if not is_item_eligible(content_item, current_time):
                continue
            items.append(
                {
                    "id": entry.id,
                    "order": entry.order,
                    "contentItemId": str(content_item.id),
                    "contentItem": content_item_wire(content_item),
                }
            )
        schedule_payload = {
            "id": str(schedule.id),
            "name": schedule.name,
            "description": schedule.description,
            "isDefault": bool(schedule.is_default),
            "isActive": bool(schedule.is_active),
            "items": items,
        }

    overrides = (
        db.query(ScreenContentOverride)
        .filter(ScreenContentOverride.screen_id == screen.id)
        .order_by(ScreenContentOverride.created_at.asc())
        .all()
    )

    return {
        "screen": {
            "id": str(screen.id),
            "name": screen.name,
            "orientation": screen.orientation,
            "contentConfig": screen.content_config,
        },
        "masjid": {"name": masjid.name, "timezone": masjid.timezone},
        "schedule": schedule_payload,
        "prayerTimes": prayer_time_wire(today_prayer_time(db, masjid, current_time)),
        "contentOverrides": [
            {"id": str(row.id), "contentType": row.content_type, "payload": row.payload} for row in overrides
        ],
        "lastUpdated": iso_utc(current_time),
    }
