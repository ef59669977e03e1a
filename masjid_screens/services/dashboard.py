from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from masjid_screens.models.content_schedule import ContentSchedule
from masjid_screens.models.masjid import Masjid
from masjid_screens.models.prayer_time import PrayerTime
from masjid_screens.models.screen import STATUS_OFFLINE
from masjid_screens.services.clock import utcnow
from masjid_screens.services.errors import NotFound
from masjid_screens.services.schedule_resolver import masjid_today
from masjid_screens.services.schedules import schedule_payload
from masjid_screens.services.screen_registry import derive_liveness, list_screens, screen_payload

PRAYER_TIME_LOOKAHEAD_DAYS = 5


def missing_prayer_dates(db: Session, masjid: Masjid, now: datetime) -> list[str]:
    """Dates from today (masjid local) over the lookahead window with no prayer time row."""
    today = masjid_today(masjid, now)
    window_end = today + timedelta(days=PRAYER_TIME_LOOKAHEAD_DAYS)
    present = {
        row[0]
        for row in db.query(PrayerTime.date)
        .filter(PrayerTime.masjid_id == masjid.id, PrayerTime.date >= today, PrayerTime.date < window_end)
        .all()
    }
    days = (today + timedelta(days=offset) for offset in range(PRAYER_TIME_LOOKAHEAD_DAYS))
    return [day.isoformat() for day in days if day not in present]


def dashboard_summary(db: Session, masjid_id: str, now: datetime | None = None) -> dict:
    current_time = now or utcnow()
    masjid = db.query(Masjid).get(masjid_id)
    if masjid is None:
        raise NotFound("Masjid not found")

    screens = list_screens(db, masjid_id)
    schedule_names = {
        str(row.id): row.name
        for row in db.query(ContentSchedule).filter(ContentSchedule.masjid_id == masjid_id).all()
    }
    screen_rows = []
    for screen in screens:
        payload = screen_payload(screen, current_time)
        payload["schedule_name"] = schedule_names.get(screen.schedule_id) if screen.schedule_id else None
        screen_rows.append(payload)

    active_schedules = (
        db.query(ContentSchedule)
        .filter(ContentSchedule.masjid_id == masjid_id, ContentSchedule.is_active.is_(True))
        .order_by(ContentSchedule.created_at.asc())
        .all()
    )

    return {
        "screens": screen_rows,
        "content_schedules": [schedule_payload(db, schedule) for schedule in active_schedules],
        "alerts": {
            "missing_prayer_times": missing_prayer_dates(db, masjid, current_time),
            "offline_screens": [
                {
                    "id": str(screen.id),
                    "name": screen.name,
                    "last_seen": screen.last_seen.isoformat() if screen.last_seen else None,
                }
                for screen in screens
                if derive_liveness(screen, current_time) == STATUS_OFFLINE
            ],
        },
    }
