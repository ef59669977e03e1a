from datetime import date

from sqlalchemy.orm import Session

from masjid_screens.models.prayer_time import PRAYER_TIME_FIELDS, PrayerTime
from masjid_screens.services.errors import ValidationError

REQUIRED_FIELDS = ("fajr", "zuhr", "asr", "maghrib", "isha")


def _normalize_hhmm(field: str, value: str | None) -> str | None:
    raw = (value or "").strip()
    if not raw:
        return None
    parts = raw.split(":")
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        raise ValidationError(f"{field} must use HH:MM")
    hour, minute = int(parts[0]), int(parts[1])
    if hour > 23 or minute > 59:
        raise ValidationError(f"{field} must use HH:MM")
    return f"{hour:02d}:{minute:02d}"


def prayer_time_payload(row: PrayerTime) -> dict:
    payload = {"id": str(row.id), "masjid_id": row.masjid_id, "date": row.date.isoformat(), "source": row.source}
    for field in PRAYER_TIME_FIELDS:
        payload[field] = getattr(row, field)
    return payload


def list_prayer_times(
    db: Session,
    masjid_id: str,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[PrayerTime]:
    query = db.query(PrayerTime).filter(PrayerTime.masjid_id == masjid_id)
    if date_from is not None:
        query = query.filter(PrayerTime.date >= date_from)
    if date_to is not None:
        query = query.filter(PrayerTime.date <= date_to)
    return query.order_by(PrayerTime.date.asc()).all()


def upsert_prayer_times(db: Session, masjid_id: str, rows: list[dict], source: str | None = None) -> list[PrayerTime]:
    """Replace the prayer times for every date present in ``rows``."""
    if not rows:
        raise ValidationError("At least one prayer time row is required")

    by_date: dict[date, dict] = {}
    for index, row in enumerate(rows):
        day = row.get("date")
        if not isinstance(day, date):
            raise ValidationError(f"rows[{index}].date is required")
        values = {field: _normalize_hhmm(field, row.get(field)) for field in PRAYER_TIME_FIELDS}
        missing = [field for field in REQUIRED_FIELDS if not values[field]]
        if missing:
            raise ValidationError(f"rows[{index}] is missing {', '.join(missing)}")
        by_date[day] = values

    db.query(PrayerTime).filter(
        PrayerTime.masjid_id == masjid_id,
        PrayerTime.date.in_(sorted(by_date)),
    ).delete(synchronize_session=False)
    created = []
    for day in sorted(by_date):
        record = PrayerTime(masjid_id=masjid_id, date=day, source=(source or "").strip() or None, **by_date[day])
        db.add(record)
        created.append(record)
    db.commit()
    for record in created:
        db.refresh(record)
    return created
