from datetime import timedelta

from sqlalchemy.orm import Session

from masjid_screens.db import SessionLocal, init_db
from masjid_screens.models.masjid import Masjid
from masjid_screens.models.prayer_time import PrayerTime
from masjid_screens.models.user import ROLE_ADMIN, User
from masjid_screens.services.auth import issue_session
from masjid_screens.services.clock import utcnow
from masjid_screens.services.content_items import create_content_item
from masjid_screens.services.schedules import create_schedule


def seed() -> str:
    init_db()
    db: Session = SessionLocal()
    try:
        masjid = Masjid(
            name="Central Mosque",
            latitude=51.5074,
            longitude=-0.1278,
            timezone="Europe/London",
            calculation_method="MWL",
            madhab="Hanafi",
        )
        db.add(masjid)
        db.commit()
        db.refresh(masjid)

        admin = User(email="admin@example.com", name="Admin User", role=ROLE_ADMIN, masjid_id=masjid.id)
        db.add(admin)
        db.commit()
        db.refresh(admin)

        now = utcnow()
        hadith = create_content_item(
            db,
            masjid.id,
            "VERSE_HADITH",
            "Intentions",
            content={"arabicText": "إِنَّمَا الْأَعْمَالُ بِالنِّيَّاتِ", "englishText": "Actions are but by intentions"},
            duration=30,
        )
        announcement = create_content_item(
            db,
            masjid.id,
            "ANNOUNCEMENT",
            "Welcome",
            content={"message": "Welcome to our new digital display system!"},
            duration=20,
            start_date=now,
            end_date=now + timedelta(days=7),
        )
        create_schedule(db, masjid.id, "Main Hall", content_item_ids=[announcement.id, hadith.id])

        db.add(
            PrayerTime(
                masjid_id=masjid.id,
                date=now.date(),
                fajr="05:00",
                fajr_jamaat="05:30",
                sunrise="06:30",
                zuhr="13:00",
                zuhr_jamaat="13:30",
                asr="16:00",
                asr_jamaat="16:30",
                maghrib="19:00",
                maghrib_jamaat="19:15",
                isha="20:30",
                isha_jamaat="21:00",
                jummah_khutbah="13:00",
                jummah_jamaat="13:30",
                source="SEED",
            )
        )
        db.commit()

        return issue_session(db, admin, hours=24 * 30).token
    finally:
        db.close()


if __name__ == "__main__":
    token = seed()
    print("Seed data created.")
    print(f"Admin session token: {token}")
