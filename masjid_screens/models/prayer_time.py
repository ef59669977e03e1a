import uuid
from masjid_screens.services.clock import utcnow
from sqlalchemy import Column, Date, DateTime, ForeignKey, String, UniqueConstraint
from masjid_screens.db import Base

PRAYER_TIME_FIELDS = (
    "fajr",
    "fajr_jamaat",
    "sunrise",
    "zuhr",
    "zuhr_jamaat",
    "asr",
    "asr_jamaat",
    "maghrib",
    "maghrib_jamaat",
    "isha",
    "isha_jamaat",
    "jummah_khutbah",
    "jummah_jamaat",
)


class PrayerTime(Base):
    __tablename__ = "prayer_time"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    masjid_id = Column(String(36), ForeignKey("masjid.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    fajr = Column(String(5), nullable=False)
    fajr_jamaat = Column(String(5), nullable=True)
    sunrise = Column(String(5), nullable=True)
    zuhr = Column(String(5), nullable=False)
    zuhr_jamaat = Column(String(5), nullable=True)
    asr = Column(String(5), nullable=False)
    asr_jamaat = Column(String(5), nullable=True)
    maghrib = Column(String(5), nullable=False)
    maghrib_jamaat = Column(String(5), nullable=True)
    isha = Column(String(5), nullable=False)
    isha_jamaat = Column(String(5), nullable=True)
    jummah_khutbah = Column(String(5), nullable=True)
    jummah_jamaat = Column(String(5), nullable=True)
    source = Column(String, nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (UniqueConstraint("masjid_id", "date", name="ux_prayer_time_masjid_date"),)
