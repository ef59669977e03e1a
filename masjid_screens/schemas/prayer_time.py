from datetime import date

from pydantic import BaseModel


class PrayerTimeRowIn(BaseModel):
    date: date
    fajr: str
    fajr_jamaat: str | None = None
    sunrise: str | None = None
    zuhr: str
    zuhr_jamaat: str | None = None
    asr: str
    asr_jamaat: str | None = None
    maghrib: str
    maghrib_jamaat: str | None = None
    isha: str
    isha_jamaat: str | None = None
    jummah_khutbah: str | None = None
    jummah_jamaat: str | None = None


class PrayerTimeUpsertIn(BaseModel):
    rows: list[PrayerTimeRowIn]
    source: str | None = None
