"""
Tests for the admin dashboard summary: screens, active schedules and alerts.
"""

from datetime import date, datetime, timedelta

import pytest

from masjid_screens.models.prayer_time import PrayerTime
from masjid_screens.services.content_items import create_content_item
from masjid_screens.services.dashboard import dashboard_summary, missing_prayer_dates
from masjid_screens.services.errors import NotFound
from masjid_screens.services.schedules import create_schedule


def _prayer_row(masjid_id, day):
    return PrayerTime(masjid_id=masjid_id, date=day, fajr="05:00", zuhr="13:00", asr="16:00", maghrib="19:00", isha="20:30")


def _seen(db_session, screen, at):
    screen.last_seen = at
    db_session.commit()
    db_session.refresh(screen)
    return screen


class TestOfflineScreens:

    def test_lists_only_stale_screens(self, db_session, masjid, pair_screen, now):
        fresh = _seen(db_session, pair_screen(masjid.id, "Main Hall", at=now), now - timedelta(minutes=1))
        stale = _seen(db_session, pair_screen(masjid.id, "Lobby", at=now), now - timedelta(minutes=10))

        alerts = dashboard_summary(db_session, masjid.id, now=now)["alerts"]

        assert alerts["offline_screens"] == [
            {"id": stale.id, "name": "Lobby", "last_seen": (now - timedelta(minutes=10)).isoformat()}
        ]
        assert fresh.id not in {entry["id"] for entry in alerts["offline_screens"]}

    def test_never_seen_screen_counts_as_offline(self, db_session, masjid, pair_screen, now):
        screen = pair_screen(masjid.id, "Gallery", at=now)
        screen.last_seen = None
        db_session.commit()

        alerts = dashboard_summary(db_session, masjid.id, now=now)["alerts"]

        assert alerts["offline_screens"] == [{"id": screen.id, "name": "Gallery", "last_seen": None}]

    def test_ignores_other_masjid_screens(self, db_session, masjid, other_masjid, pair_screen, now):
        _seen(db_session, pair_screen(other_masjid.id, "Elsewhere", at=now), now - timedelta(hours=1))

        summary = dashboard_summary(db_session, masjid.id, now=now)

        assert summary["screens"] == []
        assert summary["alerts"]["offline_screens"] == []


class TestMissingPrayerTimes:

    def test_reports_gaps_in_next_five_days(self, db_session, masjid, now):
        today = now.date()
        db_session.add_all([_prayer_row(masjid.id, today), _prayer_row(masjid.id, today + timedelta(days=2))])
        db_session.commit()

        assert missing_prayer_dates(db_session, masjid, now) == [
            (today + timedelta(days=offset)).isoformat() for offset in (1, 3, 4)
        ]

    def test_rows_outside_window_do_not_count(self, db_session, masjid, now):
        today = now.date()
        db_session.add_all([_prayer_row(masjid.id, today - timedelta(days=1)), _prayer_row(masjid.id, today + timedelta(days=5))])
        db_session.commit()

        assert len(missing_prayer_dates(db_session, masjid, now)) == 5

    def test_other_masjid_rows_do_not_count(self, db_session, masjid, other_masjid, now):
        db_session.add(_prayer_row(other_masjid.id, now.date()))
        db_session.commit()

        assert now.date().isoformat() in missing_prayer_dates(db_session, masjid, now)

    def test_window_starts_at_masjid_local_date(self, db_session, other_masjid):
        # 20:00 UTC is already the next day in Karachi (UTC+5).
        late_evening = datetime(2026, 3, 1, 20, 0)

        missing = missing_prayer_dates(db_session, other_masjid, late_evening)

        assert missing[0] == date(2026, 3, 2).isoformat()
        assert missing[-1] == date(2026, 3, 6).isoformat()


class TestDashboardSummary:

    def test_includes_only_active_schedules(self, db_session, masjid, now):
        item = create_content_item(db_session, masjid.id, "ANNOUNCEMENT", "Jumuah parking")
        create_schedule(db_session, masjid.id, "Main", content_item_ids=[item.id])
        create_schedule(db_session, masjid.id, "Ramadan", is_active=False)

        summary = dashboard_summary(db_session, masjid.id, now=now)

        assert [schedule["name"] for schedule in summary["content_schedules"]] == ["Main"]
        assert summary["content_schedules"][0]["items"][0]["content_item"]["title"] == "Jumuah parking"

    def test_screen_rows_carry_schedule_name(self, db_session, masjid, pair_screen, now):
        schedule = create_schedule(db_session, masjid.id, "Main")
        screen = pair_screen(masjid.id, "Main Hall", at=now)
        screen.schedule_id = schedule.id
        db_session.commit()

        rows = dashboard_summary(db_session, masjid.id, now=now)["screens"]

        assert rows[0]["name"] == "Main Hall"
        assert rows[0]["schedule_name"] == "Main"

    def test_unknown_masjid(self, db_session, now):
        with pytest.raises(NotFound):
            dashboard_summary(db_session, "missing", now=now)


class TestDashboardEndpoint:

    def test_requires_session(self, client):
        assert client.get("/dashboard").status_code == 401

    def test_scoped_to_session_masjid(self, client, db_session, masjid, other_masjid, admin_headers, pair_screen):
        pair_screen(masjid.id, "Main Hall")
        pair_screen(other_masjid.id, "Elsewhere")

        response = client.get("/dashboard", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert [row["name"] for row in body["screens"]] == ["Main Hall"]
        assert set(body["alerts"]) == {"missing_prayer_times", "offline_screens"}
        assert len(body["alerts"]["missing_prayer_times"]) == 5
