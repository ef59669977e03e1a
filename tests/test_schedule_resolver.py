"""
Tests for resolving what a paired screen displays.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from masjid_screens.models.content import ContentItem
from masjid_screens.models.content_schedule import ContentScheduleItem
from masjid_screens.models.prayer_time import PrayerTime
from masjid_screens.models.screen import Screen, ScreenContentOverride
from masjid_screens.services import screen_registry
from masjid_screens.services.content_items import create_content_item
from masjid_screens.services.errors import NotAssociated, NotFound
from masjid_screens.services.schedule_resolver import (
    is_item_eligible,
    masjid_today,
    resolve_screen_content,
)
from masjid_screens.services.schedules import create_schedule, toggle_active


def _titles(snapshot):
    return [entry["contentItem"]["title"] for entry in snapshot["schedule"]["items"]]


def _prayer_row(masjid_id, day):
    return PrayerTime(
        masjid_id=masjid_id,
        date=day,
        fajr="05:00",
        sunrise="06:30",
        zuhr="13:00",
        zuhr_jamaat="13:30",
        asr="16:00",
        maghrib="19:00",
        isha="20:30",
        jummah_khutbah="13:00",
    )


@pytest.fixture
def items(db_session, masjid):
    hadith = create_content_item(db_session, masjid.id, "VERSE_HADITH", "Hadith")
    announcement = create_content_item(db_session, masjid.id, "ANNOUNCEMENT", "Announcement")
    event = create_content_item(db_session, masjid.id, "EVENT", "Event")
    return hadith, announcement, event


# =============================================================================
# Item eligibility
# =============================================================================


class TestEligibility:

    def test_window_bounds_are_inclusive(self, now):
        assert is_item_eligible(_item(start_date=now, end_date=now), now)
        assert is_item_eligible(_item(), now)

    def test_outside_window(self, now):
        assert not is_item_eligible(_item(end_date=now - timedelta(seconds=1)), now)
        assert not is_item_eligible(_item(start_date=now + timedelta(seconds=1)), now)

    def test_inactive_item(self, now):
        assert not is_item_eligible(_item(is_active=False), now)


def _item(is_active=True, start_date=None, end_date=None):
    return ContentItem(type="CUSTOM", title="x", is_active=is_active, start_date=start_date, end_date=end_date)


# =============================================================================
# Snapshot assembly
# =============================================================================


class TestResolveScreenContent:

    def test_items_follow_order_field(self, db_session, masjid, items, pair_screen, now):
        hadith, announcement, event = items
        schedule = create_schedule(db_session, masjid.id, "Main", content_item_ids=[hadith.id, announcement.id, event.id])
        orders = {hadith.id: 2, announcement.id: 0, event.id: 1}
        for entry in db_session.query(ContentScheduleItem).filter(ContentScheduleItem.schedule_id == schedule.id):
            entry.order = orders[entry.content_item_id]
        db_session.commit()
        screen = pair_screen(masjid.id)

        snapshot = resolve_screen_content(db_session, screen.id, now=now)

        assert _titles(snapshot) == ["Announcement", "Event", "Hadith"]
        assert [entry["order"] for entry in snapshot["schedule"]["items"]] == [0, 1, 2]

    def test_equal_order_keeps_insertion_order(self, db_session, masjid, items, pair_screen, now):
        hadith, announcement, event = items
        schedule = create_schedule(db_session, masjid.id, "Main", content_item_ids=[event.id, hadith.id, announcement.id])
        db_session.query(ContentScheduleItem).filter(ContentScheduleItem.schedule_id == schedule.id).update(
            {ContentScheduleItem.order: 0}, synchronize_session=False
        )
        db_session.commit()
        screen = pair_screen(masjid.id)

        assert _titles(resolve_screen_content(db_session, screen.id, now=now)) == ["Event", "Hadith", "Announcement"]

    def test_ineligible_items_are_filtered(self, db_session, masjid, pair_screen, now):
        expired = create_content_item(
            db_session, masjid.id, "ANNOUNCEMENT", "Expired", end_date=now - timedelta(days=1)
        )
        upcoming = create_content_item(
            db_session, masjid.id, "EVENT", "Upcoming", start_date=now + timedelta(days=1)
        )
        hidden = create_content_item(db_session, masjid.id, "CUSTOM", "Hidden", is_active=False)
        current = create_content_item(
            db_session,
            masjid.id,
            "ANNOUNCEMENT",
            "Current",
            start_date=now - timedelta(days=1),
            end_date=now + timedelta(days=1),
        )
        create_schedule(
            db_session, masjid.id, "Main", content_item_ids=[expired.id, upcoming.id, hidden.id, current.id]
        )
        screen = pair_screen(masjid.id)

        assert _titles(resolve_screen_content(db_session, screen.id, now=now)) == ["Current"]

    def test_wire_shape(self, db_session, masjid, items, pair_screen, now):
        hadith, _, _ = items
        create_schedule(db_session, masjid.id, "Main", description="Everyday", content_item_ids=[hadith.id])
        screen = pair_screen(masjid.id, name="Lobby")

        snapshot = resolve_screen_content(db_session, screen.id, now=now)

        assert set(snapshot) == {"screen", "masjid", "schedule", "prayerTimes", "contentOverrides", "lastUpdated"}
        assert snapshot["screen"] == {
            "id": screen.id,
            "name": "Lobby",
            "orientation": "LANDSCAPE",
            "contentConfig": None,
        }
        assert snapshot["masjid"] == {"name": "Central Mosque", "timezone": "UTC"}
        assert snapshot["schedule"]["name"] == "Main"
        assert snapshot["schedule"]["description"] == "Everyday"
        assert snapshot["schedule"]["isDefault"] is True
        entry = snapshot["schedule"]["items"][0]
        assert entry["contentItemId"] == hadith.id
        assert entry["contentItem"]["type"] == "VERSE_HADITH"
        assert entry["contentItem"]["duration"] == 30
        assert entry["contentItem"]["isActive"] is True
        assert snapshot["lastUpdated"] == now.replace(tzinfo=timezone.utc).isoformat()
        assert datetime.fromisoformat(snapshot["lastUpdated"]).utcoffset() == timedelta(0)

    def test_item_dates_carry_utc_offset(self, db_session, masjid, pair_screen, now):
        start = datetime(2026, 1, 1, 9, 0)
        item = create_content_item(db_session, masjid.id, "EVENT", "Lecture", start_date=start)
        create_schedule(db_session, masjid.id, "Main", content_item_ids=[item.id])
        screen = pair_screen(masjid.id)

        wire = resolve_screen_content(db_session, screen.id, now=now)["schedule"]["items"][0]["contentItem"]

        assert wire["startDate"] == "2026-01-01T09:00:00+00:00"
        assert wire["endDate"] is None

    def test_no_schedule_resolves_to_none(self, db_session, masjid, pair_screen, now):
        screen = pair_screen(masjid.id)
        snapshot = resolve_screen_content(db_session, screen.id, now=now)
        assert snapshot["schedule"] is None
        assert snapshot["prayerTimes"] is None
        assert snapshot["contentOverrides"] == []

    def test_explicit_schedule_wins_over_default(self, db_session, masjid, items, pair_screen, now):
        hadith, announcement, _ = items
        create_schedule(db_session, masjid.id, "Default", content_item_ids=[hadith.id])
        friday = create_schedule(db_session, masjid.id, "Friday", content_item_ids=[announcement.id])
        screen = pair_screen(masjid.id)
        screen_registry.assign_schedule(db_session, screen.id, masjid.id, friday.id)

        snapshot = resolve_screen_content(db_session, screen.id, now=now)
        assert snapshot["schedule"]["name"] == "Friday"
        assert _titles(snapshot) == ["Announcement"]

    def test_inactive_explicit_schedule_falls_back_to_default(self, db_session, masjid, items, pair_screen, now):
        hadith, announcement, _ = items
        create_schedule(db_session, masjid.id, "Default", content_item_ids=[hadith.id])
        friday = create_schedule(db_session, masjid.id, "Friday", content_item_ids=[announcement.id])
        screen = pair_screen(masjid.id)
        screen_registry.assign_schedule(db_session, screen.id, masjid.id, friday.id)
        toggle_active(db_session, friday.id, masjid.id, False)

        assert resolve_screen_content(db_session, screen.id, now=now)["schedule"]["name"] == "Default"

    def test_schedule_of_other_masjid_is_never_used(self, db_session, masjid, other_masjid, pair_screen, now):
        foreign_item = create_content_item(db_session, other_masjid.id, "ANNOUNCEMENT", "Foreign")
        foreign = create_schedule(db_session, other_masjid.id, "Theirs", content_item_ids=[foreign_item.id])
        screen = pair_screen(masjid.id)
        screen.schedule_id = foreign.id
        db_session.commit()

        assert resolve_screen_content(db_session, screen.id, now=now)["schedule"] is None

    def test_overrides_are_included(self, db_session, masjid, pair_screen, now):
        screen = pair_screen(masjid.id)
        db_session.add(
            ScreenContentOverride(screen_id=screen.id, content_type="ANNOUNCEMENT", payload={"message": "Eid"})
        )
        db_session.commit()

        overrides = resolve_screen_content(db_session, screen.id, now=now)["contentOverrides"]
        assert len(overrides) == 1
        assert overrides[0]["contentType"] == "ANNOUNCEMENT"
        assert overrides[0]["payload"] == {"message": "Eid"}

    def test_unknown_screen(self, db_session, now):
        with pytest.raises(NotFound):
            resolve_screen_content(db_session, "missing", now=now)

    def test_screen_without_masjid(self, db_session, now):
        code = screen_registry.request_pairing(db_session, now=now)["pairing_code"]
        pending = db_session.query(Screen).filter(Screen.pairing_code == code).one()
        with pytest.raises(NotAssociated):
            resolve_screen_content(db_session, pending.id, now=now)


# =============================================================================
# Prayer times
# =============================================================================


class TestPrayerTimes:

    def test_todays_row_is_returned(self, db_session, masjid, pair_screen, now):
        db_session.add(_prayer_row(masjid.id, now.date() - timedelta(days=1)))
        db_session.add(_prayer_row(masjid.id, now.date()))
        db_session.commit()
        screen = pair_screen(masjid.id)

        prayer_times = resolve_screen_content(db_session, screen.id, now=now)["prayerTimes"]

        assert prayer_times["date"] == now.date().isoformat()
        assert prayer_times["fajr"] == "05:00"
        assert prayer_times["zuhrJamaat"] == "13:30"
        assert prayer_times["jummahKhutbah"] == "13:00"
        assert prayer_times["ishaJamaat"] is None

    def test_missing_today_is_null(self, db_session, masjid, pair_screen, now):
        db_session.add(_prayer_row(masjid.id, now.date() + timedelta(days=1)))
        db_session.commit()
        screen = pair_screen(masjid.id)

        assert resolve_screen_content(db_session, screen.id, now=now)["prayerTimes"] is None

    def test_today_follows_masjid_timezone(self, other_masjid):
        late_evening_utc = datetime(2026, 3, 10, 20, 30)
        assert masjid_today(other_masjid, late_evening_utc) == date(2026, 3, 11)

    def test_unknown_timezone_falls_back_to_utc(self, masjid):
        masjid.timezone = "Mars/Olympus_Mons"
        assert masjid_today(masjid, datetime(2026, 3, 10, 23, 59)) == date(2026, 3, 10)
