"""Shortlist retrieval: upcoming/past classification, filters and counts."""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from conftest import auth
from insights.race_time import local_now
from models.shortlist import ShortlistEntry
from services.shortlist_service import STATUS_PAST, STATUS_UPCOMING, classify_entry

TZ = "Europe/London"
LONDON = ZoneInfo(TZ)
NOW = datetime(2026, 10, 17, 14, 0, tzinfo=LONDON)


def _row(race_time, created_at=None, user_id="user-alice", horse_name="Frankel"):
    return ShortlistEntry(
        user_id=user_id,
        horse_id="hrs_1",
        race_id="rac_1",
        horse_name=horse_name,
        course="Ascot",
        race_time=race_time,
        current_odds="4/1",
        created_at=created_at or datetime(2026, 10, 17, 9, 0, tzinfo=timezone.utc),
    )


def test_later_race_today_is_upcoming():
    assert classify_entry(_row("03:00"), NOW, TZ) == STATUS_UPCOMING


def test_earlier_race_today_is_past():
    assert classify_entry(_row("01:00"), NOW, TZ) == STATUS_PAST
    assert classify_entry(_row("11:30"), NOW, TZ) == STATUS_PAST


def test_unparseable_time_is_upcoming():
    assert classify_entry(_row("TBC"), NOW, TZ) == STATUS_UPCOMING
    assert classify_entry(_row(None), NOW, TZ) == STATUS_UPCOMING


def test_rows_added_yesterday_are_past():
    yesterday = datetime(2026, 10, 16, 20, 0, tzinfo=timezone.utc)
    assert classify_entry(_row("03:00", created_at=yesterday), NOW, TZ) == STATUS_PAST


def test_naive_timestamps_are_read_as_utc():
    # 23:30 UTC on the 16th is 00:30 BST on the 17th
    late = datetime(2026, 10, 16, 23, 30)
    assert classify_entry(_row("03:00", created_at=late), NOW, TZ) == STATUS_UPCOMING


def _yesterday_noon_utc():
    yesterday = local_now(TZ).date() - timedelta(days=1)
    return datetime.combine(yesterday, time(12, 0), tzinfo=LONDON).astimezone(timezone.utc)


@pytest.mark.asyncio
async def test_shortlist_endpoint_counts_and_filters(client, seed):
    await seed(
        _row("TBC", created_at=datetime.now(timezone.utc), horse_name="Upcoming One"),
        _row("03:00", created_at=_yesterday_noon_utc(), horse_name="Old One"),
        _row("03:00", user_id="user-bob", horse_name="Not Mine"),
    )

    r = await client.get("/api/v1/shortlist", headers=auth())
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["data"]["counts"] == {"upcoming": 1, "past": 1, "total": 2}
    statuses = {e["horse_name"]: e["race_status"] for e in body["data"]["entries"]}
    assert statuses == {"Upcoming One": "upcoming", "Old One": "past"}

    r = await client.get("/api/v1/shortlist", params={"status": "past"}, headers=auth())
    entries = r.json()["data"]["entries"]
    assert [e["horse_name"] for e in entries] == ["Old One"]
    assert r.json()["data"]["counts"]["total"] == 2


@pytest.mark.asyncio
async def test_shortlist_post_accepts_filters_in_body(client, seed):
    await seed(_row("TBC", created_at=datetime.now(timezone.utc), horse_name="Upcoming One"))

    r = await client.post("/api/v1/shortlist", json={"status": "upcoming", "sort_by": "race_time", "order": "asc"}, headers=auth())
    assert r.status_code == 200, r.text
    assert r.json()["count"] == 1

    r = await client.post("/api/v1/shortlist", headers=auth())
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_shortlist_rejects_unknown_status(client):
    r = await client.get("/api/v1/shortlist", params={"status": "tomorrow"}, headers=auth())
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"
