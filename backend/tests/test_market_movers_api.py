"""Market movers API: the day's change log derived into movers and race groups."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.errors import RequestValidationFailed
from insights.race_time import local_today
from models.market_movement import MarketMovementChange
from models.race import Race
from models.race_entry import RaceEntry
from services.market_mover_service import local_day_bounds, resolve_day


def _change(horse_id, pct, direction="in", hour=12, day=5, off_time="02:30", current=5.0):
    return MarketMovementChange(
        race_id="rac_1",
        horse_id=horse_id,
        course="Ascot",
        off_time=off_time,
        bookmaker="Bet365",
        direction=direction,
        change_pct=pct,
        initial_odds=6.0,
        current_odds=current,
        observed_at=datetime(2026, 1, day, hour, 0, tzinfo=timezone.utc),
    )


def test_local_day_bounds_follow_the_racing_timezone():
    start, end = local_day_bounds("2026-07-01", "Europe/London")
    assert start == datetime(2026, 6, 30, 23, 0, tzinfo=timezone.utc)
    assert end == datetime(2026, 7, 1, 23, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_market_movers_for_a_day(client, seed):
    await seed(Race(race_id="rac_1", date="2026-01-05", off_time="02:30", course_id="c1", course_name="Ascot"))
    await seed(
        RaceEntry(race_id="rac_1", horse_id="hrs_1", horse_name="Frankel", trainer_name="H Cecil", jockey_name="T Queally"),
        _change("hrs_1", -12.0, hour=10),
        _change("hrs_1", -18.0, hour=11, current=4.5),
        _change("hrs_2", 30.0, direction="out"),
        _change("hrs_3", -9.0),
        _change("hrs_4", -40.0, day=4),
    )

    r = await client.get("/api/v1/market-movers", params={"date": "2026-01-05"})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["total_movers"] == 1
    assert data["total_races"] == 1
    mover = data["market_movers"][0]
    assert mover["horse_name"] == "Frankel"
    assert mover["total_movements"] == 2
    assert mover["odds_movement_pct"] == 18.0
    assert mover["current_odds_display"] == "7/2"
    assert data["race_groups"][0]["race_id"] == "mover_Ascot_02:30"

    r = await client.post("/api/v1/market-movers?date=2026-01-05")
    assert r.json()["data"]["total_movers"] == 1


@pytest.mark.asyncio
async def test_market_movers_rejects_bad_date(client):
    r = await client.get("/api/v1/market-movers", params={"date": "05/01/2026"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path",
    ["/api/v1/market-movers", "/api/v1/insights/top-picks", "/api/v1/insights/insider"],
)
@pytest.mark.parametrize("day", ["2026-13-45", "2026-02-30"])
async def test_impossible_calendar_dates_are_rejected(client, path, day):
    r = await client.get(path, params={"date": day})
    assert r.status_code == 400, r.text
    body = r.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert "date" in body["error"]["message"]


def test_resolve_day_checks_the_calendar():
    assert resolve_day("2026-01-05", "Europe/London") == "2026-01-05"
    assert resolve_day(None, "Europe/London") == local_today("Europe/London")
    with pytest.raises(RequestValidationFailed):
        resolve_day("2026-13-45", "Europe/London")
    with pytest.raises(RequestValidationFailed):
        local_day_bounds("2026-02-30", "Europe/London")
