"""Bets API: place/cancel with bankroll accounting and the secondary-write policy."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from conftest import auth
from core.config import Settings, get_settings
from core.errors import RequestValidationFailed
from core.identity import AuthenticatedUser
from models.bankroll import Bankroll
from models.bet import Bet
from repositories.bankroll_repo import BankrollRepository
from services.betting_service import BetRequest, place_bet


def _now():
    return datetime.now(timezone.utc)


def _bankroll(user_id="user-alice", amount=100.0):
    return Bankroll(user_id=user_id, current_amount=amount, created_at=_now(), updated_at=_now())


def _bet(user_id="user-alice", status="pending", amount=10.0):
    return Bet(
        user_id=user_id,
        race_id="rac_1",
        race_date="2026-10-17",
        course="Ascot",
        off_time="02:30",
        horse_id="hrs_1",
        horse_name="Frankel",
        current_odds="4/1",
        odds=5.0,
        bet_amount=amount,
        bet_type="win",
        status=status,
        potential_return=amount * 5.0,
        created_at=_now(),
    )


SLIP = {
    "horse_id": "hrs_1",
    "horse_name": "Frankel",
    "race_id": "rac_1",
    "course": "Ascot",
    "off_time": "02:30",
    "trainer_name": "H Cecil",
    "jockey_name": "T Queally",
    "current_odds": "4/1",
    "odds": 5.0,
    "bet_amount": 10,
}


async def _bankroll_amount(test_db, user_id="user-alice"):
    async with test_db.session() as s:
        row = await s.get(Bankroll, user_id)
        return row.current_amount


async def _bets(test_db):
    async with test_db.session() as s:
        return list((await s.execute(select(Bet))).scalars().all())


@pytest.mark.asyncio
async def test_place_then_cancel_restores_bankroll(client, seed, test_db):
    await seed(_bankroll(amount=100.0))

    r = await client.post("/api/v1/bets/place", json=SLIP, headers=auth())
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    bet = body["data"]["bet"]
    assert bet["status"] == "pending"
    assert bet["bet_type"] == "win"
    assert bet["potential_return"] == 50.0
    assert bet["user_id"] == "user-alice"
    assert body["data"]["new_bankroll"] == 90.0
    assert await _bankroll_amount(test_db) == 90.0

    r = await client.post("/api/v1/bets/cancel", json={"bet_id": bet["id"]}, headers=auth())
    assert r.status_code == 200, r.text
    assert r.json()["message"] == "Bet cancelled successfully"
    assert r.json()["data"]["refund_amount"] == 10.0
    assert await _bankroll_amount(test_db) == 100.0
    assert await _bets(test_db) == []


@pytest.mark.asyncio
async def test_odds_fall_back_to_displayed_price(client, seed):
    await seed(_bankroll())
    slip = {**SLIP, "current_odds": "5/2"}
    slip.pop("odds")
    r = await client.post("/api/v1/bets/place", json=slip, headers=auth())
    assert r.status_code == 200, r.text
    bet = r.json()["data"]["bet"]
    assert bet["odds"] == 3.5
    assert bet["potential_return"] == 35.0


@pytest.mark.asyncio
async def test_missing_horse_id_is_rejected(client, seed, test_db):
    await seed(_bankroll())
    slip = dict(SLIP)
    slip.pop("horse_id")
    r = await client.post("/api/v1/bets/place", json=slip, headers=auth())
    assert r.status_code == 400
    error = r.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert "horse_id" in error["message"]
    assert await _bets(test_db) == []


@pytest.mark.asyncio
async def test_missing_required_field_names_it(client):
    slip = dict(SLIP)
    slip.pop("course")
    r = await client.post("/api/v1/bets/place", json=slip, headers=auth())
    assert r.status_code == 400
    assert r.json() == {
        "success": False,
        "error": {"code": "VALIDATION_ERROR", "message": "Missing required field: course"},
    }


@pytest.mark.asyncio
async def test_non_positive_stake_is_rejected(client, seed):
    await seed(_bankroll())
    r = await client.post("/api/v1/bets/place", json={**SLIP, "bet_amount": 0}, headers=auth())
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["horse_name", "race_id", "course", "off_time", "horse_id"])
@pytest.mark.parametrize("blank", ["", "   "])
async def test_blank_required_field_is_rejected(client, seed, test_db, field, blank):
    await seed(_bankroll(amount=100.0))
    r = await client.post("/api/v1/bets/place", json={**SLIP, field: blank}, headers=auth())
    assert r.status_code == 400, r.text
    error = r.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert field in error["message"]
    assert await _bets(test_db) == []
    assert await _bankroll_amount(test_db) == 100.0


@pytest.mark.asyncio
@pytest.mark.parametrize("field,literal", [("bet_amount", "1e309"), ("bet_amount", "NaN"), ("odds", "1e309")])
async def test_non_finite_numbers_are_rejected(client, seed, test_db, field, literal):
    await seed(_bankroll(amount=100.0))
    slip = {k: v for k, v in SLIP.items() if k != field}
    # json.loads reads 1e309 as inf and NaN as nan
    raw = json.dumps(slip)[:-1] + f', "{field}": {literal}}}'
    r = await client.post(
        "/api/v1/bets/place",
        content=raw,
        headers={**auth(), "Content-Type": "application/json"},
    )
    assert r.status_code == 400, r.text
    error = r.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert field in error["message"]
    assert await _bets(test_db) == []
    assert await _bankroll_amount(test_db) == 100.0


@pytest.mark.asyncio
async def test_place_without_bankroll_writes_nothing(client, test_db):
    r = await client.post("/api/v1/bets/place", json=SLIP, headers=auth())
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "BANKROLL_NOT_FOUND"
    assert await _bets(test_db) == []


@pytest.mark.asyncio
async def test_cannot_cancel_settled_bet(client, seed, test_db):
    won = _bet(status="won")
    await seed(_bankroll(amount=100.0), won)

    r = await client.post("/api/v1/bets/cancel", json={"bet_id": won.id}, headers=auth())
    assert r.status_code == 400
    assert r.json()["error"] == {"code": "BET_NOT_CANCELLABLE", "message": "Can only cancel pending bets"}
    assert await _bankroll_amount(test_db) == 100.0
    assert len(await _bets(test_db)) == 1


@pytest.mark.asyncio
async def test_cannot_cancel_someone_elses_bet(client, seed, test_db):
    theirs = _bet(user_id="user-bob")
    await seed(_bankroll(), _bankroll(user_id="user-bob", amount=40.0), theirs)

    r = await client.post("/api/v1/bets/cancel", json={"bet_id": theirs.id}, headers=auth("token-alice"))
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "BET_NOT_FOUND"
    assert await _bankroll_amount(test_db, "user-bob") == 40.0


@pytest.mark.asyncio
async def test_cancel_requires_bet_id(client):
    r = await client.post("/api/v1/bets/cancel", json={}, headers=auth())
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Missing required field: bet_id"


@pytest.mark.asyncio
async def test_tolerant_policy_keeps_bet_when_bankroll_write_fails(client, seed, test_db, monkeypatch, caplog):
    await seed(_bankroll(amount=100.0))

    async def failing_adjust(self, bankroll, delta):
        raise SQLAlchemyError("bankroll table locked")

    monkeypatch.setattr(BankrollRepository, "adjust", failing_adjust)
    with caplog.at_level(logging.WARNING, logger="services.unit_of_work"):
        r = await client.post("/api/v1/bets/place", json=SLIP, headers=auth())

    assert r.status_code == 200, r.text
    assert r.json()["data"]["bankroll_updated"] is False
    assert r.json()["data"]["new_bankroll"] is None
    assert len(await _bets(test_db)) == 1
    assert await _bankroll_amount(test_db) == 100.0
    assert any("Secondary write failed" in rec.getMessage() for rec in caplog.records)


@pytest.mark.asyncio
async def test_strict_policy_rolls_back_everything(client, seed, test_db, monkeypatch):
    from main import app

    await seed(_bankroll(amount=100.0))

    async def failing_adjust(self, bankroll, delta):
        raise SQLAlchemyError("bankroll table locked")

    monkeypatch.setattr(BankrollRepository, "adjust", failing_adjust)
    app.dependency_overrides[get_settings] = lambda: Settings(bankroll_write_policy="strict")

    r = await client.post("/api/v1/bets/place", json=SLIP, headers=auth())
    assert r.status_code == 500
    assert r.json()["error"]["code"] == "STORAGE_ERROR"
    assert await _bets(test_db) == []
    assert await _bankroll_amount(test_db) == 100.0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "changes",
    [
        {"bet_amount": float("inf")},
        {"bet_amount": float("nan")},
        {"odds": float("inf")},
        {"course": " "},
    ],
)
async def test_service_rejects_bad_slip_before_any_write(changes):
    request = BetRequest(**{**SLIP, **changes})
    with pytest.raises(RequestValidationFailed):
        # rejected before the unit of work is touched
        await place_bet(None, AuthenticatedUser(id="user-alice"), request, "Europe/London")
