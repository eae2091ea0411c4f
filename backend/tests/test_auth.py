"""Bearer-token checks in front of the authenticated endpoints."""

from __future__ import annotations

import httpx
import pytest

from conftest import auth
from core.config import Settings, get_settings
from core.dependencies import get_identity_client
from core.identity import parse_bearer_token
from core.errors import AuthenticationError


def test_parse_bearer_token():
    assert parse_bearer_token("Bearer abc") == "abc"
    assert parse_bearer_token("bearer  abc ") == "abc"
    for bad in (None, "", "Basic abc", "Bearer"):
        with pytest.raises(AuthenticationError) as exc:
            parse_bearer_token(bad)
        assert exc.value.code == "MISSING_AUTHORIZATION"


@pytest.mark.asyncio
async def test_missing_header(client):
    r = await client.post("/api/v1/bets/cancel", json={"bet_id": 1})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "MISSING_AUTHORIZATION"


@pytest.mark.asyncio
async def test_malformed_header(client):
    r = await client.get("/api/v1/shortlist", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "MISSING_AUTHORIZATION"


@pytest.mark.asyncio
async def test_rejected_token(client):
    r = await client.get("/api/v1/shortlist", headers=auth("token-expired"))
    assert r.status_code == 401
    assert r.json() == {
        "success": False,
        "error": {"code": "INVALID_AUTHENTICATION", "message": "Invalid authentication"},
    }


@pytest.mark.asyncio
async def test_identity_outage_is_upstream_error(client, identity_handlers):
    identity_handlers[0] = lambda request: httpx.Response(503, text="maintenance")
    r = await client.get("/api/v1/shortlist", headers=auth())
    assert r.status_code == 500
    error = r.json()["error"]
    assert error["code"] == "UPSTREAM_ERROR"
    assert "503" in error["message"]
    assert "maintenance" in error["message"]


@pytest.mark.asyncio
async def test_identity_unreachable_is_upstream_error(client, identity_handlers):
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    identity_handlers[0] = unreachable
    r = await client.get("/api/v1/shortlist", headers=auth())
    assert r.status_code == 500
    assert r.json()["error"]["code"] == "UPSTREAM_ERROR"


@pytest.mark.asyncio
async def test_missing_identity_configuration(client):
    from main import app

    app.dependency_overrides.pop(get_identity_client, None)
    app.dependency_overrides[get_settings] = lambda: Settings(supabase_url="", service_role_key="")

    r = await client.get("/api/v1/shortlist")
    assert r.status_code == 500
    assert r.json()["error"]["code"] == "CONFIGURATION_ERROR"


@pytest.mark.asyncio
async def test_identity_request_carries_token_and_service_key(client, identity_handlers):
    seen = {}

    def recording(request):
        seen["path"] = request.url.path
        seen["authorization"] = request.headers.get("authorization")
        seen["apikey"] = request.headers.get("apikey")
        return httpx.Response(200, json={"id": "user-alice"})

    identity_handlers[0] = recording
    r = await client.get("/api/v1/shortlist", headers=auth("token-alice"))
    assert r.status_code == 200
    assert seen == {"path": "/auth/v1/user", "authorization": "Bearer token-alice", "apikey": "service-key"}


@pytest.mark.asyncio
async def test_insight_endpoints_are_public(client):
    r = await client.get("/api/v1/market-movers", params={"date": "2026-01-05"})
    assert r.status_code == 200
    assert r.json()["success"] is True
