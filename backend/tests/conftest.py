# Ensure backend is at sys.path[0] when pytest runs (from repo root or from backend dir)
import sys
from pathlib import Path

_tests_dir = Path(__file__).resolve().parent
_backend = _tests_dir.parent
_str_backend = str(_backend)
if sys.path[0:1] != [_str_backend]:
    sys.path.insert(0, _str_backend)

import httpx  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

import models  # noqa: E402,F401
from core.database import dispose_database, get_database_manager, init_database  # noqa: E402
from core.dependencies import get_db_session, get_identity_client  # noqa: E402
from core.identity import IdentityClient  # noqa: E402

IDENTITY_URL = "https://identity.test"

# token -> user id accepted by the fake identity endpoint
TOKENS = {
    "token-alice": "user-alice",
    "token-bob": "user-bob",
}


def identity_handler(request: httpx.Request) -> httpx.Response:
    """Fake ``/auth/v1/user``: known tokens resolve, anything else is rejected."""
    token = request.headers.get("authorization", "").removeprefix("Bearer ")
    if request.headers.get("apikey") != "service-key":
        return httpx.Response(500, text="missing apikey")
    user_id = TOKENS.get(token)
    if user_id is None:
        return httpx.Response(401, json={"msg": "invalid JWT"})
    return httpx.Response(200, json={"id": user_id, "email": f"{user_id}@example.com"})


def auth(token: str = "token-alice") -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def test_db():
    await init_database("sqlite+aiosqlite:///:memory:")
    await get_database_manager().create_schema()
    yield get_database_manager()
    await dispose_database()


@pytest.fixture
def seed(test_db):
    """Insert rows in their own committed session."""

    async def _seed(*rows):
        async with test_db.session() as s:
            s.add_all(rows)

    return _seed


@pytest.fixture
def identity_handlers():
    """Replace ``identity_handlers[0]`` in a test to change the fake endpoint."""
    return [identity_handler]


@pytest.fixture
def identity_transport(identity_handlers):
    return httpx.MockTransport(lambda request: identity_handlers[0](request))


@pytest.fixture
async def client(test_db, identity_transport):
    from main import app

    async def override_session():
        async with test_db.session() as s:
            yield s

    def override_identity():
        return IdentityClient(IDENTITY_URL, "service-key", transport=identity_transport)

    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_identity_client] = override_identity
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
