import os
from datetime import datetime, timezone

import pytest

os.environ.setdefault("SUPABASE_URL", "https://studysync-test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

from fastapi.testclient import TestClient  # noqa: E402

from fakes import FakeSupabase, FixedClock  # noqa: E402
from studysync.core.clock import get_clock  # noqa: E402
from studysync.core.database import get_admin_database, get_database  # noqa: E402
from studysync.main import app  # noqa: E402

USER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "22222222-2222-2222-2222-222222222222"


@pytest.fixture
def fake_db():
    db = FakeSupabase()
    db.auth.tokens["user-token"] = USER_ID
    db.auth.tokens["other-token"] = OTHER_USER_ID
    return db


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def client(fake_db, clock):
    async def override_database():
        return fake_db

    app.dependency_overrides[get_database] = override_database
    app.dependency_overrides[get_admin_database] = override_database
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer user-token"}


@pytest.fixture
def other_headers():
    return {"Authorization": "Bearer other-token"}
