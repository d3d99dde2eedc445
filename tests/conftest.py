"""
Shared fixtures.

Time is pinned with FakeClock so ordering and "N months ago" tests are
deterministic. The pinned date is 31 March on purpose: stepping back one
month has to clamp to the end of February.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from eudr_api.main import create_app
from eudr_api.seed import ADMIN_PASSWORD, ADMIN_USERNAME, seed_demo_data
from eudr_api.store import MemStorage

NOW = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, start: datetime = NOW):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **delta) -> datetime:
        self.current += timedelta(**delta)
        return self.current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage(clock):
    """An empty store."""
    return MemStorage(clock=clock)


@pytest.fixture
def seeded_storage(clock):
    store = MemStorage(clock=clock)
    seed_demo_data(store)
    return store


@pytest.fixture
def client(seeded_storage):
    """A client with no session."""
    app = create_app(storage=seeded_storage)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client(client):
    """A client logged in as the demo admin."""
    resp = client.post(
        "/api/auth/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert resp.status_code == 200
    return client
