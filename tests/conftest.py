from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from supportdesk.main import create_app
from supportdesk.store import EntityTables, PortalStore, seed_tables


class TickingClock:
    """Deterministic clock advancing one minute per reading."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(minutes=1)
        return self.current


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock(datetime(2025, 2, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock) -> PortalStore:
    tables = seed_tables(EntityTables(clock=clock))
    return PortalStore(tables, rate_per_hour=75.0)


@pytest.fixture
def admin_store(store) -> PortalStore:
    store.set_current_user("user-admin")
    return store


@pytest.fixture
def staff_store(store) -> PortalStore:
    store.set_current_user("user-staff")
    return store


@pytest.fixture
def client_store(store) -> PortalStore:
    store.set_current_user("user-acme")
    return store


@pytest.fixture
def api_client(store):
    app = create_app(store)
    client = TestClient(app)
    try:
        yield client
    finally:
        client.close()