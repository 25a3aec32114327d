"""Root conftest: shared test configuration and fixtures."""

import os
from datetime import datetime, timedelta, timezone

import pytest

from tasting.core.domain_store import DomainStore

# Keep tests off the developer's real tasting database
os.environ.setdefault("TASTING_STORAGE_URL", "sqlite:///:memory:")


class StepClock:
    """Deterministic clock: each call advances one second."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 14, 19, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def store(clock) -> DomainStore:
    return DomainStore(clock=clock)


@pytest.fixture
def priorat(store):
    """Event E1 "Priorat Night" with wine W1 "Clos Mogador" 2018."""
    event = store.create_event("Priorat Night", "2026-03-14")
    wine = store.create_wine(event.id, {"name": "Clos Mogador", "vintage": "2018"})
    return event, wine
