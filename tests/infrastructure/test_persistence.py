"""Persistence Bridge: tests for load/save fallbacks and warnings.

Tests cover:
    - Missing key loads an empty store
    - Save then load round-trips the collections
    - Corrupt bytes, invalid JSON and inconsistent snapshots load as empty (no crash)
    - Storage failures on load/save are reported, never raised
"""

import json
import logging

from tasting.core.domain_store import DomainStore
from tasting.core.errors import PersistenceError
from tasting.infrastructure.kv_store import InMemoryKeyValueStore
from tasting.infrastructure.persistence import PersistenceBridge

KEY = "barcelona-wine-club:v1"


class FailingKeyValueStore:
    """Raises PersistenceError on every call."""

    def get(self, key: str) -> bytes | None:
        raise PersistenceError("disk unplugged", "load")

    def set(self, key: str, value: bytes) -> None:
        raise PersistenceError("disk full", "save")


def _filled_store() -> DomainStore:
    store = DomainStore()
    event = store.create_event("Priorat Night", "2026-03-14")
    wine = store.create_wine(event.id, {"name": "Clos Mogador", "vintage": "2018"})
    store.save_rating(event.id, wine.id, "Ana", {"overall": 4}, ["Berries"], "Jammy, ñ")
    return store


def test_missing_key_loads_empty():
    bridge = PersistenceBridge(InMemoryKeyValueStore(), KEY)
    store = bridge.load()
    assert store.events == ()
    assert bridge.last_error is None


def test_save_then_load_roundtrip():
    kv = InMemoryKeyValueStore()
    bridge = PersistenceBridge(kv, KEY)
    original = _filled_store()
    assert bridge.save(original) is True

    loaded = bridge.load()
    assert loaded.events == original.events
    assert loaded.wines == original.wines
    assert loaded.ratings[0].notes == "Jammy, ñ"
    assert json.loads(kv.get(KEY).decode("utf-8"))["events"][0]["title"] == "Priorat Night"


def test_undecodable_bytes_load_empty(caplog):
    bridge = PersistenceBridge(InMemoryKeyValueStore({KEY: b"\xff\xfe\x00"}), KEY)
    with caplog.at_level(logging.WARNING):
        store = bridge.load()
    assert store.events == ()
    assert bridge.last_error.code == "SNAPSHOT_INVALID"
    assert "starting empty" in caplog.text


def test_invalid_json_loads_empty():
    bridge = PersistenceBridge(InMemoryKeyValueStore({KEY: b"{not json"}), KEY)
    assert bridge.load().events == ()
    assert bridge.last_error is not None


def test_inconsistent_snapshot_loads_empty():
    payload = {
        "events": [],
        "wines": [{"id": "w", "event_id": "ghost", "name": "W", "vintage": "2000"}],
    }
    bridge = PersistenceBridge(InMemoryKeyValueStore({KEY: json.dumps(payload).encode()}), KEY)
    store = bridge.load()
    assert store.wines == ()
    assert bridge.last_error.code == "SNAPSHOT_INVALID"


def test_load_failure_is_reported_not_raised():
    bridge = PersistenceBridge(FailingKeyValueStore(), KEY)
    store = bridge.load()
    assert store.events == ()
    assert bridge.last_error.code == "PERSISTENCE_ERROR"


def test_save_failure_returns_false_and_keeps_store(caplog):
    bridge = PersistenceBridge(FailingKeyValueStore(), KEY)
    store = _filled_store()
    with caplog.at_level(logging.WARNING):
        assert bridge.save(store) is False
    assert len(store.ratings) == 1
    assert bridge.last_error.operation == "save"
    assert "in-memory state kept" in caplog.text


def test_store_factory_is_used_for_loaded_and_empty_stores():
    created = []

    def factory():
        store = DomainStore(score_max=10)
        created.append(store)
        return store

    bridge = PersistenceBridge(InMemoryKeyValueStore(), KEY, store_factory=factory)
    assert bridge.load().score_max == 10
    assert len(created) == 1
