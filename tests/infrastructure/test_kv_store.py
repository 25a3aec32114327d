"""Key-Value Stores: tests for the SQLAlchemy and in-memory backends.

Tests cover:
    - get() of a missing key returns None
    - set() inserts then replaces
    - values survive a new store instance on the same SQLite file
    - SQLAlchemy failures surface as PersistenceError, including an unreachable database
"""

import pytest
from sqlalchemy.exc import OperationalError

from tasting.core.errors import PersistenceError
from tasting.infrastructure.kv_store import InMemoryKeyValueStore, SqlKeyValueStore


@pytest.fixture
def sql_store():
    kv = SqlKeyValueStore("sqlite:///:memory:")
    yield kv
    kv.dispose()


def test_sql_missing_key_is_none(sql_store):
    assert sql_store.get("absent") is None


def test_sql_set_then_replace(sql_store):
    sql_store.set("k", b"first")
    assert sql_store.get("k") == b"first"
    sql_store.set("k", b"second")
    assert sql_store.get("k") == b"second"


def test_sql_values_persist_across_instances(tmp_path):
    url = f"sqlite:///{tmp_path / 'tasting.db'}"
    writer = SqlKeyValueStore(url)
    writer.set("barcelona-wine-club:v1", '{"events": []}'.encode("utf-8"))
    writer.dispose()

    reader = SqlKeyValueStore(url)
    assert reader.get("barcelona-wine-club:v1") == b'{"events": []}'
    reader.dispose()


def test_sql_errors_become_persistence_errors(sql_store, monkeypatch):
    class BrokenSession:
        def execute(self, *args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

        def rollback(self):
            pass

        def close(self):
            pass

    monkeypatch.setattr(sql_store, "_session_factory", BrokenSession)
    with pytest.raises(PersistenceError) as exc:
        sql_store.get("k")
    assert exc.value.operation == "load"


def test_in_memory_store():
    kv = InMemoryKeyValueStore({"seed": b"1"})
    assert kv.get("seed") == b"1"
    assert kv.get("missing") is None
    kv.set("seed", b"2")
    assert kv.get("seed") == b"2"


def test_unreachable_database_fails_on_use_not_on_construction(tmp_path):
    kv = SqlKeyValueStore(f"sqlite:///{tmp_path / 'missing_dir' / 'tasting.db'}")
    with pytest.raises(PersistenceError) as exc:
        kv.get("k")
    assert exc.value.operation == "load"
    with pytest.raises(PersistenceError) as exc:
        kv.set("k", b"v")
    assert exc.value.operation == "save"
    kv.dispose()
