"""Key-Value Stores: byte-string get/set backends for the persistence bridge.

Invariants:
    - get() returns None for a missing key, never raises for absence
    - set() replaces any previous value for the key
    - All SQLAlchemy exceptions mapped to PersistenceError (core/errors.py)
    - A failed write is rolled back: no partial row leaks
    - SqlKeyValueStore() never touches the database; the first get()/set() connects

Design Decisions:
    - SqlKeyValueStore over a flat file: atomic replace through the DB transaction
    - InMemoryKeyValueStore for ephemeral sessions and tests
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError, DBAPIError, SQLAlchemyError
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from tasting.core.errors import PersistenceError
from tasting.db.session import create_session_factory, create_storage_engine
from tasting.models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)


class SqlKeyValueStore:
    """Key-value table in any SQLAlchemy-supported database.

    The engine and table are created on first use, so an unreachable database
    surfaces as PersistenceError from get()/set() rather than from the constructor.
    """

    def __init__(self, storage_url: str):
        self.storage_url = storage_url
        self.engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    def _connect(self, operation: str) -> sessionmaker[Session]:
        if self._session_factory is None:
            try:
                self.engine = create_storage_engine(self.storage_url)
            except SQLAlchemyError as e:
                logger.error(f"Storage engine creation failed: {e}", extra={"operation": operation})
                raise PersistenceError("Could not open storage", operation)
            self._session_factory = create_session_factory(self.engine)
        return self._session_factory

    @contextmanager
    def session(self, operation: str) -> Iterator[Session]:
        """Provide session with auto-rollback on exception."""
        session = self._connect(operation)()
        try:
            yield session
        except IntegrityError as e:
            session.rollback()
            logger.error(f"Storage integrity error: {e}", extra={"operation": operation})
            raise PersistenceError("Integrity constraint violated", operation)
        except OperationalError as e:
            session.rollback()
            logger.error(f"Storage operational error: {e}", extra={"operation": operation})
            raise PersistenceError("Connection or operational error", operation)
        except DBAPIError as e:
            session.rollback()
            logger.error(f"Storage driver error: {e}", extra={"operation": operation})
            raise PersistenceError("Database driver error", operation)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"SQLAlchemy error: {e}", extra={"operation": operation})
            raise PersistenceError("Database operation failed", operation)
        finally:
            session.close()

    def get(self, key: str) -> bytes | None:
        with self.session("load") as db:
            entry = db.execute(
                select(KeyValueEntry).where(KeyValueEntry.key == key)
            ).scalar_one_or_none()
            return bytes(entry.value) if entry is not None else None

    def set(self, key: str, value: bytes) -> None:
        with self.session("save") as db:
            entry = db.get(KeyValueEntry, key)
            if entry is None:
                db.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            db.commit()

    def dispose(self) -> None:
        if self.engine is None:
            return
        self.engine.dispose()


class InMemoryKeyValueStore:
    """Process-local dict store. Contents vanish with the process."""

    def __init__(self, initial: dict[str, bytes] | None = None):
        self._data: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)
