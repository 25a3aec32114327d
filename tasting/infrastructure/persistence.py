"""Persistence Bridge: loads and saves the whole DomainStore as one JSON blob.

Invariants:
    - load() never raises: missing, undecodable or invalid data yields an empty store
    - save() never raises: failure is logged as a warning and reported as False
    - A failed save leaves the in-memory store untouched (it stays authoritative)
    - No automatic retry; the next successful mutation saves the full state again

Design Decisions:
    - Whole-snapshot writes: collections are small and a single key keeps load atomic
    - UTF-8 JSON with ensure_ascii=False: taster names and notes stay readable in storage
"""

import json
import logging
from collections.abc import Callable

from tasting.core.domain_store import DomainStore
from tasting.core.domain_types import STORAGE_KEY
from tasting.core.errors import PersistenceError, SnapshotFormatError
from tasting.core.repository_protocols import KeyValueStore
from tasting.core.store_snapshot import store_from_snapshot, store_to_snapshot

logger = logging.getLogger(__name__)


class PersistenceBridge:
    """SnapshotRepository over any KeyValueStore."""

    def __init__(
        self,
        kv: KeyValueStore,
        key: str = STORAGE_KEY,
        store_factory: Callable[[], DomainStore] = DomainStore,
    ):
        self.kv = kv
        self.key = key
        self.store_factory = store_factory
        self.last_error: PersistenceError | SnapshotFormatError | None = None

    def load(self) -> DomainStore:
        """Read the stored snapshot. Falls back to an empty store on any failure."""
        try:
            raw = self.kv.get(self.key)
        except PersistenceError as e:
            return self._empty_after(e)
        if raw is None:
            logger.info("No stored data, starting empty", extra={"storage_key": self.key})
            return self.store_factory()

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            return self._empty_after(SnapshotFormatError(f"not valid UTF-8 JSON ({e})"))

        try:
            store = store_from_snapshot(data, self.store_factory)
        except SnapshotFormatError as e:
            return self._empty_after(e)

        self.last_error = None
        logger.info(
            f"Loaded {len(store.events)} events, {len(store.wines)} wines, "
            f"{len(store.ratings)} ratings",
            extra={"storage_key": self.key},
        )
        return store

    def save(self, store: DomainStore) -> bool:
        """Write the full snapshot. Returns False (and logs) on failure."""
        payload = json.dumps(store_to_snapshot(store), ensure_ascii=False).encode("utf-8")
        try:
            self.kv.set(self.key, payload)
        except PersistenceError as e:
            self.last_error = e
            logger.warning(
                f"Save failed, in-memory state kept: {e.message}",
                exc_info=e, extra={"storage_key": self.key},
            )
            return False
        self.last_error = None
        return True

    def _empty_after(self, error: PersistenceError | SnapshotFormatError) -> DomainStore:
        self.last_error = error
        logger.warning(
            f"Load failed, starting empty: {error.message}",
            exc_info=error, extra={"storage_key": self.key, "operation": "load"},
        )
        return self.store_factory()
