"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Storage is accessed through these Protocol types, implemented in infrastructure/

Design Decisions:
    - Protocol over ABC: structural subtyping, in-memory and SQL stores share no base class
    - Synchronous: the tracker is single-user, single-threaded; every call completes before
      the next user action is accepted
"""

from typing import Protocol

from tasting.core.domain_store import DomainStore


class KeyValueStore(Protocol):
    """Byte-string key-value storage. Implementations raise PersistenceError on failure."""
    def get(self, key: str) -> bytes | None: ...
    def set(self, key: str, value: bytes) -> None: ...


class SnapshotRepository(Protocol):
    """Loads the whole store at startup and saves it after each mutation."""
    def load(self) -> DomainStore: ...
    def save(self, store: DomainStore) -> bool: ...
