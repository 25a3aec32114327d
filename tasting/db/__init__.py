"""Database Infrastructure: sync engine factory and SQLAlchemy Base.

Invariants:
    - One engine per SqlKeyValueStore
    - Sessions are synchronous (single-user, single-threaded tracker)

Design Decisions:
    - SQLite by default: local file, no server to run
"""
