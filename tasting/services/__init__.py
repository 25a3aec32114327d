"""Services Layer: the imperative shell that sequences store, navigator and persistence.

Invariants:
    - Mutations happen here, followed by a save, followed by the matching navigator action

Design Decisions:
    - One session object per interactive user (no shared global state)
"""
