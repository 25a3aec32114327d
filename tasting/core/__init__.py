"""Core Layer: pure domain logic, no IO, no DB, no logging.

Invariants:
    - No module in core/ imports from services/, infrastructure/, models/ or db/
    - Query functions are pure and deterministic; mutation goes through DomainStore only

Design Decisions:
    - Functional core separated from imperative shell (ADR: services/ owns persistence calls)
"""
