"""Pydantic Schemas: validation of raw form payloads at the UI boundary.

Invariants:
    - Schemas validate at system boundary (user input only)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from entities: schemas are form contracts, entities are the domain record
"""
