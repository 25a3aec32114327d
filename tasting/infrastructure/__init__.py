"""Infrastructure Layer: storage backends, persistence bridge, logging setup.

Invariants:
    - Storage failures surface as PersistenceError, never as raw driver exceptions

Design Decisions:
    - Backends satisfy core/repository_protocols.py structurally
"""
