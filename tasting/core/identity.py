"""Identity Generator: opaque, collision-resistant ids for new entities.

Invariants:
    - Every call returns a value never returned before in the process lifetime
    - Output format is "<kind>_<32 hex chars>"

Design Decisions:
    - uuid4 over counters or timestamps: no shared mutable state, safe under concurrent calls
"""

import uuid

from tasting.core.domain_types import EntityKind


def new_id(kind: EntityKind | str) -> str:
    """Return a fresh id prefixed with the entity kind."""
    prefix = kind.value if isinstance(kind, EntityKind) else kind
    return f"{prefix}_{uuid.uuid4().hex}"
