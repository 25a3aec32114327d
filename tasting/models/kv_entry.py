"""KeyValueEntry ORM: one serialized blob per storage key.

Invariants:
    - key is the primary key (one row per key, upserted on save)
    - value is opaque bytes; only the persistence bridge knows it is JSON

Design Decisions:
    - LargeBinary over JSON column: the storage interface is byte-string get/set
    - updated_at for inspection only, never read by the tracker
"""

from datetime import datetime, timezone

from sqlalchemy import String, LargeBinary, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from tasting.db.base import Base


class KeyValueEntry(Base):
    """A stored value addressed by key."""
    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
