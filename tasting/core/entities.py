"""Entities: Event, Wine and Rating records owned by the DomainStore.

Invariants:
    - Event and Wine are frozen: never mutated after creation
    - Rating.id and Rating.created_at never change after the first save of a triple
    - Rating.taster_name is stored trimmed
    - Rating.aroma_tags holds AromaTag values, no duplicates, in toggle order

Design Decisions:
    - Plain dataclasses, not ORM rows: the store is in-memory and persisted as one JSON blob
    - Event.date kept as the raw ISO string ("" when unset): unparsable legacy values
      survive a load/save cycle and are interpreted only by aggregation
"""

from dataclasses import dataclass, field
from datetime import datetime

from tasting.core.domain_types import EventId, RatingId, WineId, RatingAxis


@dataclass(frozen=True)
class Event:
    """A named tasting occasion."""
    id: EventId
    title: str
    date: str = ""


@dataclass(frozen=True)
class Wine:
    """A bottle attached to exactly one Event."""
    id: WineId
    event_id: EventId
    name: str
    vintage: str
    varietal: str = ""
    region: str = ""
    producer: str = ""
    style: str = ""
    image_ref: str | None = None


@dataclass
class Rating:
    """One taster's evaluation of one wine within one event."""
    id: RatingId
    event_id: EventId
    wine_id: WineId
    taster_name: str
    created_at: datetime
    updated_at: datetime
    overall: float = 0.0
    sweetness: float = 0.0
    acidity: float = 0.0
    tannins: float = 0.0
    body: float = 0.0
    aroma_tags: list[str] = field(default_factory=list)
    notes: str = ""

    @property
    def triple(self) -> tuple[str, str, str]:
        """The uniqueness key (event_id, wine_id, taster_name)."""
        return (self.event_id, self.wine_id, self.taster_name)

    @property
    def scores(self) -> dict[str, float]:
        """All axis scores keyed by RatingAxis value."""
        return {axis.value: getattr(self, axis.value) for axis in RatingAxis}
