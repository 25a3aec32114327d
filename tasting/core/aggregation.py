"""Aggregation: pure derived views over a DomainStore snapshot.

Invariants:
    - No function mutates the store or its entities
    - wine_average_overall returns None for zero ratings (never divides by zero)
    - Partitions preserve input order; every wine lands in exactly one bucket
    - chronological_split is total: every event lands in upcoming or past

Design Decisions:
    - Free functions, not DomainStore methods: the store is enforcement, these are presentation
    - Blank or unparsable event dates go to `past` and sort after every dated event
      (open product question; see DESIGN.md)
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from tasting.core.domain_store import DomainStore, normalize_taster_name
from tasting.core.entities import Event, Rating, Wine


@dataclass(frozen=True)
class EventSummary:
    wine_count: int
    taster_count: int


@dataclass(frozen=True)
class WinePartition:
    rated: list[Wine]
    unrated: list[Wine]


@dataclass(frozen=True)
class EventTimeline:
    upcoming: list[Event]
    past: list[Event]


@dataclass(frozen=True)
class CellarEntry:
    """One row of the cellar view: a wine with its event and score."""
    wine: Wine
    event_title: str | None
    average_overall: float | None
    rating_count: int


def parse_event_date(value: str | date | None) -> date | None:
    """ISO calendar date, or None when blank or unparsable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = (value or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _mean(values: list[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


def wine_average_overall(store: DomainStore, wine_id: str) -> float | None:
    """Arithmetic mean of `overall` across every taster's rating of the wine."""
    return _mean([r.overall for r in store.ratings_for_wine(wine_id)])


def event_summary(store: DomainStore, event_id: str) -> EventSummary:
    return EventSummary(
        wine_count=len(store.wines_for_event(event_id)),
        taster_count=len(store.list_tasters(event_id)),
    )


def partition_wines_by_rated_status(
    wines: Iterable[Wine], ratings: Iterable[Rating],
) -> WinePartition:
    """Rated = at least one rating by ANY taster references the wine."""
    rated_ids = {r.wine_id for r in ratings}
    rated: list[Wine] = []
    unrated: list[Wine] = []
    for wine in wines:
        (rated if wine.id in rated_ids else unrated).append(wine)
    return WinePartition(rated=rated, unrated=unrated)


def partition_wines_for_taster(
    store: DomainStore, event_id: str, taster_name: str,
) -> WinePartition:
    """Single-taster progress through an event's wines (tasting flow view)."""
    name = normalize_taster_name(taster_name)
    mine = [r for r in store.ratings_for_event(event_id) if r.taster_name == name]
    return partition_wines_by_rated_status(store.wines_for_event(event_id), mine)


def chronological_split(
    events: Iterable[Event], reference_date: date,
) -> EventTimeline:
    """Upcoming (date >= reference, ascending) and past (descending, undated last)."""
    if isinstance(reference_date, datetime):
        reference_date = reference_date.date()
    upcoming: list[tuple[date, Event]] = []
    past: list[tuple[date, Event]] = []
    undated: list[Event] = []
    for event in events:
        parsed = parse_event_date(event.date)
        if parsed is None:
            undated.append(event)
        elif parsed >= reference_date:
            upcoming.append((parsed, event))
        else:
            past.append((parsed, event))

    # sorted() is stable: same-day events keep creation order
    upcoming_sorted = [e for _, e in sorted(upcoming, key=lambda pair: pair[0])]
    past_sorted = [e for _, e in sorted(past, key=lambda pair: pair[0], reverse=True)]
    return EventTimeline(upcoming=upcoming_sorted, past=past_sorted + undated)


def cellar_overview(store: DomainStore) -> list[CellarEntry]:
    """Every wine with its event title, average overall and rating count."""
    entries: list[CellarEntry] = []
    for wine in store.wines:
        ratings = store.ratings_for_wine(wine.id)
        event = store.get_event(wine.event_id)
        entries.append(CellarEntry(
            wine=wine,
            event_title=event.title if event else None,
            average_overall=_mean([r.overall for r in ratings]),
            rating_count=len(ratings),
        ))
    return entries
