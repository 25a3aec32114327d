"""Domain Store: sole owner of the event, wine and rating collections.

Invariants:
    - Collections are append-only and kept in creation order
    - Every Wine.event_id resolves to an Event; Wine.style is blank or a WineStyle value
    - Every Rating's (event_id, wine_id) resolves and the wine belongs to the event
    - At most one Rating per (event_id, wine_id, trimmed taster_name); comparison is case-sensitive
    - A mutator validates everything before touching a collection: on failure nothing changes

Design Decisions:
    - Lists for order plus dict indexes for O(1) lookup; indexes rebuilt only by restore()
    - Clock and id factory injected: deterministic tests without patching datetime
    - save_rating returns the live Rating object; callers must treat it as read-only
"""

from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime, timezone

from tasting.core.domain_types import (
    EntityKind, EventId, RatingAxis, RatingId, WineId, WineStyle, SCORE_MIN, SCORE_MAX,
)
from tasting.core.entities import Event, Rating, Wine
from tasting.core.errors import ErrorContext, NotFoundError, ValidationError
from tasting.core.identity import new_id
from tasting.core.rating_form import normalize_aroma_tags, validate_score

_OPTIONAL_WINE_FIELDS: tuple[str, ...] = ("varietal", "region", "producer")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_taster_name(taster_name: str | None) -> str:
    """Trim surrounding whitespace; case is preserved."""
    return (taster_name or "").strip()


def normalize_wine_style(style: WineStyle | str | None) -> str:
    """Canonical lowercase style value, "" for blank. Raises ValidationError otherwise."""
    if isinstance(style, WineStyle):
        return style.value
    text = str(style or "").strip().lower()
    if not text:
        return ""
    try:
        return WineStyle(text).value
    except ValueError:
        raise ValidationError(f"Unknown wine style '{style}'", field="style")


def _normalize_date(value: date | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


class DomainStore:
    """In-memory entity collections with invariant-checked mutators."""

    def __init__(
        self,
        id_factory: Callable[[EntityKind], str] = new_id,
        clock: Callable[[], datetime] = _utcnow,
        score_min: float = SCORE_MIN,
        score_max: float = SCORE_MAX,
    ):
        self._new_id = id_factory
        self._clock = clock
        self.score_min = score_min
        self.score_max = score_max
        self._events: list[Event] = []
        self._wines: list[Wine] = []
        self._ratings: list[Rating] = []
        self._events_by_id: dict[str, Event] = {}
        self._wines_by_id: dict[str, Wine] = {}
        self._ratings_by_triple: dict[tuple[str, str, str], Rating] = {}

    # --- Snapshot views ---------------------------------------------------------

    @property
    def events(self) -> tuple[Event, ...]:
        return tuple(self._events)

    @property
    def wines(self) -> tuple[Wine, ...]:
        return tuple(self._wines)

    @property
    def ratings(self) -> tuple[Rating, ...]:
        return tuple(self._ratings)

    # --- Lookups ----------------------------------------------------------------

    def get_event(self, event_id: str | None) -> Event | None:
        return self._events_by_id.get(event_id) if event_id else None

    def get_wine(self, wine_id: str | None) -> Wine | None:
        return self._wines_by_id.get(wine_id) if wine_id else None

    def require_event(self, event_id: str) -> Event:
        """Lookup that raises NotFoundError instead of returning None."""
        event = self.get_event(event_id)
        if event is None:
            raise NotFoundError("Event", str(event_id), ErrorContext(event_id=event_id))
        return event

    def require_wine(self, wine_id: str) -> Wine:
        wine = self.get_wine(wine_id)
        if wine is None:
            raise NotFoundError("Wine", str(wine_id), ErrorContext(wine_id=wine_id))
        return wine

    def wines_for_event(self, event_id: str) -> list[Wine]:
        """Wines of one event in creation order."""
        return [w for w in self._wines if w.event_id == event_id]

    def first_wine_id(self, event_id: str) -> WineId | None:
        for wine in self._wines:
            if wine.event_id == event_id:
                return wine.id
        return None

    def ratings_for_wine(self, wine_id: str) -> list[Rating]:
        return [r for r in self._ratings if r.wine_id == wine_id]

    def ratings_for_event(self, event_id: str) -> list[Rating]:
        return [r for r in self._ratings if r.event_id == event_id]

    def find_rating(
        self, event_id: str, wine_id: str, taster_name: str | None,
    ) -> Rating | None:
        """Pure lookup by triple (taster name trimmed, case-sensitive)."""
        name = normalize_taster_name(taster_name)
        if not name:
            return None
        return self._ratings_by_triple.get((event_id, wine_id, name))

    def list_tasters(self, event_id: str) -> set[str]:
        """Distinct taster names that rated any wine of the event."""
        return {r.taster_name for r in self._ratings if r.event_id == event_id}

    # --- Mutators ---------------------------------------------------------------

    def create_event(self, title: str, date_value: date | str | None = None) -> Event:
        """Append a new event. Title is required after trimming."""
        clean_title = (title or "").strip()
        if not clean_title:
            raise ValidationError("Event title is required", field="title")
        event = Event(
            id=EventId(self._new_id(EntityKind.EVENT)),
            title=clean_title,
            date=_normalize_date(date_value),
        )
        self._events.append(event)
        self._events_by_id[event.id] = event
        return event

    def create_wine(self, event_id: str, fields: Mapping[str, object]) -> Wine:
        """Append a wine to an existing event. name and vintage are required."""
        if self.get_event(event_id) is None:
            raise ValidationError(
                f"Event '{event_id}' does not exist", field="event_id",
                context=ErrorContext(event_id=event_id),
            )
        name = str(fields.get("name") or "").strip()
        vintage = str(fields.get("vintage") or "").strip()
        if not name:
            raise ValidationError("Wine name is required", field="name")
        if not vintage:
            raise ValidationError("Wine vintage is required", field="vintage")

        optional = {
            key: str(fields.get(key) or "").strip() for key in _OPTIONAL_WINE_FIELDS
        }
        style = normalize_wine_style(fields.get("style"))
        image_ref = fields.get("image_ref")
        wine = Wine(
            id=WineId(self._new_id(EntityKind.WINE)),
            event_id=EventId(event_id),
            name=name,
            vintage=vintage,
            style=style,
            image_ref=image_ref if image_ref else None,
            **optional,
        )
        self._wines.append(wine)
        self._wines_by_id[wine.id] = wine
        return wine

    def save_rating(
        self,
        event_id: str,
        wine_id: str,
        taster_name: str,
        scores: Mapping[str, float],
        aroma_tags: Iterable[str] = (),
        notes: str = "",
    ) -> Rating:
        """Upsert the rating for (event_id, wine_id, taster_name).

        An existing rating keeps its id and created_at; scores, tags and notes
        are replaced. Axes missing from `scores` are stored as score_min.
        """
        context = ErrorContext(event_id=event_id, wine_id=wine_id, taster_name=taster_name)
        wine = self.get_wine(wine_id)
        if self.get_event(event_id) is None:
            raise ValidationError(
                f"Event '{event_id}' does not exist", field="event_id", context=context,
            )
        if wine is None:
            raise ValidationError(
                f"Wine '{wine_id}' does not exist", field="wine_id", context=context,
            )
        if wine.event_id != event_id:
            raise ValidationError(
                f"Wine '{wine_id}' does not belong to event '{event_id}'",
                field="wine_id", context=context,
            )
        name = normalize_taster_name(taster_name)
        if not name:
            raise ValidationError("Taster name is required", field="taster_name", context=context)

        provided: dict[str, float] = {}
        for key, value in scores.items():
            try:
                provided[RatingAxis(key).value] = value
            except ValueError:
                raise ValidationError(
                    f"Unknown rating axis '{key}'", field=str(key), context=context,
                )
        checked = {
            axis.value: validate_score(
                axis, provided.get(axis.value, self.score_min),
                self.score_min, self.score_max,
            )
            for axis in RatingAxis
        }
        tags = normalize_aroma_tags(aroma_tags)
        clean_notes = notes or ""

        now = self._clock()
        existing = self._ratings_by_triple.get((event_id, wine_id, name))
        if existing is not None:
            for key, value in checked.items():
                setattr(existing, key, value)
            existing.aroma_tags = tags
            existing.notes = clean_notes
            existing.updated_at = now
            return existing

        rating = Rating(
            id=RatingId(self._new_id(EntityKind.RATING)),
            event_id=EventId(event_id),
            wine_id=WineId(wine_id),
            taster_name=name,
            created_at=now,
            updated_at=now,
            aroma_tags=tags,
            notes=clean_notes,
            **checked,
        )
        self._ratings.append(rating)
        self._ratings_by_triple[rating.triple] = rating
        return rating

    # --- Bulk restore -----------------------------------------------------------

    def restore(
        self, events: Iterable[Event], wines: Iterable[Wine], ratings: Iterable[Rating],
    ) -> None:
        """Replace all collections at once, checking every invariant first.

        Raises ValidationError and leaves the store untouched on any violation.
        """
        events = list(events)
        wines = list(wines)
        ratings = list(ratings)

        events_by_id: dict[str, Event] = {}
        for event in events:
            if event.id in events_by_id:
                raise ValidationError(f"Duplicate event id '{event.id}'", field="events")
            events_by_id[event.id] = event

        wines_by_id: dict[str, Wine] = {}
        for wine in wines:
            if wine.id in wines_by_id:
                raise ValidationError(f"Duplicate wine id '{wine.id}'", field="wines")
            if wine.event_id not in events_by_id:
                raise ValidationError(
                    f"Wine '{wine.id}' references missing event '{wine.event_id}'",
                    field="wines",
                )
            wines_by_id[wine.id] = wine

        by_triple: dict[tuple[str, str, str], Rating] = {}
        rating_ids: set[str] = set()
        for rating in ratings:
            if rating.id in rating_ids:
                raise ValidationError(f"Duplicate rating id '{rating.id}'", field="ratings")
            rating_ids.add(rating.id)
            wine = wines_by_id.get(rating.wine_id)
            if wine is None or wine.event_id != rating.event_id:
                raise ValidationError(
                    f"Rating '{rating.id}' references an unknown wine/event pair",
                    field="ratings",
                )
            if rating.triple in by_triple:
                raise ValidationError(
                    f"Duplicate rating for taster '{rating.taster_name}' on wine '{rating.wine_id}'",
                    field="ratings",
                )
            by_triple[rating.triple] = rating

        self._events = events
        self._wines = wines
        self._ratings = ratings
        self._events_by_id = events_by_id
        self._wines_by_id = wines_by_id
        self._ratings_by_triple = by_triple
