"""Tasting Session: imperative shell around the store, navigator and persistence bridge.

Invariants:
    - The only place where DomainStore mutators are called
    - Every successful mutation is followed by exactly one save() call
    - A failed save is logged and exposed via last_save_ok; the mutation is NOT undone
    - Mutating operations check the current screen BEFORE touching the store, so a rejected
      transition never leaves an orphaned entity behind
    - One user action at a time: each method runs to completion before returning

Design Decisions:
    - Form submissions go through schemas/inputs.py, then DomainStore, then reduce()
    - Read views delegate to core/aggregation.py; nothing is cached between calls
    - open() builds the SQL-backed session from Settings; tests inject InMemoryKeyValueStore
"""

import logging
from collections.abc import Callable, Mapping
from datetime import date
from functools import partial

from tasting.config import Settings, get_settings
from tasting.core.aggregation import (
    CellarEntry, EventSummary, EventTimeline, WinePartition,
    cellar_overview, chronological_split, event_summary,
    partition_wines_by_rated_status, partition_wines_for_taster,
    wine_average_overall,
)
from tasting.core.domain_store import DomainStore
from tasting.core.domain_types import Screen
from tasting.core.entities import Event, Rating, Wine
from tasting.core.enforce_navigation import check_screen
from tasting.core.errors import IllegalTransitionError
from tasting.core.navigation import (
    EventCreated, NavigationState, RatingSaved, WineAdded, reduce,
)
from tasting.core.rating_form import RatingForm
from tasting.core.repository_protocols import KeyValueStore, SnapshotRepository
from tasting.infrastructure.kv_store import SqlKeyValueStore
from tasting.infrastructure.observability import setup_logging
from tasting.infrastructure.persistence import PersistenceBridge
from tasting.schemas.inputs import EventCreate, RatingSubmit, WineCreate, parse_input

logger = logging.getLogger(__name__)


class TastingSession:
    """One interactive user session over the persisted tasting data."""

    def __init__(
        self,
        store: DomainStore,
        repository: SnapshotRepository,
        state: NavigationState | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.repository = repository
        self._state = state or NavigationState()
        self._today = today
        self.last_save_ok = True

    @classmethod
    def open(
        cls,
        settings: Settings | None = None,
        kv: KeyValueStore | None = None,
        configure_logging: bool = True,
    ) -> "TastingSession":
        """Load persisted data (or start empty) and return a session at HOME."""
        settings = settings or get_settings()
        if configure_logging:
            setup_logging(settings.log_level, settings.log_format)
        bridge = PersistenceBridge(
            kv if kv is not None else SqlKeyValueStore(settings.storage_url),
            settings.storage_key,
            store_factory=partial(
                DomainStore, score_min=settings.score_min, score_max=settings.score_max,
            ),
        )
        store = bridge.load()
        logger.info("Tasting session opened", extra={"storage_key": settings.storage_key})
        return cls(store, bridge)

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def form(self) -> RatingForm:
        return self._state.form

    # --- Navigation -------------------------------------------------------------

    def dispatch(self, action: object) -> NavigationState:
        """Apply a navigation or form-edit action. Re-raises rejections after logging."""
        try:
            self._state = reduce(self._state, action, self.store)
        except IllegalTransitionError as e:
            logger.warning(
                e.message,
                extra={
                    "error_code": e.code,
                    "event_id": self._state.event_id,
                    "wine_id": self._state.wine_id,
                },
            )
            raise
        return self._state

    def _require_screen(self, screen: Screen, action: str) -> None:
        error = check_screen(self._state.screen, (screen,), action)
        if error is not None:
            logger.warning(error["message"], extra={"error_code": error["error_code"]})
            raise IllegalTransitionError(
                self._state.screen.value, action, error["message"],
                error_code=error["error_code"],
            )

    def _persist(self) -> bool:
        self.last_save_ok = self.repository.save(self.store)
        return self.last_save_ok

    # --- Mutations --------------------------------------------------------------

    def create_event(self, payload: Mapping[str, object]) -> Event:
        """Submit the create-event form, then open the new event."""
        self._require_screen(Screen.CREATING_EVENT, "EventCreated")
        data = parse_input(EventCreate, dict(payload))
        event = self.store.create_event(data.title, data.date)
        logger.info(f"Event created: {event.title}", extra={"event_id": event.id})
        self._persist()
        self.dispatch(EventCreated(event.id))
        return event

    def add_wine(self, payload: Mapping[str, object]) -> Wine:
        """Submit the add-wine form for the selected event."""
        self._require_screen(Screen.ADDING_WINE, "WineAdded")
        data = parse_input(WineCreate, dict(payload))
        wine = self.store.create_wine(self._state.event_id, data.to_fields())
        logger.info(
            f"Wine added: {wine.name} {wine.vintage}",
            extra={"event_id": wine.event_id, "wine_id": wine.id},
        )
        self._persist()
        self.dispatch(WineAdded(wine.id))
        return wine

    def save_rating(self, payload: Mapping[str, object] | None = None) -> Rating:
        """Save the rating on screen (or `payload`) for the current wine and taster."""
        self._require_screen(Screen.TASTING_WINE, "RatingSaved")
        if payload is not None:
            bounds = {"score_min": self.store.score_min, "score_max": self.store.score_max}
            data = parse_input(RatingSubmit, dict(payload), context=bounds)
            scores, tags, notes = data.scores(), data.tag_values(), data.notes
        else:
            form = self._state.form
            scores, tags, notes = form.scores, list(form.aroma_tags), form.notes

        state = self._state
        rating = self.store.save_rating(
            state.event_id, state.wine_id, state.taster_name, scores, tags, notes,
        )
        logger.info(
            "Rating saved",
            extra={
                "event_id": rating.event_id, "wine_id": rating.wine_id,
                "rating_id": rating.id, "taster_name": rating.taster_name,
            },
        )
        self._persist()
        self.dispatch(RatingSaved(rating.id))
        return rating

    # --- Views ------------------------------------------------------------------

    def timeline(self, reference_date: date | None = None) -> EventTimeline:
        """Home screen: upcoming and past events relative to today."""
        return chronological_split(self.store.events, reference_date or self._today())

    def cellar(self) -> WinePartition:
        """Cellar screen: wines split by whether anyone has rated them."""
        return partition_wines_by_rated_status(self.store.wines, self.store.ratings)

    def cellar_entries(self) -> list[CellarEntry]:
        return cellar_overview(self.store)

    def event_summary(self, event_id: str | None = None) -> EventSummary:
        return event_summary(self.store, event_id or self._state.event_id or "")

    def event_wines(self, event_id: str | None = None) -> list[Wine]:
        return self.store.wines_for_event(event_id or self._state.event_id or "")

    def wine_average(self, wine_id: str) -> float | None:
        return wine_average_overall(self.store, wine_id)

    def taster_progress(self) -> WinePartition:
        """Wines the current taster has / has not rated in the selected event."""
        state = self._state
        return partition_wines_for_taster(
            self.store, state.event_id or "", state.taster_name or "",
        )

    def tasters(self, event_id: str | None = None) -> set[str]:
        return self.store.list_tasters(event_id or self._state.event_id or "")
