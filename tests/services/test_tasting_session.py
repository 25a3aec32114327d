"""Tasting Session: tests for the shell that sequences store, navigator and persistence.

Tests cover:
    - The full flow: create event -> add wine -> pick taster -> rate -> switch wine
    - Exactly one save per successful mutation; failed saves keep in-memory state
    - Mutations on the wrong screen are rejected BEFORE the store changes
    - Reopening a session from the same storage restores the data; unreachable storage starts empty
    - Configured score bounds apply to payloads and to the blank form
    - View helpers delegate to aggregation
"""

import json
from datetime import date

import pytest

from tasting.config import Settings
from tasting.core.domain_store import DomainStore
from tasting.core.domain_types import RatingAxis, Screen
from tasting.core.errors import IllegalTransitionError, PersistenceError, ValidationError
from tasting.core.navigation import (
    ChangeTaster, GoHome, OpenAddWine, OpenCreateEvent, OpenEvent, OpenTasterSelection,
    SetNotes, SetScore, StartTasting, SwitchWine, ToggleAroma,
)
from tasting.infrastructure.kv_store import InMemoryKeyValueStore
from tasting.services.tasting_session import TastingSession

KEY = "barcelona-wine-club:v1"


class RecordingRepository:
    """SnapshotRepository double counting saves."""

    def __init__(self, succeed: bool = True):
        self.saves = 0
        self.succeed = succeed

    def load(self) -> DomainStore:
        return DomainStore()

    def save(self, store: DomainStore) -> bool:
        self.saves += 1
        return self.succeed


class BrokenKeyValueStore(InMemoryKeyValueStore):
    def set(self, key: str, value: bytes) -> None:
        raise PersistenceError("read-only medium", "save")


def _settings() -> Settings:
    return Settings(_env_file=None, storage_url="sqlite:///:memory:", storage_key=KEY)


def _session(repository=None) -> TastingSession:
    return TastingSession(
        DomainStore(), repository or RecordingRepository(), today=lambda: date(2026, 3, 1),
    )


def _priorat(session: TastingSession):
    session.dispatch(OpenCreateEvent())
    event = session.create_event({"title": "Priorat Night", "date": "2026-03-14"})
    session.dispatch(OpenAddWine())
    wine = session.add_wine({"name": "Clos Mogador", "vintage": "2018"})
    return event, wine


# ─── Flow ────────────────────────────────────────────────────────

def test_full_tasting_flow():
    repo = RecordingRepository()
    session = _session(repo)
    event, w1 = _priorat(session)
    assert session.state.screen == Screen.EVENT_DETAIL
    assert session.state.event_id == event.id

    session.dispatch(OpenAddWine())
    w2 = session.add_wine({"name": "L'Ermita", "vintage": "2016", "style": "red"})

    session.dispatch(OpenTasterSelection())
    session.dispatch(StartTasting("Ana"))
    assert session.state.wine_id == w1.id

    session.dispatch(SetScore(RatingAxis.OVERALL, 4))
    session.dispatch(ToggleAroma("Berries"))
    session.dispatch(SetNotes("Dense"))
    rating = session.save_rating()
    assert rating.overall == 4.0
    assert rating.aroma_tags == ["Berries"]

    session.dispatch(SwitchWine(w2.id))
    assert session.form.overall == 0.0
    session.save_rating({"overall": 3, "aroma_tags": ["Spicy"]})

    session.dispatch(SwitchWine(w1.id))
    assert session.form.notes == "Dense"
    assert repo.saves == 5  # event, 2 wines, 2 ratings
    assert session.tasters() == {"Ana"}
    assert session.event_summary().wine_count == 2


def test_priorat_upsert_through_session():
    session = _session()
    event, wine = _priorat(session)
    session.dispatch(OpenTasterSelection())
    session.dispatch(StartTasting("Ana"))
    first = session.save_rating({"overall": 4})
    second = session.save_rating({"overall": 5})

    assert second.id == first.id
    assert len(session.store.ratings) == 1
    assert session.wine_average(wine.id) == 5
    assert session.form.overall == 5.0


def test_two_tasters_average_and_progress():
    session = _session()
    event, wine = _priorat(session)
    session.dispatch(OpenTasterSelection())
    session.dispatch(StartTasting("Ana"))
    session.save_rating({"overall": 4})
    session.dispatch(GoHome())
    assert session.state.event_id is None

    session.dispatch(OpenCreateEvent())
    session.dispatch(GoHome())
    session.dispatch(OpenEvent(event.id))
    session.dispatch(OpenTasterSelection())
    session.dispatch(StartTasting("Bob"))
    assert session.taster_progress().unrated == [wine]
    session.save_rating({"overall": 2})
    assert session.taster_progress().rated == [wine]
    session.dispatch(ChangeTaster())

    assert session.wine_average(wine.id) == 3
    assert session.tasters(event.id) == {"Ana", "Bob"}


# ─── Guards before mutation ──────────────────────────────────────

def test_add_wine_on_wrong_screen_does_not_touch_store():
    repo = RecordingRepository()
    session = _session(repo)
    with pytest.raises(IllegalTransitionError):
        session.add_wine({"name": "W", "vintage": "2018"})
    assert session.store.wines == ()
    assert repo.saves == 0


def test_create_event_requires_creating_screen():
    session = _session()
    with pytest.raises(IllegalTransitionError):
        session.create_event({"title": "Sneaky"})
    assert session.store.events == ()


def test_invalid_payload_is_validation_error_and_no_save():
    repo = RecordingRepository()
    session = _session(repo)
    session.dispatch(OpenCreateEvent())
    with pytest.raises(ValidationError):
        session.create_event({"title": "  "})
    assert session.state.screen == Screen.CREATING_EVENT
    assert repo.saves == 0


def test_save_rating_requires_tasting_screen():
    session = _session()
    _priorat(session)
    with pytest.raises(IllegalTransitionError):
        session.save_rating({"overall": 4})
    assert session.store.ratings == ()


# ─── Persistence ─────────────────────────────────────────────────

def test_failed_save_keeps_mutation_and_flags_it():
    repo = RecordingRepository(succeed=False)
    session = _session(repo)
    event, wine = _priorat(session)
    assert session.last_save_ok is False
    assert session.store.get_wine(wine.id) is not None
    assert session.state.screen == Screen.EVENT_DETAIL


def test_open_and_reopen_restores_data():
    kv = InMemoryKeyValueStore()
    session = TastingSession.open(_settings(), kv=kv, configure_logging=False)
    event, wine = _priorat(session)
    session.dispatch(OpenTasterSelection())
    session.dispatch(StartTasting("Ana"))
    session.save_rating({"overall": 4.5})

    reopened = TastingSession.open(_settings(), kv=kv, configure_logging=False)
    assert reopened.state.screen == Screen.HOME
    assert [e.title for e in reopened.store.events] == ["Priorat Night"]
    assert reopened.store.find_rating(event.id, wine.id, "Ana").overall == 4.5


def test_open_with_corrupt_storage_starts_empty():
    kv = InMemoryKeyValueStore({KEY: b"garbage"})
    session = TastingSession.open(_settings(), kv=kv, configure_logging=False)
    assert session.store.events == ()


def test_open_with_sqlite_backend():
    session = TastingSession.open(_settings(), configure_logging=False)
    session.dispatch(OpenCreateEvent())
    session.create_event({"title": "Cava Brunch"})
    assert session.last_save_ok is True


def test_open_with_unreachable_database_starts_empty(tmp_path):
    url = f"sqlite:///{tmp_path / 'missing_dir' / 'tasting.db'}"
    settings = Settings(_env_file=None, storage_url=url, storage_key=KEY)
    session = TastingSession.open(settings, configure_logging=False)

    assert session.state.screen == Screen.HOME
    assert session.store.events == ()
    assert session.repository.last_error.code == "PERSISTENCE_ERROR"

    session.dispatch(OpenCreateEvent())
    event = session.create_event({"title": "Offline tasting"})
    assert session.last_save_ok is False
    assert session.store.get_event(event.id) is not None


def test_broken_storage_does_not_abort_session():
    session = TastingSession.open(_settings(), kv=BrokenKeyValueStore(), configure_logging=False)
    session.dispatch(OpenCreateEvent())
    event = session.create_event({"title": "Offline tasting"})
    assert session.last_save_ok is False
    assert session.store.get_event(event.id) is not None


def test_saved_payload_is_json_with_all_collections():
    kv = InMemoryKeyValueStore()
    session = TastingSession.open(_settings(), kv=kv, configure_logging=False)
    _priorat(session)
    stored = json.loads(kv.get(KEY))
    assert set(stored) == {"events", "wines", "ratings"}
    assert stored["wines"][0]["name"] == "Clos Mogador"


# ─── Configured score bounds ─────────────────────────────────────

def _bounded_session(**bounds) -> TastingSession:
    settings = Settings(_env_file=None, storage_key=KEY, **bounds)
    session = TastingSession.open(settings, kv=InMemoryKeyValueStore(), configure_logging=False)
    _priorat(session)
    session.dispatch(OpenTasterSelection())
    session.dispatch(StartTasting("Ana"))
    return session


def test_wider_scale_accepts_payload_above_default_max():
    session = _bounded_session(score_max=10)
    assert session.save_rating({"overall": 7}).overall == 7.0
    with pytest.raises(ValidationError):
        session.save_rating({"overall": 11})


def test_blank_form_starts_at_configured_minimum():
    session = _bounded_session(score_min=1)
    assert session.form.overall == 1.0
    rating = session.save_rating()
    assert rating.scores == {axis.value: 1.0 for axis in RatingAxis}


def test_payload_below_configured_minimum_is_rejected():
    session = _bounded_session(score_min=1)
    with pytest.raises(ValidationError) as exc:
        session.save_rating({"overall": 0.5})
    assert exc.value.field == "overall"
    assert session.store.ratings == ()


# ─── Views ───────────────────────────────────────────────────────

def test_timeline_uses_injected_today():
    session = _session()
    session.dispatch(OpenCreateEvent())
    session.create_event({"title": "Future", "date": "2026-04-01"})
    session.dispatch(GoHome())
    session.dispatch(OpenCreateEvent())
    session.create_event({"title": "Past", "date": "2026-02-01"})
    session.dispatch(GoHome())
    session.dispatch(OpenCreateEvent())
    session.create_event({"title": "Someday"})

    timeline = session.timeline()
    assert [e.title for e in timeline.upcoming] == ["Future"]
    assert [e.title for e in timeline.past] == ["Past", "Someday"]


def test_cellar_views():
    session = _session()
    event, wine = _priorat(session)
    session.dispatch(OpenAddWine())
    other = session.add_wine({"name": "L'Ermita", "vintage": "2016"})
    session.dispatch(OpenTasterSelection())
    session.dispatch(StartTasting("Ana"))
    session.save_rating({"overall": 4})

    cellar = session.cellar()
    assert cellar.rated == [wine]
    assert cellar.unrated == [other]
    entries = session.cellar_entries()
    assert entries[0].average_overall == 4.0
    assert session.event_wines() == [wine, other]
