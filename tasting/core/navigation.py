"""Session Navigator: immutable screen state plus a pure, guarded transition function.

Invariants:
    - NavigationState is frozen; reduce() returns a new value or raises
    - A rejected action raises IllegalTransitionError and the input state is unchanged
    - HOME carries no selection; GoHome clears event, wine, taster and form
    - Entering TASTING_WINE or switching wine/taster ALWAYS reloads the form from
      find_rating(event, wine, taster), or resets it to defaults
    - The navigator stores ids and the taster name only, never entity data

Design Decisions:
    - (state, action, store) -> state reducer: testable without a UI harness
    - Store passed read-only: mutations happen in services/ before the matching
      *Created/*Added/*Saved action is dispatched
    - Dict dispatch keyed by action type over isinstance chains
"""

from dataclasses import dataclass, field, replace

from tasting.core.domain_store import DomainStore, normalize_taster_name
from tasting.core.domain_types import AromaTag, RatingAxis, Screen
from tasting.core.enforce_navigation import (
    check_event_exists,
    check_event_has_wines,
    check_event_selected,
    check_rating_matches_selection,
    check_screen,
    check_taster_name,
    check_wine_in_event,
)
from tasting.core.errors import ErrorContext, IllegalTransitionError, ValidationError
from tasting.core.rating_form import (
    RatingForm, form_from_rating, toggle_aroma, with_notes, with_score,
)


@dataclass(frozen=True)
class NavigationState:
    """Current screen and the selection it operates on."""
    screen: Screen = Screen.HOME
    event_id: str | None = None
    wine_id: str | None = None
    taster_name: str | None = None
    form: RatingForm = field(default_factory=RatingForm)


# ─── Actions ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class OpenCreateEvent:
    pass


@dataclass(frozen=True)
class CancelCreateEvent:
    pass


@dataclass(frozen=True)
class EventCreated:
    event_id: str


@dataclass(frozen=True)
class OpenEvent:
    event_id: str


@dataclass(frozen=True)
class OpenAddWine:
    pass


@dataclass(frozen=True)
class WineAdded:
    wine_id: str


@dataclass(frozen=True)
class CancelAddWine:
    pass


@dataclass(frozen=True)
class OpenTasterSelection:
    pass


@dataclass(frozen=True)
class StartTasting:
    taster_name: str
    wine_id: str | None = None


@dataclass(frozen=True)
class SwitchWine:
    wine_id: str


@dataclass(frozen=True)
class SetScore:
    axis: RatingAxis | str
    value: float


@dataclass(frozen=True)
class ToggleAroma:
    tag: AromaTag | str


@dataclass(frozen=True)
class SetNotes:
    notes: str


@dataclass(frozen=True)
class RatingSaved:
    rating_id: str


@dataclass(frozen=True)
class ChangeTaster:
    pass


@dataclass(frozen=True)
class GoHome:
    pass


# ─── Helpers ─────────────────────────────────────────────────────

def _rejection(state: NavigationState, action: object, error: dict) -> IllegalTransitionError:
    return IllegalTransitionError(
        state.screen.value,
        type(action).__name__,
        error["message"],
        error_code=error["error_code"],
        context=ErrorContext(
            event_id=state.event_id,
            wine_id=state.wine_id,
            taster_name=state.taster_name,
        ),
    )


def _guard(state: NavigationState, action: object, error: dict | None) -> None:
    if error is not None:
        raise _rejection(state, action, error)


def _allowed(state: NavigationState, action: object, *screens: Screen) -> None:
    _guard(state, action, check_screen(state.screen, screens, type(action).__name__))


def _load_form(store: DomainStore, event_id: str, wine_id: str, taster_name: str) -> RatingForm:
    return form_from_rating(store.find_rating(event_id, wine_id, taster_name), store.score_min)


def _event_detail(event_id: str) -> NavigationState:
    return NavigationState(screen=Screen.EVENT_DETAIL, event_id=event_id)


def _edit_form(state: NavigationState, action: object, edit) -> NavigationState:
    try:
        return replace(state, form=edit(state.form))
    except ValidationError as e:
        raise _rejection(
            state, action, {"error_code": "INVALID_FORM_VALUE", "message": e.message},
        ) from e


# ─── Transition handlers ────────────────────────────────────────

def _open_create_event(state, action, store):
    _allowed(state, action, Screen.HOME)
    return NavigationState(screen=Screen.CREATING_EVENT)


def _cancel_create_event(state, action, store):
    _allowed(state, action, Screen.CREATING_EVENT)
    return NavigationState()


def _event_created(state, action, store):
    _allowed(state, action, Screen.CREATING_EVENT)
    _guard(state, action, check_event_exists(store, action.event_id))
    return _event_detail(action.event_id)


def _open_event(state, action, store):
    _allowed(state, action, Screen.HOME, Screen.EVENT_DETAIL)
    _guard(state, action, check_event_exists(store, action.event_id))
    return _event_detail(action.event_id)


def _open_add_wine(state, action, store):
    _allowed(state, action, Screen.EVENT_DETAIL)
    _guard(state, action, check_event_selected(store, state.event_id))
    return NavigationState(screen=Screen.ADDING_WINE, event_id=state.event_id)


def _wine_added(state, action, store):
    _allowed(state, action, Screen.ADDING_WINE)
    _guard(state, action, check_wine_in_event(store, state.event_id, action.wine_id))
    return _event_detail(state.event_id)


def _cancel_add_wine(state, action, store):
    _allowed(state, action, Screen.ADDING_WINE)
    return _event_detail(state.event_id)


def _open_taster_selection(state, action, store):
    _allowed(state, action, Screen.EVENT_DETAIL)
    _guard(state, action, check_event_selected(store, state.event_id))
    return NavigationState(screen=Screen.SELECTING_TASTER, event_id=state.event_id)


def _start_tasting(state, action, store):
    _allowed(state, action, Screen.SELECTING_TASTER)
    _guard(
        state, action,
        check_event_selected(store, state.event_id)
        or check_taster_name(action.taster_name)
        or check_event_has_wines(store, state.event_id),
    )
    wine_id = action.wine_id or store.first_wine_id(state.event_id)
    _guard(state, action, check_wine_in_event(store, state.event_id, wine_id))
    taster_name = normalize_taster_name(action.taster_name)
    return NavigationState(
        screen=Screen.TASTING_WINE,
        event_id=state.event_id,
        wine_id=wine_id,
        taster_name=taster_name,
        form=_load_form(store, state.event_id, wine_id, taster_name),
    )


def _switch_wine(state, action, store):
    _allowed(state, action, Screen.TASTING_WINE)
    _guard(state, action, check_wine_in_event(store, state.event_id, action.wine_id))
    return replace(
        state,
        wine_id=action.wine_id,
        form=_load_form(store, state.event_id, action.wine_id, state.taster_name),
    )


def _set_score(state, action, store):
    _allowed(state, action, Screen.TASTING_WINE)
    return _edit_form(
        state, action,
        lambda form: with_score(form, action.axis, action.value, store.score_min, store.score_max),
    )


def _toggle_aroma(state, action, store):
    _allowed(state, action, Screen.TASTING_WINE)
    return _edit_form(state, action, lambda form: toggle_aroma(form, action.tag))


def _set_notes(state, action, store):
    _allowed(state, action, Screen.TASTING_WINE)
    return _edit_form(state, action, lambda form: with_notes(form, action.notes))


def _rating_saved(state, action, store):
    _allowed(state, action, Screen.TASTING_WINE)
    _guard(
        state, action,
        check_rating_matches_selection(
            store, action.rating_id, state.event_id, state.wine_id, state.taster_name,
        ),
    )
    return replace(
        state, form=_load_form(store, state.event_id, state.wine_id, state.taster_name),
    )


def _change_taster(state, action, store):
    _allowed(state, action, Screen.TASTING_WINE)
    _guard(state, action, check_event_selected(store, state.event_id))
    return NavigationState(screen=Screen.SELECTING_TASTER, event_id=state.event_id)


def _go_home(state, action, store):
    return NavigationState()


_HANDLERS = {
    OpenCreateEvent: _open_create_event,
    CancelCreateEvent: _cancel_create_event,
    EventCreated: _event_created,
    OpenEvent: _open_event,
    OpenAddWine: _open_add_wine,
    WineAdded: _wine_added,
    CancelAddWine: _cancel_add_wine,
    OpenTasterSelection: _open_taster_selection,
    StartTasting: _start_tasting,
    SwitchWine: _switch_wine,
    SetScore: _set_score,
    ToggleAroma: _toggle_aroma,
    SetNotes: _set_notes,
    RatingSaved: _rating_saved,
    ChangeTaster: _change_taster,
    GoHome: _go_home,
}


def reduce(state: NavigationState, action: object, store: DomainStore) -> NavigationState:
    """Apply one action. Raises IllegalTransitionError if any guard fails."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise IllegalTransitionError(
            state.screen.value, type(action).__name__, "unknown action",
            error_code="UNKNOWN_ACTION",
        )
    return handler(state, action, store)
