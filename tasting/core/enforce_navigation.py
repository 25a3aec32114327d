"""Navigation Guard Enforcement: validates every precondition of a screen transition.

Invariants:
    - All functions are PURE: no IO, no side effects, store is only read
    - Return error dict on violation, None on success
    - Error dicts always carry error_code and message

Design Decisions:
    - Pure check functions chained with `or` in navigation.py: first error wins
    - Return dicts (not exceptions): the reducer converts the first failure into
      IllegalTransitionError, keeping each guard trivially testable
"""

from tasting.core.domain_store import DomainStore, normalize_taster_name
from tasting.core.domain_types import Screen


def check_screen(current: Screen, allowed: tuple[Screen, ...], action: str) -> dict | None:
    """The action is only legal from the listed screens."""
    if current not in allowed:
        return {
            "status": "error",
            "error_code": "WRONG_SCREEN",
            "message": (
                f"{action} is only allowed from "
                f"{', '.join(s.value for s in allowed)}, not {current.value}."
            ),
        }
    return None


def check_event_exists(store: DomainStore, event_id: str | None) -> dict | None:
    if store.get_event(event_id) is None:
        return {
            "status": "error",
            "error_code": "EVENT_NOT_FOUND",
            "message": f"Event '{event_id}' does not exist.",
        }
    return None


def check_event_selected(store: DomainStore, event_id: str | None) -> dict | None:
    """A screen that works on an event needs one selected and still present."""
    if not event_id:
        return {
            "status": "error",
            "error_code": "NO_EVENT_SELECTED",
            "message": "No event is selected.",
        }
    return check_event_exists(store, event_id)


def check_taster_name(taster_name: str | None) -> dict | None:
    if not normalize_taster_name(taster_name):
        return {
            "status": "error",
            "error_code": "TASTER_NAME_REQUIRED",
            "message": "Enter a taster name before starting the tasting.",
        }
    return None


def check_event_has_wines(store: DomainStore, event_id: str) -> dict | None:
    if store.first_wine_id(event_id) is None:
        return {
            "status": "error",
            "error_code": "NO_WINES",
            "message": "This event has no wines yet. Add a wine before tasting.",
        }
    return None


def check_wine_in_event(
    store: DomainStore, event_id: str | None, wine_id: str | None,
) -> dict | None:
    wine = store.get_wine(wine_id)
    if wine is None or wine.event_id != event_id:
        return {
            "status": "error",
            "error_code": "WINE_NOT_IN_EVENT",
            "message": f"Wine '{wine_id}' is not part of event '{event_id}'.",
        }
    return None


def check_rating_matches_selection(
    store: DomainStore,
    rating_id: str,
    event_id: str | None,
    wine_id: str | None,
    taster_name: str | None,
) -> dict | None:
    """A saved rating only refreshes the form it was captured from."""
    rating = store.find_rating(event_id or "", wine_id or "", taster_name)
    if rating is None or rating.id != rating_id:
        return {
            "status": "error",
            "error_code": "RATING_MISMATCH",
            "message": f"Rating '{rating_id}' does not match the wine and taster on screen.",
        }
    return None
