"""Store Snapshot: serialization / deserialization for DomainStore.

Invariants:
    - store_to_snapshot produces a JSON-safe dict (no datetimes, no Enums, no tuples)
    - Every entity field is present in the snapshot; optional fields serialize as None
    - store_from_snapshot either returns a fully consistent store or raises SnapshotFormatError
    - Missing top-level keys mean empty collections (forward-compatible)

Design Decisions:
    - Extracted from domain_store.py: the store stays focused on invariants
    - Field tuples drive both directions so a new entity field is added in one place
    - Timestamps as ISO-8601 strings with offset
"""

from collections.abc import Callable
from datetime import datetime

from tasting.core.domain_store import DomainStore, normalize_wine_style
from tasting.core.entities import Event, Rating, Wine
from tasting.core.errors import SnapshotFormatError, ValidationError
from tasting.core.rating_form import normalize_aroma_tags, validate_score

_EVENT_FIELDS: tuple[str, ...] = ("id", "title", "date")
_WINE_FIELDS: tuple[str, ...] = (
    "id", "event_id", "name", "vintage", "varietal",
    "region", "producer", "style", "image_ref",
)
_RATING_SCORE_FIELDS: tuple[str, ...] = (
    "overall", "sweetness", "acidity", "tannins", "body",
)
_REQUIRED: dict[str, tuple[str, ...]] = {
    "event": ("id", "title"),
    "wine": ("id", "event_id", "name", "vintage"),
    "rating": ("id", "event_id", "wine_id", "taster_name", "created_at"),
}


# ─── Serialization ───────────────────────────────────────────────

def _event_to_dict(event: Event) -> dict:
    return {key: getattr(event, key) for key in _EVENT_FIELDS}


def _wine_to_dict(wine: Wine) -> dict:
    return {key: getattr(wine, key) for key in _WINE_FIELDS}


def _rating_to_dict(rating: Rating) -> dict:
    return {
        "id": rating.id,
        "event_id": rating.event_id,
        "wine_id": rating.wine_id,
        "taster_name": rating.taster_name,
        **{key: getattr(rating, key) for key in _RATING_SCORE_FIELDS},
        "aroma_tags": list(rating.aroma_tags),
        "notes": rating.notes,
        "created_at": rating.created_at.isoformat(),
        "updated_at": rating.updated_at.isoformat(),
    }


def store_to_snapshot(store: DomainStore) -> dict:
    """Serialize the three collections to a JSON-safe dict. Pure, no IO."""
    return {
        "events": [_event_to_dict(e) for e in store.events],
        "wines": [_wine_to_dict(w) for w in store.wines],
        "ratings": [_rating_to_dict(r) for r in store.ratings],
    }


# ─── Deserialization ─────────────────────────────────────────────

def _check_required(kind: str, record: object, index: int) -> dict:
    if not isinstance(record, dict):
        raise SnapshotFormatError(f"{kind} #{index} is not an object")
    missing = [key for key in _REQUIRED[kind] if record.get(key) in (None, "")]
    if missing:
        raise SnapshotFormatError(f"{kind} #{index} is missing {', '.join(missing)}")
    return record


def _parse_timestamp(value: object, index: int) -> datetime:
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise SnapshotFormatError(f"rating #{index} has an invalid timestamp {value!r}")


def _event_from_dict(record: dict) -> Event:
    return Event(
        id=str(record["id"]),
        title=str(record["title"]),
        date=str(record.get("date") or ""),
    )


def _wine_from_dict(record: dict, index: int) -> Wine:
    try:
        style = normalize_wine_style(record.get("style"))
    except ValidationError as e:
        raise SnapshotFormatError(f"wine #{index} has invalid values: {e}")
    return Wine(
        id=str(record["id"]),
        event_id=str(record["event_id"]),
        name=str(record["name"]),
        vintage=str(record["vintage"]),
        varietal=str(record.get("varietal") or ""),
        region=str(record.get("region") or ""),
        producer=str(record.get("producer") or ""),
        style=style,
        image_ref=record.get("image_ref") or None,
    )


def _rating_from_dict(record: dict, index: int, score_min: float, score_max: float) -> Rating:
    created_at = _parse_timestamp(record["created_at"], index)
    updated_raw = record.get("updated_at")
    updated_at = _parse_timestamp(updated_raw, index) if updated_raw else created_at
    try:
        scores = {}
        for key in _RATING_SCORE_FIELDS:
            raw = record.get(key)
            value = score_min if raw is None else float(raw)
            scores[key] = validate_score(key, value, score_min, score_max)
        tags = normalize_aroma_tags(record.get("aroma_tags") or [])
    except (TypeError, ValueError, ValidationError) as e:
        raise SnapshotFormatError(f"rating #{index} has invalid values: {e}")
    taster_name = str(record["taster_name"]).strip()
    if not taster_name:
        raise SnapshotFormatError(f"rating #{index} has a blank taster_name")
    return Rating(
        id=str(record["id"]),
        event_id=str(record["event_id"]),
        wine_id=str(record["wine_id"]),
        taster_name=taster_name,
        created_at=created_at,
        updated_at=updated_at,
        aroma_tags=tags,
        notes=str(record.get("notes") or ""),
        **scores,
    )


def store_from_snapshot(
    data: dict | None,
    store_factory: Callable[[], DomainStore] = DomainStore,
) -> DomainStore:
    """Rebuild a DomainStore from snapshot dict. Pure, no IO.

    Raises SnapshotFormatError on malformed records, scores outside the store's
    bounds, unknown wine styles, dangling references, duplicate rating ids or
    duplicate rating triples. An empty/None snapshot yields an empty store.
    """
    store = store_factory()
    if not data:
        return store
    if not isinstance(data, dict):
        raise SnapshotFormatError("top-level value is not an object")

    collections = {}
    for key in ("events", "wines", "ratings"):
        value = data.get(key) or []
        if not isinstance(value, list):
            raise SnapshotFormatError(f"'{key}' is not a list")
        collections[key] = value

    events = [
        _event_from_dict(_check_required("event", r, i))
        for i, r in enumerate(collections["events"])
    ]
    wines = [
        _wine_from_dict(_check_required("wine", r, i), i)
        for i, r in enumerate(collections["wines"])
    ]
    ratings = [
        _rating_from_dict(_check_required("rating", r, i), i, store.score_min, store.score_max)
        for i, r in enumerate(collections["ratings"])
    ]

    try:
        store.restore(events, wines, ratings)
    except ValidationError as e:
        raise SnapshotFormatError(e.message)
    return store
