"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - EventId, WineId, RatingId wrap opaque strings produced by core/identity.py
    - Scores are bounded SCORE_MIN..SCORE_MAX (inclusive)
    - All closed vocabularies encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (snapshot is JSON)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

EventId = NewType("EventId", str)
WineId = NewType("WineId", str)
RatingId = NewType("RatingId", str)


# ─── Value Types ─────────────────────────────────────────────────

Score = NewType("Score", float)  # SCORE_MIN–SCORE_MAX

SCORE_MIN: float = 0.0
SCORE_MAX: float = 5.0

STORAGE_KEY: str = "barcelona-wine-club:v1"


# ─── Enums ───────────────────────────────────────────────────────

class EntityKind(str, Enum):
    """Prefix used by the identity generator for each entity collection."""
    EVENT = "event"
    WINE = "wine"
    RATING = "rating"


class AromaTag(str, Enum):
    """Fixed aroma vocabulary offered on the rating form."""
    FRUITY = "Fruity"
    FLORAL = "Floral"
    SPICY = "Spicy"
    OAKY = "Oaky"
    MINERAL = "Mineral"
    HERBAL = "Herbal"
    EARTHY = "Earthy"
    CITRUS = "Citrus"
    BERRIES = "Berries"


class RatingAxis(str, Enum):
    """Scored dimensions of a rating. OVERALL drives every aggregate."""
    OVERALL = "overall"
    SWEETNESS = "sweetness"
    ACIDITY = "acidity"
    TANNINS = "tannins"
    BODY = "body"


class WineStyle(str, Enum):
    """Optional style label for a wine. Blank is stored as an empty string."""
    RED = "red"
    WHITE = "white"
    ROSE = "rose"
    SPARKLING = "sparkling"
    FORTIFIED = "fortified"
    DESSERT = "dessert"
    ORANGE = "orange"


class Screen(str, Enum):
    """Navigator screens. Selections travel alongside in NavigationState."""
    HOME = "home"
    CREATING_EVENT = "creating_event"
    EVENT_DETAIL = "event_detail"
    ADDING_WINE = "adding_wine"
    SELECTING_TASTER = "selecting_taster"
    TASTING_WINE = "tasting_wine"
