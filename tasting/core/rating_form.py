"""Rating Form: the transient, in-progress rating a taster is editing.

Invariants:
    - RatingForm is immutable; every edit returns a new form
    - Scores stay within the bounds passed to the edit helpers
    - aroma_tags never contains duplicates: toggle removes if present, appends if absent
    - form_from_rating(None) is the blank form: every axis at the lowest allowed score

Design Decisions:
    - Form lives in NavigationState, not in the store: unsaved edits never touch entities
    - Score/tag validation shared with DomainStore.save_rating so both paths agree
"""

from dataclasses import dataclass, replace

from tasting.core.domain_types import AromaTag, RatingAxis, SCORE_MIN, SCORE_MAX
from tasting.core.entities import Rating
from tasting.core.errors import ValidationError


@dataclass(frozen=True)
class RatingForm:
    """Values shown on the rating screen for the selected wine and taster."""
    overall: float = 0.0
    sweetness: float = 0.0
    acidity: float = 0.0
    tannins: float = 0.0
    body: float = 0.0
    aroma_tags: tuple[str, ...] = ()
    notes: str = ""

    @property
    def scores(self) -> dict[str, float]:
        return {axis.value: getattr(self, axis.value) for axis in RatingAxis}


# ─── Validation ──────────────────────────────────────────────────

def validate_score(
    axis: RatingAxis | str, value: float, score_min: float = SCORE_MIN, score_max: float = SCORE_MAX,
) -> float:
    """Return value as float or raise ValidationError if outside bounds."""
    try:
        axis = RatingAxis(axis).value
    except ValueError:
        raise ValidationError(f"Unknown rating axis '{axis}'", field=str(axis))
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{axis} must be a number", field=axis)
    if not score_min <= value <= score_max:
        raise ValidationError(
            f"{axis} must be between {score_min} and {score_max}, got {value}",
            field=axis,
        )
    return float(value)


def validate_aroma_tag(tag: str) -> str:
    """Return the canonical tag value or raise ValidationError."""
    try:
        return AromaTag(tag).value
    except ValueError:
        raise ValidationError(f"Unknown aroma tag '{tag}'", field="aroma_tags")


def normalize_aroma_tags(tags) -> list[str]:
    """Validate tags and drop repeats, keeping first-seen order."""
    result: list[str] = []
    for tag in tags or ():
        value = validate_aroma_tag(tag)
        if value not in result:
            result.append(value)
    return result


# ─── Form construction & edits ───────────────────────────────────

def form_from_rating(rating: Rating | None, score_min: float = SCORE_MIN) -> RatingForm:
    """Pre-populate from a saved rating, or reset every axis to score_min."""
    if rating is None:
        return RatingForm(**{axis.value: float(score_min) for axis in RatingAxis})
    return RatingForm(
        overall=rating.overall,
        sweetness=rating.sweetness,
        acidity=rating.acidity,
        tannins=rating.tannins,
        body=rating.body,
        aroma_tags=tuple(rating.aroma_tags),
        notes=rating.notes,
    )


def with_score(
    form: RatingForm,
    axis: RatingAxis | str,
    value: float,
    score_min: float = SCORE_MIN,
    score_max: float = SCORE_MAX,
) -> RatingForm:
    checked = validate_score(axis, value, score_min, score_max)
    return replace(form, **{RatingAxis(axis).value: checked})


def toggle_aroma(form: RatingForm, tag: AromaTag | str) -> RatingForm:
    value = validate_aroma_tag(tag.value if isinstance(tag, AromaTag) else tag)
    if value in form.aroma_tags:
        tags = tuple(t for t in form.aroma_tags if t != value)
    else:
        tags = form.aroma_tags + (value,)
    return replace(form, aroma_tags=tags)


def with_notes(form: RatingForm, notes: str) -> RatingForm:
    return replace(form, notes=notes or "")
