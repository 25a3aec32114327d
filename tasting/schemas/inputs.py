"""Input Schemas: Pydantic models with field-level validation for form submissions.

Invariants:
    - EventCreate.title: 1-200 chars after strip
    - EventCreate.date: ISO calendar date or None (blank strings become None)
    - WineCreate.name / vintage: non-empty after strip
    - RatingSubmit scores: within the bounds given in the validation context (default 0.0-5.0);
      aroma_tags drawn from AromaTag, repeats dropped
    - parse_input converts pydantic errors into the domain ValidationError

Design Decisions:
    - field_validator for side-effect-free transforms (strip): keeps models pure
    - Schemas stop bad UI payloads early; DomainStore re-checks its own invariants,
      so the store stays consistent even when called without a schema
"""

import datetime as dt
from typing import TypeVar

from pydantic import (
    BaseModel, Field, ValidationError as PydanticValidationError, ValidationInfo, field_validator,
)

from tasting.core.domain_types import AromaTag, WineStyle, SCORE_MAX, SCORE_MIN
from tasting.core.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def _strip(v: object) -> object:
    return v.strip() if isinstance(v, str) else v


class EventCreate(BaseModel):
    """Event creation form."""
    title: str = Field(min_length=1, max_length=200)
    date: dt.date | None = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return _strip(v)

    @field_validator("date", mode="before")
    @classmethod
    def blank_date_is_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return _strip(v)


class WineCreate(BaseModel):
    """Add-wine form. Only name and vintage are required."""
    name: str = Field(min_length=1, max_length=200)
    vintage: str = Field(min_length=1, max_length=20)
    varietal: str = Field("", max_length=200)
    region: str = Field("", max_length=200)
    producer: str = Field("", max_length=200)
    style: WineStyle | None = None
    image_ref: str | None = None

    @field_validator("name", "vintage", "varietal", "region", "producer", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        return "" if v is None else _strip(v)

    @field_validator("style", mode="before")
    @classmethod
    def blank_style_is_none(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    def to_fields(self) -> dict:
        """Field mapping accepted by DomainStore.create_wine."""
        return {
            "name": self.name,
            "vintage": self.vintage,
            "varietal": self.varietal,
            "region": self.region,
            "producer": self.producer,
            "style": self.style.value if self.style else "",
            "image_ref": self.image_ref,
        }


class RatingSubmit(BaseModel):
    """Rating form submission for the wine and taster on screen.

    Score bounds come from the validation context ("score_min"/"score_max"),
    falling back to SCORE_MIN..SCORE_MAX. Omitted axes stay None.
    """
    overall: float | None = None
    sweetness: float | None = None
    acidity: float | None = None
    tannins: float | None = None
    body: float | None = None
    aroma_tags: list[AromaTag] = Field(default_factory=list)
    notes: str = Field("", max_length=5000)

    @field_validator("overall", "sweetness", "acidity", "tannins", "body")
    @classmethod
    def within_score_bounds(cls, v: float | None, info: ValidationInfo) -> float | None:
        if v is None:
            return v
        bounds = info.context or {}
        low = bounds.get("score_min", SCORE_MIN)
        high = bounds.get("score_max", SCORE_MAX)
        if not low <= v <= high:
            raise ValueError(f"must be between {low} and {high}")
        return v

    @field_validator("aroma_tags")
    @classmethod
    def drop_repeated_tags(cls, v: list[AromaTag]) -> list[AromaTag]:
        seen: list[AromaTag] = []
        for tag in v:
            if tag not in seen:
                seen.append(tag)
        return seen

    def scores(self) -> dict[str, float]:
        """Submitted axes only; the store fills omitted axes with its score_min."""
        values = {
            "overall": self.overall,
            "sweetness": self.sweetness,
            "acidity": self.acidity,
            "tannins": self.tannins,
            "body": self.body,
        }
        return {axis: value for axis, value in values.items() if value is not None}

    def tag_values(self) -> list[str]:
        return [tag.value for tag in self.aroma_tags]


def parse_input(model: type[ModelT], data: dict, context: dict | None = None) -> ModelT:
    """Validate a raw payload; the first failing field becomes a ValidationError."""
    try:
        return model.model_validate(data, context=context)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or model.__name__
        raise ValidationError(f"{field}: {first.get('msg', 'invalid value')}", field=field)
