"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - Every setting has a working default: the tracker runs with no environment at all
    - get_settings() is cached (lru_cache): single instance per process
    - score_min < score_max

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - TASTING_ env prefix keeps the tracker's variables apart from the host's
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tasting.core.domain_types import SCORE_MAX, SCORE_MIN, STORAGE_KEY


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="TASTING_", case_sensitive=False,
    )

    # Storage
    storage_url: str = "sqlite:///tasting.db"
    storage_key: str = STORAGE_KEY

    @field_validator("storage_url", mode="before")
    @classmethod
    def convert_plain_path(cls, v: str) -> str:
        """A bare file path means a SQLite database at that path."""
        if isinstance(v, str) and "://" not in v:
            return f"sqlite:///{v}"
        return v

    # Rating scale
    score_min: float = SCORE_MIN
    score_max: float = SCORE_MAX

    @model_validator(mode="after")
    def check_score_bounds(self) -> "Settings":
        if self.score_min >= self.score_max:
            raise ValueError("score_min must be lower than score_max")
        return self

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
