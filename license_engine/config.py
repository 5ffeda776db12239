"""Engine Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): single instance per process
    - Defaults work out of the box: built-in rule table, exact duplicate policy

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - catalog_path optional: a JSON document replaces the built-in table when set
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Catalog
    catalog_path: str | None = None

    @field_validator("catalog_path", mode="before")
    @classmethod
    def blank_path_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # Capture sessions
    capture_duplicate_policy: Literal["exact", "closure"] = "exact"

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
