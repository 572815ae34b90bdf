"""
Application settings.

Values come from the environment (``CURATED_SPECIES_*``) or a local ``.env``
file. Lists are given as JSON, e.g.::

    CURATED_SPECIES_CURATORS='["gpohl", "crispinguppy"]'
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TAXONOMY_RANKS = [
    "kingdom",
    "phylum",
    "class",
    "order",
    "superfamily",
    "family",
    "subfamily",
    "tribe",
    "genus",
]


class Settings(BaseSettings):
    """Runtime configuration for the species list build."""

    model_config = SettingsConfigDict(
        env_prefix="CURATED_SPECIES_",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "curated-species"
    app_env: str = "development"
    debug: bool = False

    data_dir: Path = Path("data")

    curators: list[str] = Field(default_factory=list)
    taxonomy_ranks: list[str] = Field(default_factory=lambda: list(DEFAULT_TAXONOMY_RANKS))


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
