"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "Compliance Document Matching"
    debug: bool = True

    # ── Standard catalog ─────────────────────────────────
    catalog_path: str = ""  # empty = bundled ISO 9001 / 27001 seed catalog
    default_standards: list[str] = ["ISO_9001_2015", "ISO_27001_2022"]

    # ── Matching rules ───────────────────────────────────
    matching_rules_path: str = ""  # JSON overrides for thresholds; empty = defaults

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
