"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration.

    Every field can be overridden with a ``CURATOR_``-prefixed variable,
    e.g. ``CURATOR_DB_PATH=/var/lib/curator/corpus.sqlite``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CURATOR_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    db_path: Path = Path("data/corpus.sqlite")
    taxonomy_path: Path = Path("config/taxonomy.yaml")
    catalog_path: Path = Path("config/catalog.json")
    policy_path: Path | None = None
    log_level: str = Field(default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR)$")
    json_logs: bool = False


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
