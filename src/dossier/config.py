"""Settings for Dossier connectors, resolution and guardrails.

Values come from, highest priority first: ``DOSSIER_*`` environment
variables, a local ``.env`` file, then ``~/.config/dossier/config.toml``.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dossier.aggregation.clustering import ClusterStrategy

logger = logging.getLogger(__name__)

CONFIG_FILE_PATH = Path.home() / ".config" / "dossier" / "config.toml"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _load_config_file(config_path: Path | None = None) -> dict[str, Any]:
    """Read the TOML config file.

    Args:
        config_path: File to read. Defaults to CONFIG_FILE_PATH.

    Returns:
        Parsed top-level table; empty when the file is missing or unreadable.
    """
    path = config_path or CONFIG_FILE_PATH
    if not path.is_file():
        return {}

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {type(e).__name__}")
        return {}


class Settings(BaseSettings):
    """Dossier settings.

    Connector credentials are SecretStr and are masked in repr and str.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOSSIER_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Connector credentials
    google_search_api_key: SecretStr | None = None
    google_search_engine_id: SecretStr | None = None
    hibp_api_key: SecretStr | None = None
    geonames_username: SecretStr | None = None
    newsapi_key: SecretStr | None = None

    # Connector switches
    google_search_enabled: bool = True
    username_search_enabled: bool = True
    hibp_enabled: bool = True
    wayback_machine_enabled: bool = True
    news_enabled: bool = True
    geonames_enabled: bool = True

    # Connector rate limits (requests per minute)
    google_search_rate_limit: int = Field(default=60, ge=1)
    username_search_rate_limit: int = Field(default=20, ge=1)
    hibp_rate_limit: int = Field(default=40, ge=1)
    wayback_machine_rate_limit: int = Field(default=30, ge=1)
    news_rate_limit: int = Field(default=60, ge=1)
    geonames_rate_limit: int = Field(default=30, ge=1)

    # Resolution defaults for person_search
    default_confidence_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    default_max_results: int = Field(default=50, ge=1)
    cluster_strategy: ClusterStrategy = ClusterStrategy.SEED

    # Guardrails
    max_queries_per_hour: int = Field(default=100, ge=1)

    log_level: str = "INFO"

    @model_validator(mode="before")
    @classmethod
    def merge_config_file(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fill fields the environment left unset from the config file."""
        file_values = {
            key: value
            for key, value in _load_config_file().items()
            if key in cls.model_fields and values.get(key) is None
        }
        return {**values, **file_values}

    def has_google_search_credentials(self) -> bool:
        """Both the API key and the search engine id are configured."""
        return bool(self.google_search_api_key) and bool(self.google_search_engine_id)

    def has_hibp_credentials(self) -> bool:
        return bool(self.hibp_api_key)

    def __repr__(self) -> str:
        parts = []
        for name in type(self).model_fields:
            value = getattr(self, name)
            if isinstance(value, SecretStr):
                parts.append(f"{name}=SecretStr('**********')")
            else:
                parts.append(f"{name}={value!r}")
        return f"Settings({', '.join(parts)})"

    __str__ = __repr__


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide Settings, created on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached Settings so the next get_settings() reloads them."""
    global _settings
    _settings = None


def configure_logging(level: str = "INFO") -> None:
    """Route Dossier logs to stderr at the given level."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = [
    "CONFIG_FILE_PATH",
    "Settings",
    "configure_logging",
    "get_settings",
    "reset_settings",
]
