"""Registry of person lookup connectors."""

import logging

from dossier.config import Settings, get_settings
from dossier.connectors.archives import WaybackMachineConnector
from dossier.connectors.base import ConnectorConfig, PersonConnector
from dossier.connectors.breach_indicators import HIBPConnector
from dossier.connectors.geospatial import GeoNamesConnector
from dossier.connectors.news_archives import GoogleNewsConnector
from dossier.connectors.search_engines import GoogleSearchConnector
from dossier.connectors.username_search import UsernameSearchConnector
from dossier.models import SourceType

logger = logging.getLogger(__name__)


def build_connector_configs(settings: Settings) -> dict[str, ConnectorConfig]:
    """Per-connector configuration derived from application settings."""
    return {
        "google_search": ConnectorConfig(
            enabled=settings.google_search_enabled,
            api_key=settings.google_search_api_key,
            rate_limit=settings.google_search_rate_limit,
            custom_params={
                "search_engine_id": (
                    settings.google_search_engine_id.get_secret_value()
                    if settings.google_search_engine_id
                    else None
                )
            },
        ),
        "username_search": ConnectorConfig(
            enabled=settings.username_search_enabled,
            rate_limit=settings.username_search_rate_limit,
        ),
        "hibp": ConnectorConfig(
            enabled=settings.hibp_enabled,
            api_key=settings.hibp_api_key,
            rate_limit=settings.hibp_rate_limit,
        ),
        "wayback_machine": ConnectorConfig(
            enabled=settings.wayback_machine_enabled,
            rate_limit=settings.wayback_machine_rate_limit,
        ),
        "google_news": ConnectorConfig(
            enabled=settings.news_enabled,
            api_key=settings.newsapi_key,
            rate_limit=settings.news_rate_limit,
        ),
        "geonames": ConnectorConfig(
            enabled=settings.geonames_enabled,
            api_key=settings.geonames_username,
            rate_limit=settings.geonames_rate_limit,
        ),
    }


class ConnectorRegistry:
    """Holds connectors by id.

    Args:
        settings: Settings to configure the built-in connectors from.
        register_defaults: Register the built-in connectors (disable for tests
            that register their own).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        register_defaults: bool = True,
    ) -> None:
        self._connectors: dict[str, PersonConnector] = {}
        if register_defaults:
            self._register_defaults(settings or get_settings())

    def _register_defaults(self, settings: Settings) -> None:
        configs = build_connector_configs(settings)
        self.register(GoogleSearchConnector(configs["google_search"]))
        self.register(UsernameSearchConnector(configs["username_search"]))
        self.register(HIBPConnector(configs["hibp"]))
        self.register(WaybackMachineConnector(configs["wayback_machine"]))
        self.register(GoogleNewsConnector(configs["google_news"]))
        self.register(GeoNamesConnector(configs["geonames"]))
        logger.info(
            f"Registered {len(self._connectors)} connectors "
            f"({len(self.get_enabled())} enabled)"
        )

    def register(self, connector: PersonConnector) -> None:
        """Add or replace a connector under its id."""
        self._connectors[connector.id] = connector

    def get(self, connector_id: str) -> PersonConnector | None:
        return self._connectors.get(connector_id)

    def get_enabled(self) -> list[PersonConnector]:
        return [c for c in self._connectors.values() if c.enabled]

    def get_by_type(self, source_type: SourceType | str) -> list[PersonConnector]:
        wanted = SourceType(source_type)
        return [c for c in self._connectors.values() if c.type == wanted]

    def get_all(self) -> list[PersonConnector]:
        return list(self._connectors.values())

    async def close(self) -> None:
        """Close every connector's HTTP client."""
        for connector in self._connectors.values():
            await connector.close()


__all__ = ["ConnectorRegistry", "build_connector_configs"]
