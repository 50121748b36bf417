"""Person lookup connectors."""

from dossier.connectors.archives import WaybackMachineConnector
from dossier.connectors.base import (
    BaseConnector,
    ConnectorAuthError,
    ConnectorConfig,
    ConnectorError,
    ConnectorMetadata,
    ConnectorParseError,
    ConnectorRateLimitError,
    ConnectorTimeoutError,
    PersonConnector,
    handle_http_status,
)
from dossier.connectors.breach_indicators import HIBPConnector
from dossier.connectors.geospatial import GeoNamesConnector
from dossier.connectors.news_archives import GoogleNewsConnector
from dossier.connectors.registry import ConnectorRegistry
from dossier.connectors.search_engines import GoogleSearchConnector
from dossier.connectors.username_search import UsernameSearchConnector

__all__ = [
    "PersonConnector",
    "BaseConnector",
    "ConnectorConfig",
    "ConnectorMetadata",
    "ConnectorError",
    "ConnectorTimeoutError",
    "ConnectorParseError",
    "ConnectorAuthError",
    "ConnectorRateLimitError",
    "ConnectorRegistry",
    "GeoNamesConnector",
    "GoogleNewsConnector",
    "GoogleSearchConnector",
    "HIBPConnector",
    "UsernameSearchConnector",
    "WaybackMachineConnector",
    "handle_http_status",
]
