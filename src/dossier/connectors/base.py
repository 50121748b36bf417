"""Base protocol, shared behaviour and error hierarchy for person connectors.

This module defines the PersonConnector protocol that all data source
connectors must satisfy, a BaseConnector with the rate limiting and HTTP
plumbing they share, and a standardized error hierarchy.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from dossier.audit import AuditLogger
from dossier.models import Entity, Location, Profile, Source, SourceType

logger = logging.getLogger(__name__)

RATE_LIMIT_WINDOW_SECONDS = 60.0


class ConnectorConfig(BaseModel):
    """Per-connector configuration."""

    model_config = ConfigDict(validate_assignment=True)

    enabled: bool = True
    api_key: SecretStr | None = None
    api_secret: SecretStr | None = None
    rate_limit: int | None = Field(default=None, ge=1)
    custom_params: dict[str, Any] = Field(default_factory=dict)


class ConnectorMetadata(BaseModel):
    """Descriptive metadata for source attribution."""

    id: str
    name: str
    type: SourceType
    description: str
    requires_auth: bool
    rate_limit: int
    ethical_boundaries: list[str]
    data_retention: str = "No data stored"
    jurisdiction: list[str] = Field(default_factory=lambda: ["Global"])


@runtime_checkable
class PersonConnector(Protocol):
    """Protocol for all person lookup connectors.

    Error Handling Contract:
    - ConnectorRateLimitError: called while over the per-minute budget
    - ConnectorTimeoutError / ConnectorParseError / ConnectorAuthError:
      unexpected failures; most connectors absorb these and return []
    - []: nothing found (expected)
    """

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def type(self) -> SourceType: ...

    @property
    def enabled(self) -> bool: ...

    @property
    def rate_limit(self) -> int: ...

    async def search_person(
        self, name: str, aliases: list[str], location: Location | None = None
    ) -> list[Entity]:
        """Search for a person by name, aliases and optional location."""
        ...

    async def is_available(self) -> bool:
        """Check the connector is enabled and within its rate limit."""
        ...

    def get_metadata(self) -> ConnectorMetadata: ...

    async def close(self) -> None: ...


class ConnectorError(Exception):
    """Base exception for all connector errors.

    Attributes:
        source_name: The connector that raised this error.
        message: Human-readable error description.
    """

    def __init__(self, source_name: str, message: str) -> None:
        self.source_name = source_name
        self.message = message
        super().__init__(f"[{source_name}] {message}")


class ConnectorTimeoutError(ConnectorError):
    """Raised when a connector request times out or cannot connect."""

    def __init__(self, source_name: str, timeout_seconds: float | None = None) -> None:
        msg = "Request timed out"
        if timeout_seconds is not None:
            msg = f"Request timed out after {timeout_seconds}s"
        super().__init__(source_name, msg)
        self.timeout_seconds = timeout_seconds


class ConnectorParseError(ConnectorError):
    """Raised when a response cannot be parsed or returns an unexpected status."""

    def __init__(self, source_name: str, details: str | None = None) -> None:
        msg = "Failed to parse API response"
        if details:
            msg = f"Failed to parse API response: {details}"
        super().__init__(source_name, msg)
        self.details = details


class ConnectorAuthError(ConnectorError):
    """Raised when authentication fails. Do not retry without fixing credentials."""

    def __init__(self, source_name: str, details: str | None = None) -> None:
        msg = "Authentication failed"
        if details:
            msg = f"Authentication failed: {details}"
        super().__init__(source_name, msg)
        self.details = details


class ConnectorRateLimitError(ConnectorError):
    """Raised when a connector is called over its rate limit."""

    def __init__(self, source_name: str) -> None:
        super().__init__(source_name, "Rate limit exceeded")


def handle_http_status(source_name: str, status_code: int) -> tuple[str, ConnectorError | None]:
    """Classify an HTTP status code.

    Returns:
        Tuple of (status_type, exception). status_type is one of "ok",
        "no_data" (404), "rate_limited" (429), "auth" (401/403) or "error";
        the exception is set for "auth" and "error".
    """
    if status_code < 400:
        return "ok", None
    if status_code == 404:
        return "no_data", None
    if status_code == 429:
        return "rate_limited", None
    if status_code in (401, 403):
        return "auth", ConnectorAuthError(source_name, f"HTTP {status_code}")
    return "error", ConnectorParseError(source_name, f"HTTP {status_code}")


class BaseConnector(ABC):
    """Shared behaviour for person connectors.

    Subclasses set the class attributes below and implement search_person.
    """

    id: str
    name: str
    type: SourceType
    description: str = ""
    requires_auth: bool = False
    ethical_boundaries: tuple[str, ...] = ()
    jurisdiction: tuple[str, ...] = ("Global",)

    DEFAULT_RATE_LIMIT = 60  # requests per minute
    DEFAULT_TIMEOUT = 10.0  # seconds

    def __init__(
        self,
        config: ConnectorConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or ConnectorConfig()
        self._clock = clock
        self._client: httpx.AsyncClient | None = None
        self._last_request_time: float | None = None
        self._request_count = 0
        self._window_start = clock()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    @property
    def rate_limit(self) -> int:
        return self.config.rate_limit or self.DEFAULT_RATE_LIMIT

    @property
    def api_key(self) -> str | None:
        if self.config.api_key is None:
            return None
        return self.config.api_key.get_secret_value() or None

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy initialization of HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.DEFAULT_TIMEOUT),
                headers={"User-Agent": "Dossier/1.0 (OSINT research tool)"},
            )
        return self._client

    async def is_available(self) -> bool:
        """Enabled and under the per-minute request budget."""
        if not self.enabled:
            return False

        now = self._clock()
        if now - self._window_start > RATE_LIMIT_WINDOW_SECONDS:
            self._request_count = 0
            self._window_start = now

        return self._request_count < self.rate_limit

    async def enforce_rate_limit(self) -> None:
        """Space requests evenly across the rate-limit window."""
        min_interval = RATE_LIMIT_WINDOW_SECONDS / self.rate_limit

        if self._last_request_time is not None:
            elapsed = self._clock() - self._last_request_time
            if elapsed < min_interval:
                await asyncio.sleep(min_interval - elapsed)

        self._last_request_time = self._clock()
        self._request_count += 1

    async def _ensure_available(self) -> None:
        if not await self.is_available():
            raise ConnectorRateLimitError(self.id)
        await self.enforce_rate_limit()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, mapping transport failures to ConnectorTimeoutError."""
        client = await self._get_client()
        try:
            return await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"{self.name} timeout: {e}")
            raise ConnectorTimeoutError(self.id, self.DEFAULT_TIMEOUT) from e
        except httpx.RequestError as e:
            logger.error(f"{self.name} request error: {e}")
            raise ConnectorTimeoutError(self.id, self.DEFAULT_TIMEOUT) from e

    def _parse_json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ConnectorParseError(self.id, "Invalid JSON response") from e

    def log_access(self, success: bool, error: str | None = None) -> None:
        AuditLogger.log_source_access(self.id, success, error)

    def make_source(
        self,
        confidence: float,
        url: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Source:
        """Source record identifying this connector."""
        return Source(
            name=self.name,
            type=self.type,
            url=url,
            confidence=confidence,
            metadata=metadata,
        )

    def create_entity(
        self,
        name: str,
        confidence: float,
        sources: list[Source],
        profiles: list[Profile] | None = None,
        locations: list[Location] | None = None,
    ) -> Entity:
        """Build a raw entity attributed to this connector."""
        return Entity(
            name=name,
            confidence=confidence,
            locations=locations or [],
            profiles=profiles or [],
            sources=sources,
            notes=f"Found via {self.name}",
        )

    def get_metadata(self) -> ConnectorMetadata:
        return ConnectorMetadata(
            id=self.id,
            name=self.name,
            type=self.type,
            description=self.description,
            requires_auth=self.requires_auth,
            rate_limit=self.rate_limit,
            ethical_boundaries=list(self.ethical_boundaries),
            jurisdiction=list(self.jurisdiction),
        )

    @abstractmethod
    async def search_person(
        self, name: str, aliases: list[str], location: Location | None = None
    ) -> list[Entity]:
        """Search for a person by name, aliases and optional location."""

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug(f"{self.name} connector client closed")


__all__ = [
    "BaseConnector",
    "ConnectorAuthError",
    "ConnectorConfig",
    "ConnectorError",
    "ConnectorMetadata",
    "ConnectorParseError",
    "ConnectorRateLimitError",
    "ConnectorTimeoutError",
    "PersonConnector",
    "handle_http_status",
]
