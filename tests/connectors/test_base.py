"""Tests for connector base class, protocol and error hierarchy."""

from unittest.mock import AsyncMock

import httpx
import pytest
from pydantic import SecretStr

from dossier.connectors.base import (
    BaseConnector,
    ConnectorAuthError,
    ConnectorConfig,
    ConnectorError,
    ConnectorParseError,
    ConnectorRateLimitError,
    ConnectorTimeoutError,
    PersonConnector,
    handle_http_status,
)
from dossier.models import Entity, Location, SourceType


class FakeClock:
    def __init__(self) -> None:
        self.now = 500.0

    def __call__(self) -> float:
        return self.now


class EchoConnector(BaseConnector):
    """Minimal connector returning one record per search."""

    id = "echo"
    name = "Echo"
    type = SourceType.PUBLIC_RECORD
    description = "Echoes the searched name"
    ethical_boundaries = ("Test data only",)

    async def search_person(
        self, name: str, aliases: list[str], location: Location | None = None
    ) -> list[Entity]:
        await self._ensure_available()
        return [self.create_entity(name, 0.5, [self.make_source(0.5)])]


class TestConnectorErrors:
    """Tests for the error hierarchy."""

    def test_all_errors_are_connector_errors(self) -> None:
        errors = [
            ConnectorTimeoutError("echo", 5.0),
            ConnectorParseError("echo", "bad"),
            ConnectorAuthError("echo"),
            ConnectorRateLimitError("echo"),
        ]
        assert all(isinstance(e, ConnectorError) for e in errors)

    def test_message_includes_source(self) -> None:
        error = ConnectorTimeoutError("hibp", 10.0)

        assert error.source_name == "hibp"
        assert error.message == "Request timed out after 10.0s"
        assert str(error) == "[hibp] Request timed out after 10.0s"

    def test_parse_error_details(self) -> None:
        assert ConnectorParseError("x").message == "Failed to parse API response"
        assert ConnectorParseError("x", "HTTP 500").message == (
            "Failed to parse API response: HTTP 500"
        )


class TestHandleHttpStatus:
    """Tests for handle_http_status."""

    @pytest.mark.parametrize(
        ("status", "expected"),
        [(200, "ok"), (302, "ok"), (404, "no_data"), (429, "rate_limited")],
    )
    def test_non_error_statuses(self, status: int, expected: str) -> None:
        assert handle_http_status("x", status) == (expected, None)

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_failure(self, status: int) -> None:
        status_type, exc = handle_http_status("x", status)

        assert status_type == "auth"
        assert isinstance(exc, ConnectorAuthError)

    def test_server_error(self) -> None:
        status_type, exc = handle_http_status("x", 503)

        assert status_type == "error"
        assert isinstance(exc, ConnectorParseError)
        assert exc.details == "HTTP 503"


class TestBaseConnectorProperties:
    """Tests for configuration-driven properties."""

    def test_satisfies_protocol(self) -> None:
        assert isinstance(EchoConnector(), PersonConnector)

    def test_defaults(self) -> None:
        connector = EchoConnector()

        assert connector.enabled
        assert connector.rate_limit == BaseConnector.DEFAULT_RATE_LIMIT
        assert connector.api_key is None

    def test_config_overrides(self) -> None:
        connector = EchoConnector(
            ConnectorConfig(enabled=False, api_key=SecretStr("k"), rate_limit=5)
        )

        assert not connector.enabled
        assert connector.rate_limit == 5
        assert connector.api_key == "k"

    def test_empty_api_key_is_none(self) -> None:
        assert EchoConnector(ConnectorConfig(api_key=SecretStr(""))).api_key is None

    def test_metadata(self) -> None:
        metadata = EchoConnector().get_metadata()

        assert metadata.id == "echo"
        assert metadata.type == SourceType.PUBLIC_RECORD
        assert metadata.ethical_boundaries == ["Test data only"]
        assert metadata.data_retention == "No data stored"
        assert metadata.jurisdiction == ["Global"]


class TestRateLimiting:
    """Tests for availability and request spacing."""

    @pytest.mark.asyncio
    async def test_disabled_connector_unavailable(self) -> None:
        connector = EchoConnector(ConnectorConfig(enabled=False))
        assert not await connector.is_available()

    @pytest.mark.asyncio
    async def test_budget_exhaustion_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("dossier.connectors.base.asyncio.sleep", AsyncMock())
        clock = FakeClock()
        connector = EchoConnector(ConnectorConfig(rate_limit=2), clock=clock)

        await connector.search_person("John Doe", [])
        await connector.search_person("John Doe", [])

        assert not await connector.is_available()
        with pytest.raises(ConnectorRateLimitError):
            await connector.search_person("John Doe", [])

    @pytest.mark.asyncio
    async def test_window_resets(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("dossier.connectors.base.asyncio.sleep", AsyncMock())
        clock = FakeClock()
        connector = EchoConnector(ConnectorConfig(rate_limit=1), clock=clock)

        await connector.search_person("John Doe", [])
        assert not await connector.is_available()

        clock.now += 61
        assert await connector.is_available()

    @pytest.mark.asyncio
    async def test_first_request_does_not_wait(self, monkeypatch: pytest.MonkeyPatch) -> None:
        sleep = AsyncMock()
        monkeypatch.setattr("dossier.connectors.base.asyncio.sleep", sleep)
        connector = EchoConnector(clock=FakeClock())

        await connector.enforce_rate_limit()

        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_requests_are_spaced(self, monkeypatch: pytest.MonkeyPatch) -> None:
        sleep = AsyncMock()
        monkeypatch.setattr("dossier.connectors.base.asyncio.sleep", sleep)
        clock = FakeClock()
        connector = EchoConnector(ConnectorConfig(rate_limit=30), clock=clock)

        await connector.enforce_rate_limit()
        clock.now += 0.5
        await connector.enforce_rate_limit()

        sleep.assert_awaited_once()
        assert sleep.await_args.args[0] == pytest.approx(1.5)


class TestRecordBuilders:
    """Tests for make_source and create_entity."""

    def test_create_entity(self) -> None:
        connector = EchoConnector()
        entity = connector.create_entity(
            "John Doe",
            0.5,
            [connector.make_source(0.5, url="https://example.com", metadata={"k": 1})],
            locations=[Location(country="US")],
        )

        assert entity.notes == "Found via Echo"
        assert entity.sources[0].name == "Echo"
        assert entity.sources[0].type == SourceType.PUBLIC_RECORD
        assert entity.sources[0].metadata == {"k": 1}
        assert entity.locations == [Location(country="US")]
        assert entity.profiles == []


class TestRequest:
    """Tests for HTTP plumbing."""

    @pytest.mark.asyncio
    async def test_lazy_client(self) -> None:
        connector = EchoConnector()
        assert connector._client is None

        client = await connector._get_client()
        assert isinstance(client, httpx.AsyncClient)
        assert await connector._get_client() is client

        await connector.close()
        assert connector._client is None

    @pytest.mark.asyncio
    async def test_timeout_mapped(self, httpx_mock) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("slow"))
        connector = EchoConnector()

        with pytest.raises(ConnectorTimeoutError):
            await connector._request("GET", "https://example.com/slow")

        await connector.close()

    @pytest.mark.asyncio
    async def test_connection_error_mapped(self, httpx_mock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("refused"))
        connector = EchoConnector()

        with pytest.raises(ConnectorTimeoutError):
            await connector._request("GET", "https://example.com/down")

        await connector.close()

    @pytest.mark.asyncio
    async def test_invalid_json(self, httpx_mock) -> None:
        httpx_mock.add_response(text="not json")
        connector = EchoConnector()

        response = await connector._request("GET", "https://example.com/data")
        with pytest.raises(ConnectorParseError):
            connector._parse_json(response)

        await connector.close()
