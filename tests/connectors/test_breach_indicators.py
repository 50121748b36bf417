"""Tests for the Have I Been Pwned connector."""

import re

import pytest
from pydantic import SecretStr

from dossier.connectors.base import ConnectorConfig
from dossier.connectors.breach_indicators import HIBPConnector, generate_emails
from dossier.models import SourceType

HIBP_URL = re.compile(r"https://haveibeenpwned\.com/api/v3/breachedaccount/.*")
JOHN_DOT_DOE_URL = re.compile(r".*/breachedaccount/john\.doe.*gmail\.com$")


@pytest.fixture
def connector() -> HIBPConnector:
    connector = HIBPConnector()
    connector.REQUEST_DELAY = 0
    return connector


class TestGenerateEmails:
    def test_full_name(self) -> None:
        assert generate_emails("John Doe", []) == [
            "john.doe@gmail.com",
            "johndoe@gmail.com",
            "john@gmail.com",
        ]

    def test_multi_word_aliases_only(self) -> None:
        assert generate_emails("John Doe", ["Jack Dee", "jd"], domain="example.com") == [
            "john.doe@example.com",
            "johndoe@example.com",
            "john@example.com",
            "jack.dee@example.com",
        ]

    def test_single_word_name(self) -> None:
        assert generate_emails("Madonna", []) == []


class TestHIBPConnector:
    """Tests for HIBPConnector.search_person."""

    def test_identity(self) -> None:
        connector = HIBPConnector()

        assert connector.id == "hibp"
        assert connector.type == SourceType.BREACH_INDICATOR
        assert connector.rate_limit == 40

    @pytest.mark.asyncio
    async def test_breach_presence(self, connector, httpx_mock) -> None:
        httpx_mock.add_response(
            url=JOHN_DOT_DOE_URL,
            json=[{"Name": "Adobe"}, {"Name": "LinkedIn"}],
        )
        httpx_mock.add_response(url=HIBP_URL, status_code=404, is_reusable=True)

        entities = await connector.search_person("John Doe", [])

        assert len(entities) == 1
        entity = entities[0]
        assert entity.confidence == 0.4
        source = entity.sources[0]
        assert source.url == "https://haveibeenpwned.com"
        assert source.metadata == {
            "breach_count": 2,
            "breach_names": ["Adobe", "LinkedIn"],
            "emails_checked": ["john.doe@gmail.com"],
        }
        assert len(httpx_mock.get_requests()) == 3

        await connector.close()

    @pytest.mark.asyncio
    async def test_clean_addresses(self, connector, httpx_mock) -> None:
        httpx_mock.add_response(url=HIBP_URL, status_code=404, is_reusable=True)

        assert await connector.search_person("John Doe", []) == []

        await connector.close()

    @pytest.mark.asyncio
    async def test_rate_limited_treated_as_empty(self, connector, httpx_mock) -> None:
        httpx_mock.add_response(url=HIBP_URL, status_code=429, is_reusable=True)

        assert await connector.search_person("John Doe", []) == []

        await connector.close()

    @pytest.mark.asyncio
    async def test_auth_failure_returns_empty(self, connector, httpx_mock) -> None:
        httpx_mock.add_response(url=HIBP_URL, status_code=401)

        assert await connector.search_person("John Doe", []) == []
        # Stops at the first failure
        assert len(httpx_mock.get_requests()) == 1

        await connector.close()

    @pytest.mark.asyncio
    async def test_api_key_header(self, httpx_mock) -> None:
        connector = HIBPConnector(ConnectorConfig(api_key=SecretStr("hibp-key")))
        connector.REQUEST_DELAY = 0
        httpx_mock.add_response(url=HIBP_URL, status_code=404, is_reusable=True)

        await connector.search_person("John Doe", [])

        for request in httpx_mock.get_requests():
            assert request.headers["hibp-api-key"] == "hibp-key"

        await connector.close()

    @pytest.mark.asyncio
    async def test_no_candidate_emails(self, connector, httpx_mock) -> None:
        assert await connector.search_person("Madonna", []) == []
        assert httpx_mock.get_requests() == []
