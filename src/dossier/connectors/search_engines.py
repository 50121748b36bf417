"""Google Custom Search connector."""

import logging

from dossier.connectors.base import (
    BaseConnector,
    ConnectorError,
    ConnectorParseError,
    handle_http_status,
)
from dossier.models import Entity, Location, SourceType

logger = logging.getLogger(__name__)


def build_search_query(name: str, aliases: list[str], location: Location | None = None) -> str:
    """Quoted name, first alias as an OR term, then the location if any.

    >>> build_search_query("John Doe", ["Johnny D"], Location(city="Boston"))
    '"John Doe" OR "Johnny D" Boston'
    """
    query = f'"{name}"'
    if aliases:
        query += f' OR "{aliases[0]}"'
    if location and location.describe():
        query += f" {location.describe()}"
    return query


class GoogleSearchConnector(BaseConnector):
    """Google search via the Custom Search JSON API (public results only).

    Needs both an API key and a search engine id (``custom_params
    ["search_engine_id"]``); without them the connector returns nothing.
    Unlike the other connectors, request failures propagate to the caller.
    """

    id = "google_search"
    name = "Google Search"
    type = SourceType.SEARCH_ENGINE
    description = "Google Search via Custom Search API (public results only)"
    requires_auth = True
    ethical_boundaries = (
        "Public search results only",
        "Respects API quotas",
        "No scraping of result pages",
    )

    BASE_URL = "https://www.googleapis.com/customsearch/v1"
    RESULT_CONFIDENCE = 0.6
    MAX_RESULTS = 10

    @property
    def search_engine_id(self) -> str | None:
        value = self.config.custom_params.get("search_engine_id")
        return str(value) if value else None

    async def search_person(
        self, name: str, aliases: list[str], location: Location | None = None
    ) -> list[Entity]:
        await self._ensure_available()

        api_key = self.api_key
        engine_id = self.search_engine_id
        if not api_key or not engine_id:
            logger.debug("Google Search credentials not configured, skipping")
            return []

        query = build_search_query(name, aliases, location)
        logger.info("Querying Google Custom Search")

        try:
            response = await self._request(
                "GET",
                self.BASE_URL,
                params={"key": api_key, "cx": engine_id, "q": query, "num": self.MAX_RESULTS},
            )
            status_type, exc = handle_http_status(self.id, response.status_code)
            if exc:
                raise exc
            if status_type != "ok":
                raise ConnectorParseError(self.id, f"HTTP {response.status_code}")

            data = self._parse_json(response)
        except ConnectorError as e:
            self.log_access(False, e.message)
            raise

        self.log_access(True)

        entities = []
        for item in data.get("items", []):
            link = item.get("link")
            if not link:
                continue
            entities.append(
                self.create_entity(
                    name,
                    self.RESULT_CONFIDENCE,
                    [
                        self.make_source(
                            self.RESULT_CONFIDENCE,
                            url=link,
                            metadata={"snippet": item.get("snippet", "")},
                        )
                    ],
                    locations=[location] if location else [],
                )
            )
        return entities
