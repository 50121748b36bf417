"""News archive connector backed by the NewsAPI ``everything`` endpoint."""

import logging
from typing import Any

from dossier.connectors.base import BaseConnector, ConnectorError, handle_http_status
from dossier.models import Entity, Location, SourceType

logger = logging.getLogger(__name__)


def build_news_query(name: str, location: Location | None = None) -> str:
    """Quoted name followed by city and state when known.

    >>> build_news_query("John Doe", Location(city="Austin", state="TX"))
    '"John Doe" Austin TX'
    """
    query = f'"{name}"'
    if location and location.city:
        query += f" {location.city}"
    if location and location.state:
        query += f" {location.state}"
    return query


class GoogleNewsConnector(BaseConnector):
    """Mentions of a person in news articles.

    Needs a NewsAPI key; without one the connector returns nothing.
    """

    id = "google_news"
    name = "Google News"
    type = SourceType.NEWS_ARCHIVE
    description = "Google News archive search"
    requires_auth = True
    ethical_boundaries = (
        "Public news articles only",
        "Respects API rate limits",
    )

    BASE_URL = "https://newsapi.org/v2/everything"
    RESULT_CONFIDENCE = 0.55
    PAGE_SIZE = 10
    MAX_ARTICLES = 5  # kept in source metadata

    async def search_person(
        self, name: str, aliases: list[str], location: Location | None = None
    ) -> list[Entity]:
        await self._ensure_available()

        if not self.api_key:
            logger.debug("NewsAPI key not configured, skipping")
            return []

        try:
            articles = await self._search_news(build_news_query(name, location))
        except ConnectorError as e:
            logger.warning(f"News lookup failed: {e.message}")
            self.log_access(False, e.message)
            return []

        self.log_access(True)

        if not articles:
            return []

        metadata = {
            "article_count": len(articles),
            "articles": articles[: self.MAX_ARTICLES],
        }
        return [
            self.create_entity(
                name,
                self.RESULT_CONFIDENCE,
                [
                    self.make_source(
                        self.RESULT_CONFIDENCE,
                        url="https://news.google.com",
                        metadata=metadata,
                    )
                ],
                locations=[location] if location else [],
            )
        ]

    async def _search_news(self, query: str) -> list[dict[str, Any]]:
        """Articles as {"title", "url", "published"} dicts."""
        response = await self._request(
            "GET",
            self.BASE_URL,
            params={
                "q": query,
                "apiKey": self.api_key,
                "language": "en",
                "sortBy": "relevancy",
                "pageSize": self.PAGE_SIZE,
            },
        )

        status_type, exc = handle_http_status(self.id, response.status_code)
        if status_type in ("no_data", "rate_limited"):
            return []
        if exc:
            raise exc

        data = self._parse_json(response)
        if not isinstance(data, dict):
            return []

        return [
            {
                "title": article.get("title") or "",
                "url": article.get("url") or "",
                "published": article.get("publishedAt") or "",
            }
            for article in data.get("articles") or []
        ]
