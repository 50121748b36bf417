"""Wayback Machine connector for archived web content."""

import logging
from typing import Any

from dossier.connectors.base import BaseConnector, ConnectorError, handle_http_status
from dossier.models import Entity, Location, SourceType

logger = logging.getLogger(__name__)


class WaybackMachineConnector(BaseConnector):
    """Snapshot lookups against the Internet Archive CDX API."""

    id = "wayback_machine"
    name = "Wayback Machine"
    type = SourceType.ARCHIVE
    description = "Internet Archive Wayback Machine - historical web content"
    ethical_boundaries = (
        "Public archives only",
        "Respects rate limits",
        "No private content",
    )

    BASE_URL = "https://web.archive.org/cdx/search/cdx"
    DEFAULT_RATE_LIMIT = 30
    RESULT_CONFIDENCE = 0.5
    MAX_SNAPSHOTS = 10

    async def search_person(
        self, name: str, aliases: list[str], location: Location | None = None
    ) -> list[Entity]:
        await self._ensure_available()

        query = name
        if location and location.city:
            query += f" {location.city}"

        try:
            snapshots = await self._search_snapshots(query)
        except ConnectorError as e:
            logger.warning(f"Wayback Machine lookup failed: {e.message}")
            self.log_access(False, e.message)
            return []

        self.log_access(True)

        if not snapshots:
            return []

        metadata = {
            "snapshot_count": len(snapshots),
            "earliest_snapshot": snapshots[0]["timestamp"],
            "latest_snapshot": snapshots[-1]["timestamp"],
        }
        return [
            self.create_entity(
                name,
                self.RESULT_CONFIDENCE,
                [
                    self.make_source(
                        self.RESULT_CONFIDENCE,
                        url="https://web.archive.org",
                        metadata=metadata,
                    )
                ],
                locations=[location] if location else [],
            )
        ]

    async def _search_snapshots(self, query: str) -> list[dict[str, Any]]:
        """Snapshot rows as {"url", "timestamp"} dicts (CDX header row dropped)."""
        response = await self._request(
            "GET",
            self.BASE_URL,
            params={"url": query, "output": "json", "limit": self.MAX_SNAPSHOTS},
        )

        status_type, exc = handle_http_status(self.id, response.status_code)
        if status_type in ("no_data", "rate_limited"):
            return []
        if exc:
            raise exc

        # CDX returns an empty body when nothing matches
        if not response.content.strip():
            return []

        data = self._parse_json(response)
        if not isinstance(data, list) or len(data) <= 1:
            return []

        return [
            {
                "url": row[2] if len(row) > 2 else "",
                "timestamp": row[1] if len(row) > 1 else "",
            }
            for row in data[1:]
        ]
