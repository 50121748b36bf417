"""GeoNames connector for geospatial context.

GeoNames does not search for people. Given a location it returns a
low-confidence record carrying the place's coordinates so the location can
take part in correlation.
"""

import logging
from typing import Any

from dossier.connectors.base import (
    BaseConnector,
    ConnectorError,
    ConnectorParseError,
    handle_http_status,
)
from dossier.models import Entity, Location, SourceType

logger = logging.getLogger(__name__)


class GeoNamesConnector(BaseConnector):
    """Location enrichment from the GeoNames search API."""

    id = "geonames"
    name = "GeoNames"
    type = SourceType.GEOSPATIAL
    description = "GeoNames - geospatial location enrichment"
    ethical_boundaries = (
        "Public geographic data only",
        "Respects rate limits",
    )

    BASE_URL = "http://api.geonames.org/searchJSON"
    DEFAULT_RATE_LIMIT = 30
    DEFAULT_TIMEOUT = 5.0
    # Location enrichment only
    RESULT_CONFIDENCE = 0.3

    @property
    def username(self) -> str:
        """GeoNames account name; the public demo account when unset."""
        return self.api_key or "demo"

    async def search_person(
        self, name: str, aliases: list[str], location: Location | None = None
    ) -> list[Entity]:
        await self._ensure_available()

        if not location:
            return []

        try:
            place = await self._enrich_location(location)
        except ConnectorError as e:
            logger.warning(f"GeoNames lookup failed: {e.message}")
            self.log_access(False, e.message)
            return []

        self.log_access(True)

        if not place:
            return []

        return [
            self.create_entity(
                name,
                self.RESULT_CONFIDENCE,
                [
                    self.make_source(
                        self.RESULT_CONFIDENCE,
                        url="https://www.geonames.org",
                        metadata=place,
                    )
                ],
                locations=[location],
            )
        ]

    async def _enrich_location(self, location: Location) -> dict[str, Any] | None:
        """Coordinates and feature data for the best match, or None."""
        if not location.city or not location.country:
            return None

        response = await self._request(
            "GET",
            self.BASE_URL,
            params={
                "q": location.city,
                "country": location.country,
                "username": self.username,
                "maxRows": 1,
            },
        )

        status_type, exc = handle_http_status(self.id, response.status_code)
        if status_type in ("no_data", "rate_limited"):
            return None
        if exc:
            raise exc

        data = self._parse_json(response)
        if not isinstance(data, dict):
            raise ConnectorParseError(self.id, "Unexpected response shape")

        places = data.get("geonames") or []
        if not places:
            return None

        place = places[0]
        return {
            "latitude": place.get("lat"),
            "longitude": place.get("lng"),
            "population": place.get("population"),
            "feature_code": place.get("fcode"),
        }
