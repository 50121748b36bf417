"""FastMCP server for Dossier person lookup tools."""

import asyncio
import atexit
import json
import logging
from itertools import combinations
from typing import Any

from fastmcp import FastMCP
from pydantic import ValidationError

from dossier.aggregation import PersonResolver, explain_similarity
from dossier.aggregation.similarity import (
    LOCATION_WEIGHT,
    NAME_WEIGHT,
    PROFILE_WEIGHT,
    SOURCE_WEIGHT,
)
from dossier.config import configure_logging, get_settings
from dossier.connectors import ConnectorMetadata, ConnectorRegistry
from dossier.guardrails import EthicalGuardrails
from dossier.models import Entity, Location, PersonSearchInput
from dossier.search import PersonSearchService, QueryRejectedError

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("dossier")

# Global instances (initialized on first use)
_registry: ConnectorRegistry | None = None
_guardrails: EthicalGuardrails | None = None
_search_service: PersonSearchService | None = None

SCORING_METHODOLOGY: dict[str, dict[str, Any]] = {
    "name_similarity": {
        "weight": NAME_WEIGHT,
        "description": "Fuzzy name matching using token-based comparison",
    },
    "location_similarity": {
        "weight": LOCATION_WEIGHT,
        "description": "Geographic proximity and location overlap",
    },
    "profile_similarity": {
        "weight": PROFILE_WEIGHT,
        "description": "Social profile platform overlap",
    },
    "source_similarity": {
        "weight": SOURCE_WEIGHT,
        "description": "Source type overlap",
    },
}


def _get_registry() -> ConnectorRegistry:
    global _registry
    if _registry is None:
        _registry = ConnectorRegistry(get_settings())
    return _registry


def _get_guardrails() -> EthicalGuardrails:
    global _guardrails
    if _guardrails is None:
        _guardrails = EthicalGuardrails(max_queries_per_hour=get_settings().max_queries_per_hour)
    return _guardrails


def _get_search_service() -> PersonSearchService:
    global _search_service
    if _search_service is None:
        _search_service = PersonSearchService(
            registry=_get_registry(),
            resolver=PersonResolver(get_settings().cluster_strategy),
            guardrails=_get_guardrails(),
        )
    return _search_service


async def _cleanup_resources() -> None:
    """Close connector HTTP clients."""
    global _registry, _search_service

    _search_service = None
    if _registry is not None:
        await _registry.close()
        _registry = None

    logger.debug("All resources cleaned up")


def _atexit_cleanup() -> None:
    """Synchronous atexit handler that runs async cleanup."""
    try:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(_cleanup_resources())
        else:
            loop.create_task(_cleanup_resources())
    except Exception as e:
        # Don't let cleanup errors prevent shutdown
        logger.debug(f"Cleanup error (non-fatal): {e}")


atexit.register(_atexit_cleanup)


def _to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=str)


def _generate_citation(metadata: ConnectorMetadata) -> str:
    return (
        f"{metadata.name} ({metadata.type.value}) - Accessed via Dossier OSINT server. "
        f"{metadata.description}"
    )


@mcp.tool()
async def person_search(
    full_name: str = "",
    aliases: list[str] | None = None,
    city: str = "",
    state: str = "",
    country: str = "",
    confidence_threshold: float | None = None,
    max_results: int | None = None,
) -> str:
    """Search for a person across multiple OSINT sources.

    Supports name, aliases, and location-based queries. Returns normalized,
    deduplicated results with confidence scores, correlation explanations,
    and facts separated from inferences.

    Args:
        full_name: Full name of the person to search for.
        aliases: Alternative names or aliases.
        city: Optional city to narrow the search.
        state: Optional state or region.
        country: Optional country (ISO code, e.g. "US").
        confidence_threshold: Minimum confidence score (0.0-1.0), default 0.3.
        max_results: Maximum number of results to return, default 50.

    Returns:
        JSON with resolved entities and search metadata, or an error message.
    """
    settings = get_settings()
    logger.info("Person search requested")

    location = None
    if city or state or country:
        location = Location(city=city or None, state=state or None, country=country or None)

    try:
        query = PersonSearchInput(
            full_name=full_name or None,
            aliases=aliases or [],
            location=location,
            confidence_threshold=(
                settings.default_confidence_threshold
                if confidence_threshold is None
                else confidence_threshold
            ),
            max_results=settings.default_max_results if max_results is None else max_results,
        )
    except ValidationError as e:
        return f"Invalid input: {e}"

    try:
        output = await _get_search_service().search(query)
    except QueryRejectedError as e:
        return "Query validation failed:\n" + "\n".join(e.errors)
    except Exception as e:
        logger.exception(f"Unexpected error in person search: {e}")
        return "Error: An unexpected error occurred during the search. Please try again later."

    return output.model_dump_json(indent=2, exclude_none=True)


@mcp.tool()
async def source_attribution(source_name: str = "") -> str:
    """Get provenance and citation details for the data sources.

    Args:
        source_name: Connector id (e.g. "hibp", "wayback_machine"). Leave empty
            to list every source.

    Returns:
        JSON with source metadata and a citation string.
    """
    registry = _get_registry()

    source_name = source_name.strip()
    if source_name:
        connector = registry.get(source_name)
        if connector is not None:
            metadata = connector.get_metadata()
            return _to_json(
                {
                    "source": metadata.model_dump(mode="json"),
                    "citation_format": _generate_citation(metadata),
                }
            )
        logger.info(f"Unknown source requested: {source_name}")

    return _to_json(
        {
            "sources": [c.get_metadata().model_dump(mode="json") for c in registry.get_all()],
            "note": "Pass source_name with one of the listed ids for a citation",
        }
    )


@mcp.tool()
async def confidence_scoring(entities: list[dict[str, Any]]) -> str:
    """Explain how strongly entity records correlate.

    Use this with entity records (for example from person_search results) to
    see the weighted factors behind each pairwise similarity score.

    Args:
        entities: Two or more entity records, each with at least name and
            confidence; locations, profiles and sources are optional.

    Returns:
        JSON with the scoring methodology and one explanation per pair.
    """
    if len(entities) < 2:
        return "Error: At least 2 entities required for confidence scoring comparison"

    try:
        parsed = [Entity.model_validate(e) for e in entities]
    except ValidationError as e:
        return f"Invalid input: {e}"

    comparisons = [
        explain_similarity(a, b).model_dump(mode="json") for a, b in combinations(parsed, 2)
    ]
    return _to_json({"methodology": SCORING_METHODOLOGY, "comparisons": comparisons})


def main() -> None:
    """Run the Dossier MCP server."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting Dossier MCP server")
    logger.info(EthicalGuardrails.get_disclaimer())
    mcp.run()


if __name__ == "__main__":
    main()
