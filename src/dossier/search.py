"""Person search orchestration.

Validates a request, fans it out to every available connector, resolves the
gathered records, and packages the sanitized results with search metadata.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone

from dossier.aggregation import PersonResolver
from dossier.audit import AuditLogger
from dossier.connectors import ConnectorError, ConnectorRegistry, PersonConnector
from dossier.guardrails import EthicalGuardrails
from dossier.models import Entity, PersonSearchInput, PersonSearchOutput, SearchMetadata

logger = logging.getLogger(__name__)


class QueryRejectedError(Exception):
    """Raised when guardrails reject a search.

    Attributes:
        errors: Reasons the query was rejected.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("; ".join(errors))


class PersonSearchService:
    """Runs person searches across all enabled connectors."""

    def __init__(
        self,
        registry: ConnectorRegistry,
        resolver: PersonResolver | None = None,
        guardrails: EthicalGuardrails | None = None,
    ) -> None:
        self._registry = registry
        self._resolver = resolver or PersonResolver()
        self._guardrails = guardrails or EthicalGuardrails()

    async def search(
        self, query: PersonSearchInput, client_id: str = "default"
    ) -> PersonSearchOutput:
        """Search for a person.

        Args:
            query: Validated search parameters.
            client_id: Caller identity for rate limiting.

        Returns:
            PersonSearchOutput with resolved, sanitized entities.

        Raises:
            QueryRejectedError: If the guardrails reject the query.
        """
        start = time.perf_counter()

        validation = self._guardrails.validate_query(query, client_id)
        if not validation.valid:
            AuditLogger.log_violation(
                "query_validation",
                {"errors": validation.errors, "client_id": client_id},
            )
            raise QueryRejectedError(validation.errors)

        jurisdiction = self._guardrails.check_jurisdiction(query.location)
        warnings = [*validation.warnings, *jurisdiction.restrictions]

        raw_entities, sources_queried = await self._gather(query)

        resolved = self._resolver.resolve(raw_entities, query)
        sanitized = self._guardrails.sanitize_results(resolved)

        processing_time_ms = int((time.perf_counter() - start) * 1000)

        output = PersonSearchOutput(
            entities=sanitized,
            search_metadata=SearchMetadata(
                query_time=datetime.now(timezone.utc),
                sources_queried=sources_queried,
                warnings=warnings,
                total_results=len(sanitized),
                processing_time_ms=processing_time_ms,
            ),
        )

        AuditLogger.log_query(
            query,
            sources_queried=sources_queried,
            result_count=len(sanitized),
            processing_time_ms=processing_time_ms,
        )
        return output

    async def _gather(self, query: PersonSearchInput) -> tuple[list[Entity], list[str]]:
        """Query all available connectors concurrently.

        Records are concatenated in registry order so resolution stays
        deterministic regardless of which connector answers first.
        """
        name = query.primary_name()
        if not name:
            return [], []

        connectors = [c for c in self._registry.get_enabled() if await c.is_available()]
        if not connectors:
            logger.warning("No connectors available for search")
            return [], []

        outcomes = await asyncio.gather(
            *(self._query_connector(c, name, query) for c in connectors)
        )

        raw_entities: list[Entity] = []
        sources_queried: list[str] = []
        for connector, entities in zip(connectors, outcomes):
            if entities is None:
                continue
            raw_entities.extend(entities)
            sources_queried.append(connector.id)

        logger.info(
            f"Gathered {len(raw_entities)} records from {len(sources_queried)} of "
            f"{len(connectors)} connectors"
        )
        return raw_entities, sources_queried

    async def _query_connector(
        self, connector: PersonConnector, name: str, query: PersonSearchInput
    ) -> list[Entity] | None:
        """Run one connector; None if it failed."""
        try:
            return await connector.search_person(name, query.aliases, query.location)
        except ConnectorError as e:
            logger.warning(f"Connector {connector.id} failed: {e.message}")
            return None
        except Exception as e:
            logger.exception(f"Unexpected error querying {connector.id}: {e}")
            return None


__all__ = ["PersonSearchService", "QueryRejectedError"]
