"""Person resolution pipeline.

Turns the raw records gathered from every connector for one query into a
ranked list of resolved people: cluster -> merge -> threshold -> rank ->
truncate. The pipeline holds no state between calls, so a single resolver
can serve concurrent queries.
"""

import logging
from collections.abc import Sequence

from dossier.aggregation.clustering import ClusterStrategy, cluster_entities
from dossier.aggregation.merger import merge_cluster
from dossier.models import Entity, PersonSearchInput

logger = logging.getLogger(__name__)


class PersonResolver:
    """Deduplicates and ranks person records from multiple sources.

    Attributes:
        strategy: Cluster grouping strategy (seed-only by default).
    """

    def __init__(self, strategy: ClusterStrategy = ClusterStrategy.SEED) -> None:
        self.strategy = strategy

    def cluster(self, entities: Sequence[Entity]) -> list[list[Entity]]:
        """Group records that likely refer to the same person."""
        return cluster_entities(entities, self.strategy)

    def merge(self, cluster: Sequence[Entity], query: PersonSearchInput) -> Entity:
        """Merge one cluster into a resolved record.

        The query is accepted for interface symmetry; merging does not
        depend on it.
        """
        return merge_cluster(cluster)

    def resolve(self, raw_entities: Sequence[Entity], query: PersonSearchInput) -> list[Entity]:
        """Resolve raw records into ranked, deduplicated people.

        Args:
            raw_entities: Records from all connectors, in gathering order.
            query: Search parameters supplying threshold and result limit.

        Returns:
            Resolved records with confidence >= query.confidence_threshold,
            sorted by confidence (highest first, ties keep cluster order),
            at most query.max_results long.
        """
        if not raw_entities:
            return []

        clusters = self.cluster(raw_entities)
        resolved = [self.merge(cluster, query) for cluster in clusters]

        kept = [e for e in resolved if e.confidence >= query.confidence_threshold]
        kept.sort(key=lambda e: e.confidence, reverse=True)
        results = kept[: query.max_results]

        logger.info(
            f"Resolved {len(raw_entities)} records into {len(clusters)} clusters, "
            f"returning {len(results)} (threshold {query.confidence_threshold:.2f})"
        )
        return results


__all__ = ["PersonResolver"]
