"""Grouping of records that likely describe the same person."""

import logging
from collections.abc import Callable, Sequence
from enum import Enum

from dossier.aggregation.similarity import MATCH_THRESHOLD, similarity
from dossier.models import Entity

logger = logging.getLogger(__name__)

SimilarityFn = Callable[[Entity, Entity], float]


class ClusterStrategy(str, Enum):
    """How records are grouped into clusters.

    SEED compares every candidate only against the record that opened the
    cluster, so grouping is not transitive. TRANSITIVE joins any two records
    connected by a chain of above-threshold pairs.
    """

    SEED = "seed"
    TRANSITIVE = "transitive"


def seed_clusters(
    entities: Sequence[Entity],
    score: SimilarityFn = similarity,
    threshold: float = MATCH_THRESHOLD,
) -> list[list[Entity]]:
    """Greedy clustering against each cluster's seed record.

    Walks the records in input order. Each unassigned record opens a cluster
    and pulls in every later unassigned record scoring strictly above
    ``threshold`` against it.
    """
    clusters: list[list[Entity]] = []
    assigned = [False] * len(entities)

    for i, seed in enumerate(entities):
        if assigned[i]:
            continue

        cluster = [seed]
        assigned[i] = True

        for j in range(i + 1, len(entities)):
            if assigned[j]:
                continue
            if score(seed, entities[j]) > threshold:
                cluster.append(entities[j])
                assigned[j] = True

        clusters.append(cluster)

    return clusters


def transitive_clusters(
    entities: Sequence[Entity],
    score: SimilarityFn = similarity,
    threshold: float = MATCH_THRESHOLD,
) -> list[list[Entity]]:
    """Connected components of the above-threshold similarity graph.

    Clusters are ordered by their earliest member; members keep input order.
    """
    parent = list(range(len(entities)))

    def find(i: int) -> int:
        while parent[i] != i:
            parent[i] = parent[parent[i]]
            i = parent[i]
        return i

    for i in range(len(entities)):
        for j in range(i + 1, len(entities)):
            if score(entities[i], entities[j]) > threshold:
                root_i, root_j = find(i), find(j)
                if root_i != root_j:
                    # Keep the lower index as root so cluster order follows input
                    parent[max(root_i, root_j)] = min(root_i, root_j)

    groups: dict[int, list[Entity]] = {}
    for i, entity in enumerate(entities):
        groups.setdefault(find(i), []).append(entity)

    return list(groups.values())


def cluster_entities(
    entities: Sequence[Entity],
    strategy: ClusterStrategy = ClusterStrategy.SEED,
) -> list[list[Entity]]:
    """Partition records into clusters of likely duplicates.

    Every input record lands in exactly one cluster.

    Args:
        entities: Raw records in the order connectors returned them.
        strategy: Grouping strategy (seed-only by default).

    Returns:
        Non-empty clusters; empty list for empty input.
    """
    if not entities:
        return []

    if strategy == ClusterStrategy.TRANSITIVE:
        clusters = transitive_clusters(entities)
    else:
        clusters = seed_clusters(entities)

    logger.debug(
        f"Clustered {len(entities)} records into {len(clusters)} groups "
        f"({strategy.value} strategy)"
    )
    return clusters


__all__ = [
    "ClusterStrategy",
    "cluster_entities",
    "seed_clusters",
    "transitive_clusters",
]
