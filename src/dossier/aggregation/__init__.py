"""Entity resolution engine.

Provides pairwise similarity scoring, clustering of likely-duplicate person
records, and merging of clusters into resolved records.
"""

from dossier.aggregation.clustering import (
    ClusterStrategy,
    cluster_entities,
)
from dossier.aggregation.merger import merge_cluster
from dossier.aggregation.resolver import PersonResolver
from dossier.aggregation.similarity import (
    MATCH_THRESHOLD,
    explain_similarity,
    name_similarity,
    similarity,
)

__all__ = [
    # Clustering exports
    "ClusterStrategy",
    "cluster_entities",
    # Merger exports
    "merge_cluster",
    # Resolver exports
    "PersonResolver",
    # Similarity exports
    "MATCH_THRESHOLD",
    "explain_similarity",
    "name_similarity",
    "similarity",
]
