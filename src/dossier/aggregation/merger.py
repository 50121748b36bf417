"""Merging a cluster of records into one resolved person record."""

import math
from collections.abc import Callable, Iterable, Sequence
from functools import reduce
from typing import TypeVar

from dossier.models import Entity, Location, Profile, Source

# Members above this confidence are reported as facts, others as inferences
HIGH_CONFIDENCE_MATCH = 0.8

# Confidence boost per additional corroborating record
CORROBORATION_BOOST = 0.1

T = TypeVar("T")


def _dedupe(items: Iterable[T], key: Callable[[T], str]) -> list[T]:
    """Drop items whose key was already seen, keeping first-seen order."""
    seen: set[str] = set()
    unique: list[T] = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        unique.append(item)
    return unique


def deduplicate_locations(locations: Iterable[Location]) -> list[Location]:
    return _dedupe(locations, Location.dedup_key)


def deduplicate_profiles(profiles: Iterable[Profile]) -> list[Profile]:
    return _dedupe(profiles, Profile.dedup_key)


def deduplicate_sources(sources: Iterable[Source]) -> list[Source]:
    return _dedupe(sources, Source.dedup_key)


def pick_primary(cluster: Sequence[Entity]) -> Entity:
    """Most confident member; the earliest one wins ties."""
    return reduce(lambda a, b: b if b.confidence > a.confidence else a, cluster)


def merged_confidence(cluster: Sequence[Entity]) -> float:
    """Average member confidence boosted by cluster size, capped at 1.0."""
    average = sum(e.confidence for e in cluster) / len(cluster)
    return min(1.0, average * (1 + CORROBORATION_BOOST * (len(cluster) - 1)))


def build_correlation_explanation(cluster: Sequence[Entity]) -> str:
    """Summarize why the records in a cluster were linked."""
    factors: list[str] = []

    if len(cluster) > 1:
        factors.append(f"Found {len(cluster)} potential matches")

    if len({e.name for e in cluster}) > 1:
        factors.append("Name variations detected")

    location_count = sum(len(e.locations) for e in cluster)
    if location_count > 0:
        factors.append(f"Location data from {location_count} sources")

    profile_count = sum(len(e.profiles) for e in cluster)
    if profile_count > 0:
        factors.append(f"{profile_count} social/professional profiles")

    return "; ".join(factors)


def extract_facts_and_inferences(cluster: Sequence[Entity]) -> tuple[list[str], list[str]]:
    """Split what the raw members say into verifiable facts and inferences.

    Works over raw members, so repeated profiles across members are
    reported once per member.
    """
    facts: list[str] = []
    inferences: list[str] = []

    for entity in cluster:
        for profile in entity.profiles:
            facts.append(f"Profile exists on {profile.platform}: {profile.url or ''}")

        if entity.locations:
            loc_str = "; ".join(loc.describe() for loc in entity.locations)
            if loc_str:
                facts.append(f"Associated with location: {loc_str}")

        percent = f"{math.floor(entity.confidence * 100 + 0.5)}%"
        if entity.confidence > HIGH_CONFIDENCE_MATCH:
            facts.append(f"High confidence match ({percent})")
        else:
            inferences.append(f"Moderate confidence match ({percent}) - requires verification")

    return facts, inferences


def merge_cluster(cluster: Sequence[Entity]) -> Entity:
    """Collapse a cluster into a single resolved record.

    A singleton cluster is returned as-is.

    Args:
        cluster: Non-empty list of records believed to be the same person.

    Returns:
        The resolved record.
    """
    if len(cluster) == 1:
        return cluster[0]

    primary = pick_primary(cluster)
    facts, inferences = extract_facts_and_inferences(cluster)

    return Entity(
        name=primary.name,
        confidence=merged_confidence(cluster),
        locations=deduplicate_locations(loc for e in cluster for loc in e.locations),
        profiles=deduplicate_profiles(p for e in cluster for p in e.profiles),
        sources=deduplicate_sources(s for e in cluster for s in e.sources),
        notes=f"Merged from {len(cluster)} potential matches",
        correlation_explanation=build_correlation_explanation(cluster),
        facts=facts,
        inferences=inferences,
    )


__all__ = [
    "build_correlation_explanation",
    "deduplicate_locations",
    "deduplicate_profiles",
    "deduplicate_sources",
    "extract_facts_and_inferences",
    "merge_cluster",
    "merged_confidence",
    "pick_primary",
]
