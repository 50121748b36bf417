"""Pairwise similarity scoring between person records.

The score is a weighted sum of four terms, each in [0, 1]:

- name (0.4): exact / substring / token-overlap comparison
- location (0.3): best country/state/city agreement over all location pairs
- profile (0.2): Jaccard overlap of profile platforms
- source (0.1): Jaccard overlap of source types

All four terms always contribute, so the weighted sum is already in [0, 1].
"""

from collections.abc import Iterable, Sequence

from dossier.models import (
    ConfidenceExplanation,
    Entity,
    Location,
    MatchingFactor,
    Profile,
    Source,
)

NAME_WEIGHT = 0.4
LOCATION_WEIGHT = 0.3
PROFILE_WEIGHT = 0.2
SOURCE_WEIGHT = 0.1

# Score given when either side has no location data ("unknown", not "mismatch")
UNKNOWN_LOCATION_SCORE = 0.5

SUBSTRING_NAME_SCORE = 0.8

COUNTRY_MATCH_SCORE = 0.5
STATE_MATCH_SCORE = 0.3
CITY_MATCH_WEIGHT = 0.2

# Records scoring above this are treated as the same person
MATCH_THRESHOLD = 0.6


def name_similarity(name1: str, name2: str) -> float:
    """Compare two names (or any short strings).

    Args:
        name1: First name.
        name2: Second name.

    Returns:
        1.0 on case-insensitive exact match, 0.8 if one contains the other,
        otherwise the share of whitespace tokens in common relative to the
        longer token list.
    """
    n1 = name1.lower().strip()
    n2 = name2.lower().strip()

    if n1 == n2:
        return 1.0

    if n1 in n2 or n2 in n1:
        return SUBSTRING_NAME_SCORE

    tokens1 = n1.split()
    tokens2 = n2.split()

    total_tokens = max(len(tokens1), len(tokens2))
    if total_tokens == 0:
        return 0.0

    common_tokens = [t for t in tokens1 if t in tokens2]
    return len(common_tokens) / total_tokens


def _location_pair_score(loc1: Location, loc2: Location) -> float:
    score = 0.0

    if loc1.country and loc2.country and loc1.country.lower() == loc2.country.lower():
        score += COUNTRY_MATCH_SCORE

    if loc1.state and loc2.state and loc1.state.lower() == loc2.state.lower():
        score += STATE_MATCH_SCORE

    if loc1.city and loc2.city:
        score += name_similarity(loc1.city, loc2.city) * CITY_MATCH_WEIGHT

    return score


def location_similarity(locs1: Sequence[Location], locs2: Sequence[Location]) -> float:
    """Best geographic agreement over all location pairs.

    Returns UNKNOWN_LOCATION_SCORE when either side has no locations.
    """
    if not locs1 or not locs2:
        return UNKNOWN_LOCATION_SCORE

    return max(_location_pair_score(loc1, loc2) for loc1 in locs1 for loc2 in locs2)


def _jaccard(set1: set[str], set2: set[str]) -> float:
    union = set1 | set2
    if not union:
        return 0.0
    return len(set1 & set2) / len(union)


def profile_similarity(profiles1: Iterable[Profile], profiles2: Iterable[Profile]) -> float:
    """Jaccard overlap of profile platforms; 0 if either side has none."""
    platforms1 = {p.platform for p in profiles1}
    platforms2 = {p.platform for p in profiles2}

    if not platforms1 or not platforms2:
        return 0.0

    return _jaccard(platforms1, platforms2)


def source_similarity(sources1: Iterable[Source], sources2: Iterable[Source]) -> float:
    """Jaccard overlap of source types; 0 if both sides are empty."""
    return _jaccard({s.type.value for s in sources1}, {s.type.value for s in sources2})


def similarity(e1: Entity, e2: Entity) -> float:
    """Weighted similarity between two records, in [0, 1].

    Args:
        e1: First record.
        e2: Second record.

    Returns:
        Weighted sum of the name, location, profile and source terms.
    """
    return (
        name_similarity(e1.name, e2.name) * NAME_WEIGHT
        + location_similarity(e1.locations, e2.locations) * LOCATION_WEIGHT
        + profile_similarity(e1.profiles, e2.profiles) * PROFILE_WEIGHT
        + source_similarity(e1.sources, e2.sources) * SOURCE_WEIGHT
    )


def explain_similarity(e1: Entity, e2: Entity) -> ConfidenceExplanation:
    """Break a similarity score down into its weighted factors.

    Args:
        e1: First record.
        e2: Second record.

    Returns:
        ConfidenceExplanation whose confidence_score equals similarity(e1, e2).
    """
    name_score = name_similarity(e1.name, e2.name)
    location_score = location_similarity(e1.locations, e2.locations)
    profile_score = profile_similarity(e1.profiles, e2.profiles)
    source_score = source_similarity(e1.sources, e2.sources)

    if not e1.locations or not e2.locations:
        location_note = "Location unknown on at least one side; scored as neutral"
    else:
        location_note = "Best country/state/city agreement across location pairs"

    factors = [
        MatchingFactor(
            factor="name_similarity",
            weight=NAME_WEIGHT,
            score=name_score,
            explanation=f"Token-based comparison of '{e1.name}' and '{e2.name}'",
        ),
        MatchingFactor(
            factor="location_similarity",
            weight=LOCATION_WEIGHT,
            score=location_score,
            explanation=location_note,
        ),
        MatchingFactor(
            factor="profile_similarity",
            weight=PROFILE_WEIGHT,
            score=profile_score,
            explanation="Overlap of social/professional platforms",
        ),
        MatchingFactor(
            factor="source_similarity",
            weight=SOURCE_WEIGHT,
            score=source_score,
            explanation="Overlap of source types",
        ),
    ]

    total = min(1.0, sum(f.score * f.weight for f in factors))

    if total > MATCH_THRESHOLD:
        conclusion = (
            f"Likely the same person ({total:.0%} similarity exceeds "
            f"{MATCH_THRESHOLD:.0%} merge threshold)"
        )
    else:
        conclusion = (
            f"Not merged ({total:.0%} similarity does not exceed "
            f"{MATCH_THRESHOLD:.0%} merge threshold)"
        )

    return ConfidenceExplanation(
        entity_1=e1.name,
        entity_2=e2.name,
        confidence_score=total,
        matching_factors=factors,
        conclusion=conclusion,
    )


__all__ = [
    "LOCATION_WEIGHT",
    "MATCH_THRESHOLD",
    "NAME_WEIGHT",
    "PROFILE_WEIGHT",
    "SOURCE_WEIGHT",
    "UNKNOWN_LOCATION_SCORE",
    "explain_similarity",
    "location_similarity",
    "name_similarity",
    "profile_similarity",
    "similarity",
    "source_similarity",
]
