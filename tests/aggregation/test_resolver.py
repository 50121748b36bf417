"""Tests for the person resolution pipeline."""

import logging

import pytest
from fixtures.entities import make_entity

from dossier.aggregation.clustering import ClusterStrategy
from dossier.aggregation.resolver import PersonResolver
from dossier.models import PersonSearchInput


class TestPersonResolver:
    """Tests for PersonResolver.resolve."""

    @pytest.fixture
    def resolver(self) -> PersonResolver:
        return PersonResolver()

    def test_empty_input(self, resolver, default_query) -> None:
        assert resolver.resolve([], default_query) == []

    def test_john_doe_pair_resolves_to_one(self, resolver, john_doe_pair, default_query) -> None:
        results = resolver.resolve(john_doe_pair, default_query)

        assert len(results) == 1
        assert results[0].name == "John Doe"
        assert results[0].confidence == pytest.approx(0.825)
        assert len(results[0].sources) == 2

    def test_singleton_passes_through(self, resolver) -> None:
        entity = make_entity("Jane Roe")
        query = PersonSearchInput(full_name="Jane Roe", confidence_threshold=0.0, max_results=1)

        [result] = resolver.resolve([entity], query)

        assert result is entity

    def test_truncates_to_max_results(self, resolver) -> None:
        entities = [make_entity(f"Person {i}", confidence=0.8) for i in range(20)]
        query = PersonSearchInput(full_name="Person", confidence_threshold=0.3, max_results=5)

        assert len(resolver.resolve(entities, query)) == 5

    def test_threshold_is_inclusive(self, resolver) -> None:
        entities = [
            make_entity("Alice Walker", confidence=0.5),
            make_entity("Bob Marley", confidence=0.49),
        ]
        query = PersonSearchInput(full_name="Alice", confidence_threshold=0.5)

        results = resolver.resolve(entities, query)
        assert [e.name for e in results] == ["Alice Walker"]

    def test_sorted_by_confidence(self, resolver, default_query) -> None:
        entities = [
            make_entity("Alice Walker", confidence=0.4),
            make_entity("Bob Marley", confidence=0.9),
            make_entity("Carol King", confidence=0.6),
        ]
        results = resolver.resolve(entities, default_query)
        assert [e.confidence for e in results] == [0.9, 0.6, 0.4]

    def test_ties_keep_cluster_order(self, resolver, default_query) -> None:
        entities = [
            make_entity("Alice Walker", confidence=0.6),
            make_entity("Bob Marley", confidence=0.6),
        ]
        results = resolver.resolve(entities, default_query)
        assert [e.name for e in results] == ["Alice Walker", "Bob Marley"]

    def test_results_never_exceed_input(self, resolver, john_doe_pair, default_query) -> None:
        entities = [*john_doe_pair, make_entity("Alice Walker")]
        results = resolver.resolve(entities, default_query)
        assert len(results) <= len(entities)

    def test_logs_summary(self, resolver, john_doe_pair, default_query, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="dossier.aggregation.resolver"):
            resolver.resolve(john_doe_pair, default_query)
        assert "Resolved 2 records into 1 clusters" in caplog.text


class TestResolverStrategy:
    """Tests for strategy selection."""

    def test_default_is_seed(self) -> None:
        assert PersonResolver().strategy == ClusterStrategy.SEED

    def test_transitive_resolves_pair(self, john_doe_pair, default_query) -> None:
        resolver = PersonResolver(ClusterStrategy.TRANSITIVE)
        results = resolver.resolve(john_doe_pair, default_query)
        assert len(results) == 1

    def test_merge_ignores_query(self, john_doe_pair, default_query) -> None:
        resolver = PersonResolver()
        other = PersonSearchInput(full_name="Someone Else", confidence_threshold=0.9)
        assert resolver.merge(john_doe_pair, default_query) == resolver.merge(
            john_doe_pair, other
        )
