"""Tests for Pydantic models."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from dossier.models import (
    Entity,
    Location,
    PersonSearchInput,
    Profile,
    Source,
    SourceType,
)


class TestSourceType:
    def test_values(self) -> None:
        assert SourceType.BREACH_INDICATOR.value == "breach_indicator"
        assert SourceType("archive") is SourceType.ARCHIVE
        assert len(SourceType) == 10


class TestLocation:
    def test_whitespace_stripped(self) -> None:
        assert Location(city="  Austin ").city == "Austin"

    def test_dedup_key(self) -> None:
        assert Location(city="Austin", country="US").dedup_key() == "US||Austin"
        assert Location().dedup_key() == "||"

    def test_describe(self) -> None:
        assert Location(city="Austin", state="TX", country="US").describe() == "Austin, TX, US"
        assert Location(country="US").describe() == "US"
        assert Location().describe() == ""


class TestSource:
    def test_confidence_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Source(name="x", type=SourceType.ARCHIVE, confidence=1.5)

    def test_accessed_at_defaults_to_utc_now(self) -> None:
        source = Source(name="x", type=SourceType.ARCHIVE, confidence=0.5)
        assert source.accessed_at.tzinfo is not None

    def test_naive_datetime_serialized_as_utc(self) -> None:
        source = Source(
            name="x",
            type=SourceType.ARCHIVE,
            confidence=0.5,
            accessed_at=datetime(2024, 1, 15, 12, 0),
        )
        assert source.model_dump()["accessed_at"] == "2024-01-15T12:00:00+00:00"

    def test_dedup_key(self) -> None:
        source = Source(name="HIBP", type=SourceType.BREACH_INDICATOR, confidence=0.4)
        assert source.dedup_key() == "HIBP|"


class TestProfile:
    def test_dedup_key(self) -> None:
        profile = Profile(platform="github", url="https://github.com/jdoe")
        assert profile.dedup_key() == "github|https://github.com/jdoe"


class TestEntity:
    def test_defaults(self) -> None:
        entity = Entity(name="John Doe", confidence=0.5)

        assert entity.locations == []
        assert entity.profiles == []
        assert entity.sources == []
        assert entity.facts is None

    def test_confidence_validated_on_assignment(self) -> None:
        entity = Entity(name="John Doe", confidence=0.5)
        with pytest.raises(ValidationError):
            entity.confidence = -0.1


class TestPersonSearchInput:
    def test_defaults(self) -> None:
        query = PersonSearchInput(full_name="John Doe")

        assert query.aliases == []
        assert query.location is None
        assert query.confidence_threshold == 0.3
        assert query.max_results == 50

    def test_max_results_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            PersonSearchInput(full_name="John Doe", max_results=0)

    def test_primary_name(self) -> None:
        assert PersonSearchInput(full_name="John Doe", aliases=["jd"]).primary_name() == "John Doe"
        assert PersonSearchInput(aliases=["jd", "jdoe"]).primary_name() == "jd"
        assert PersonSearchInput().primary_name() == ""
