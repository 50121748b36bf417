"""Shared pytest fixtures for Dossier tests."""

import pytest
from fixtures.entities import make_entity, make_source

from dossier.config import reset_settings
from dossier.models import Entity, Location, PersonSearchInput, SourceType


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Isolate every test from the user's config file and cached settings."""
    monkeypatch.setattr("dossier.config.CONFIG_FILE_PATH", tmp_path / "missing.toml")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def john_doe_pair() -> list[Entity]:
    """Two records of the same person from different source types."""
    return [
        make_entity(
            "John Doe",
            confidence=0.8,
            locations=[Location(city="New York", country="US")],
            sources=[make_source("Source1", SourceType.SOCIAL_NETWORK, 0.8)],
        ),
        make_entity(
            "John Doe",
            confidence=0.7,
            locations=[Location(city="New York", state="NY", country="US")],
            sources=[make_source("Source2", SourceType.SEARCH_ENGINE, 0.7)],
        ),
    ]


@pytest.fixture
def default_query() -> PersonSearchInput:
    return PersonSearchInput(full_name="John Doe", confidence_threshold=0.3, max_results=10)
