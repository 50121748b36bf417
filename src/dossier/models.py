"""Pydantic models for Dossier person lookups."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class SourceType(str, Enum):
    """Category of a data source."""

    SEARCH_ENGINE = "search_engine"
    SOCIAL_NETWORK = "social_network"
    USERNAME_SEARCH = "username_search"
    BREACH_INDICATOR = "breach_indicator"
    PUBLIC_RECORD = "public_record"
    GEOSPATIAL = "geospatial"
    NEWS_ARCHIVE = "news_archive"
    ACADEMIC = "academic"
    IMAGE_SEARCH = "image_search"
    ARCHIVE = "archive"


class Location(BaseModel):
    """A place associated with a person. All fields optional."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    city: str | None = None
    state: str | None = None
    country: str | None = None

    def dedup_key(self) -> str:
        """Composite key used when merging location lists."""
        return f"{self.country or ''}|{self.state or ''}|{self.city or ''}"

    def describe(self) -> str:
        """Comma-joined city, state, country (missing parts skipped)."""
        return ", ".join(part for part in (self.city, self.state, self.country) if part)


class Profile(BaseModel):
    """A public profile on some platform."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    platform: str
    username: str | None = None
    url: str | None = None
    display_name: str | None = None
    bio: str | None = None
    verified: bool | None = None
    follower_count: int | None = None
    created_at: str | None = None
    last_seen: str | None = None

    def dedup_key(self) -> str:
        """Composite key used when merging profile lists."""
        return f"{self.platform}|{self.url or ''}"


class Source(BaseModel):
    """Attribution for the source that produced a record."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    name: str
    type: SourceType
    url: str | None = None
    accessed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    confidence: float = Field(ge=0.0, le=1.0)
    metadata: dict[str, Any] | None = None

    @field_serializer("accessed_at")
    def serialize_dt(self, dt: datetime) -> str:
        """Serialize datetime to ISO 8601 format with timezone."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.isoformat()

    def dedup_key(self) -> str:
        """Composite key used when merging source lists."""
        return f"{self.name}|{self.url or ''}"


class Entity(BaseModel):
    """A candidate record for a person.

    Raw entities come from a single connector and carry only ``notes``.
    Resolved entities are produced by the merger and may additionally carry
    ``correlation_explanation``, ``facts`` and ``inferences``.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    name: str
    confidence: float = Field(ge=0.0, le=1.0)
    locations: list[Location] = Field(default_factory=list)
    profiles: list[Profile] = Field(default_factory=list)
    sources: list[Source] = Field(default_factory=list)
    notes: str | None = None
    correlation_explanation: str | None = None
    facts: list[str] | None = None
    inferences: list[str] | None = None


class PersonSearchInput(BaseModel):
    """Parameters for a person search."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    full_name: str | None = None
    aliases: list[str] = Field(default_factory=list)
    location: Location | None = None
    confidence_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    max_results: int = Field(default=50, ge=1)

    def primary_name(self) -> str:
        """Name to hand to connectors: full name, else first alias."""
        if self.full_name:
            return self.full_name
        return self.aliases[0] if self.aliases else ""


class SearchMetadata(BaseModel):
    """Metadata wrapped around a search response."""

    query_time: datetime
    sources_queried: list[str]
    warnings: list[str] = Field(default_factory=list)
    total_results: int
    processing_time_ms: int

    @field_serializer("query_time")
    def serialize_dt(self, dt: datetime) -> str:
        """Serialize datetime to ISO 8601 format with timezone."""
        return dt.isoformat()


class PersonSearchOutput(BaseModel):
    """Full person search response."""

    entities: list[Entity]
    search_metadata: SearchMetadata


class MatchingFactor(BaseModel):
    """One weighted term of a similarity score."""

    factor: str
    weight: float
    score: float = Field(ge=0.0, le=1.0)
    explanation: str


class ConfidenceExplanation(BaseModel):
    """Breakdown of why two entities are (or are not) considered the same person."""

    entity_1: str
    entity_2: str
    confidence_score: float = Field(ge=0.0, le=1.0)
    matching_factors: list[MatchingFactor]
    conclusion: str


__all__ = [
    "ConfidenceExplanation",
    "Entity",
    "Location",
    "MatchingFactor",
    "PersonSearchInput",
    "PersonSearchOutput",
    "Profile",
    "SearchMetadata",
    "Source",
    "SourceType",
]
