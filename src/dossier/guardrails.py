"""Ethical guardrails and compliance controls.

Validates person searches before any connector is contacted, redacts
sensitive patterns from results, and surfaces jurisdiction notices.
"""

import logging
import re
import time
from collections.abc import Callable

from pydantic import BaseModel, Field

from dossier.models import Entity, Location, PersonSearchInput

logger = logging.getLogger(__name__)

# Terms that must not appear in a searched name (privacy-sensitive lookups)
BLOCKED_TERMS: tuple[str, ...] = (
    "ssn",
    "social security",
    "tax file number",
    "tfn",
    "credit card",
    "bank account",
    "passport number",
)

REDACTED = "[REDACTED]"

SSN_PATTERN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")
CREDIT_CARD_PATTERN = re.compile(r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}\b")

GDPR_COUNTRIES = ("DE", "FR", "IT", "ES", "NL", "BE")

RATE_LIMIT_WINDOW_SECONDS = 60 * 60

LOW_THRESHOLD_WARNING = 0.5

DISCLAIMER = """\
OSINT DISCLAIMER:
This tool provides publicly available information only. Results are:
- Sourced from publicly accessible data
- Not guaranteed to be accurate or current
- Subject to source availability and rate limits
- Intended for legitimate research and security purposes only

Users must comply with:
- Local privacy and data protection laws
- Terms of service of source platforms
- Ethical guidelines for OSINT research
- No use for harassment, stalking, or illegal activities"""


class QueryValidation(BaseModel):
    """Outcome of validating a search request."""

    valid: bool
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class JurisdictionCheck(BaseModel):
    """Jurisdiction notices for a search location."""

    allowed: bool = True
    restrictions: list[str] = Field(default_factory=list)


class EthicalGuardrails:
    """Query validation, rate limiting and result sanitization.

    Attributes:
        max_queries_per_hour: Per-client query budget in a sliding one-hour window.
    """

    def __init__(
        self,
        max_queries_per_hour: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_queries_per_hour = max_queries_per_hour
        self._clock = clock
        self._query_times: dict[str, list[float]] = {}

    def validate_query(
        self, query: PersonSearchInput, client_id: str = "default"
    ) -> QueryValidation:
        """Check a search request against the guardrails.

        Each call made while under budget counts against the client's hourly
        allowance, even if other checks reject it.

        Args:
            query: The search request.
            client_id: Caller identity for rate limiting.

        Returns:
            QueryValidation with errors (blocking) and warnings (advisory).
        """
        warnings: list[str] = []
        errors: list[str] = []

        search_text = " ".join(
            part for part in [query.full_name, *query.aliases] if part
        ).lower()

        for term in BLOCKED_TERMS:
            if term in search_text:
                errors.append(f"Query contains blocked term: {term}")

        if not query.full_name and not query.aliases:
            errors.append("At least one name (full_name or aliases) must be provided")

        if not self._check_rate_limit(client_id):
            errors.append("Rate limit exceeded. Please wait before making another query.")

        if query.location and query.location.city and query.location.state:
            warnings.append(
                "Specific location queries may return sensitive information. Use responsibly."
            )

        if query.confidence_threshold < LOW_THRESHOLD_WARNING:
            warnings.append(
                "Low confidence threshold may return false positives. Verify results carefully."
            )

        if errors:
            logger.warning(f"Query rejected with {len(errors)} error(s)")

        return QueryValidation(valid=not errors, warnings=warnings, errors=errors)

    def _check_rate_limit(self, client_id: str) -> bool:
        """Record a query for the client if within budget."""
        now = self._clock()
        self._evict_stale(now)
        recent = [
            ts
            for ts in self._query_times.get(client_id, [])
            if now - ts < RATE_LIMIT_WINDOW_SECONDS
        ]

        if len(recent) >= self.max_queries_per_hour:
            self._query_times[client_id] = recent
            return False

        recent.append(now)
        self._query_times[client_id] = recent
        return True

    def _evict_stale(self, now: float) -> None:
        """Forget clients with no query inside the current window."""
        # Timestamps are appended in order, so the last one is the newest
        stale = [
            client_id
            for client_id, times in self._query_times.items()
            if not times or now - times[-1] >= RATE_LIMIT_WINDOW_SECONDS
        ]
        for client_id in stale:
            del self._query_times[client_id]

    def sanitize_results(self, entities: list[Entity]) -> list[Entity]:
        """Strip sensitive data from resolved entities.

        Notes are scrubbed of SSN and card-number patterns; profiles without
        a URL, or whose URL mentions "private", are dropped. Returns copies.
        """
        sanitized = []
        for entity in entities:
            profiles = [p for p in entity.profiles if p.url and "private" not in p.url]
            sanitized.append(
                entity.model_copy(
                    update={
                        "notes": sanitize_text(entity.notes) if entity.notes else entity.notes,
                        "profiles": profiles,
                    }
                )
            )
        return sanitized

    def check_jurisdiction(self, location: Location | None = None) -> JurisdictionCheck:
        """Jurisdiction-specific notices for a location. Searches are always allowed."""
        restrictions: list[str] = []
        country = location.country.upper() if location and location.country else None

        if country in GDPR_COUNTRIES:
            restrictions.append(
                "EU jurisdiction: Ensure GDPR compliance for personal data processing"
            )

        if country == "AU":
            restrictions.append("Australia: Comply with Privacy Act 1988")

        return JurisdictionCheck(allowed=True, restrictions=restrictions)

    @staticmethod
    def get_disclaimer() -> str:
        return DISCLAIMER


def sanitize_text(text: str) -> str:
    """Replace SSN and credit-card-like numbers with a redaction marker."""
    sanitized = SSN_PATTERN.sub(REDACTED, text)
    return CREDIT_CARD_PATTERN.sub(REDACTED, sanitized)


__all__ = [
    "BLOCKED_TERMS",
    "DISCLAIMER",
    "EthicalGuardrails",
    "JurisdictionCheck",
    "QueryValidation",
    "sanitize_text",
]
