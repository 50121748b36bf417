"""Have I Been Pwned connector.

Reports whether guessed email addresses appear in known breaches. Only
presence and breach names are kept, never breach content.
"""

import asyncio
import logging
from typing import Any
from urllib.parse import quote

from dossier.connectors.base import BaseConnector, ConnectorError, handle_http_status
from dossier.models import Entity, Location, SourceType

logger = logging.getLogger(__name__)


def generate_emails(name: str, aliases: list[str], domain: str = "gmail.com") -> list[str]:
    """Common address patterns for a name and its multi-word aliases."""
    emails: list[str] = []

    parts = name.lower().split()
    if len(parts) >= 2:
        emails.append(f"{parts[0]}.{parts[-1]}@{domain}")
        emails.append(f"{parts[0]}{parts[-1]}@{domain}")
        emails.append(f"{parts[0]}@{domain}")

    for alias in aliases:
        alias_parts = alias.lower().split()
        if len(alias_parts) >= 2:
            emails.append(f"{alias_parts[0]}.{alias_parts[-1]}@{domain}")

    return list(dict.fromkeys(emails))


class HIBPConnector(BaseConnector):
    """Breach presence indicators from haveibeenpwned.com."""

    id = "hibp"
    name = "Have I Been Pwned"
    type = SourceType.BREACH_INDICATOR
    description = "Have I Been Pwned - breach presence indicators only (no content)"
    ethical_boundaries = (
        "Presence indicators only - no breach content",
        "Respects HIBP rate limits",
        "No personal data stored",
        "Used for security research only",
    )

    BASE_URL = "https://haveibeenpwned.com/api/v3/breachedaccount"
    DEFAULT_RATE_LIMIT = 40
    # Breach presence does not confirm identity
    RESULT_CONFIDENCE = 0.4
    MAX_EMAILS = 3
    REQUEST_DELAY = 1.5  # seconds; HIBP allows one request per 1.5s

    async def search_person(
        self, name: str, aliases: list[str], location: Location | None = None
    ) -> list[Entity]:
        await self._ensure_available()

        breach_results: list[dict[str, Any]] = []
        try:
            for email in generate_emails(name, aliases)[: self.MAX_EMAILS]:
                breaches = await self._check_breaches(email)
                if breaches:
                    breach_results.append(
                        {
                            "email": email,
                            "breach_count": len(breaches),
                            "breach_names": [b.get("Name", "") for b in breaches],
                        }
                    )
                if self.REQUEST_DELAY:
                    await asyncio.sleep(self.REQUEST_DELAY)
        except ConnectorError as e:
            logger.warning(f"HIBP lookup failed: {e.message}")
            self.log_access(False, e.message)
            return []

        self.log_access(True)

        if not breach_results:
            return []

        breach_names = list(
            dict.fromkeys(n for r in breach_results for n in r["breach_names"])
        )
        metadata = {
            "breach_count": sum(r["breach_count"] for r in breach_results),
            "breach_names": breach_names,
            "emails_checked": [r["email"] for r in breach_results],
        }

        return [
            self.create_entity(
                name,
                self.RESULT_CONFIDENCE,
                [
                    self.make_source(
                        self.RESULT_CONFIDENCE,
                        url="https://haveibeenpwned.com",
                        metadata=metadata,
                    )
                ],
                locations=[location] if location else [],
            )
        ]

    async def _check_breaches(self, email: str) -> list[dict[str, Any]]:
        """Breaches for one address; empty when the address is clean (404)."""
        headers = {}
        if self.api_key:
            headers["hibp-api-key"] = self.api_key

        response = await self._request(
            "GET",
            f"{self.BASE_URL}/{quote(email, safe='')}",
            headers=headers,
        )

        status_type, exc = handle_http_status(self.id, response.status_code)
        if status_type == "no_data":
            return []
        if status_type == "rate_limited":
            logger.warning("HIBP rate limited")
            return []
        if exc:
            raise exc

        data = self._parse_json(response)
        return data if isinstance(data, list) else []
