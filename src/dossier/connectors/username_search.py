"""Username enumeration connector.

Guesses likely usernames from a person's name and aliases and checks which
platform profile pages exist.
"""

import asyncio
import logging

from dossier.connectors.base import BaseConnector, ConnectorError
from dossier.models import Entity, Location, Profile, SourceType

logger = logging.getLogger(__name__)

# Profile URL template per platform
PLATFORM_URLS: dict[str, str] = {
    "github": "https://github.com/{username}",
    "twitter": "https://twitter.com/{username}",
    "instagram": "https://instagram.com/{username}",
    "facebook": "https://facebook.com/{username}",
    "linkedin": "https://linkedin.com/in/{username}",
    "reddit": "https://reddit.com/user/{username}",
    "youtube": "https://youtube.com/@{username}",
    "tiktok": "https://tiktok.com/@{username}",
    "pinterest": "https://pinterest.com/{username}",
    "snapchat": "https://snapchat.com/add/{username}",
}


def generate_usernames(name: str, aliases: list[str]) -> list[str]:
    """Candidate usernames from a full name and aliases, deduplicated in order.

    "John Doe" yields johndoe, john.doe and john; each alias contributes its
    words joined together.
    """
    usernames: list[str] = []

    parts = name.lower().split()
    if len(parts) >= 2:
        usernames.append("".join(parts))
        usernames.append(parts[0] + parts[-1])
        usernames.append(f"{parts[0]}.{parts[-1]}")
        usernames.append(parts[0])

    for alias in aliases:
        alias_parts = alias.lower().split()
        if alias_parts:
            usernames.append("".join(alias_parts))

    return list(dict.fromkeys(usernames))


class UsernameSearchConnector(BaseConnector):
    """Checks which platforms host a profile for the generated usernames."""

    id = "username_search"
    name = "Username Search"
    type = SourceType.USERNAME_SEARCH
    description = "Username enumeration across multiple platforms"
    ethical_boundaries = (
        "Public profiles only",
        "No authentication bypass",
        "Respects platform rate limits",
        "No scraping of private content",
    )

    DEFAULT_RATE_LIMIT = 20
    DEFAULT_TIMEOUT = 5.0
    RESULT_CONFIDENCE = 0.6
    MAX_USERNAMES = 5
    PLATFORMS = ("github", "twitter", "instagram")
    PROBE_DELAY = 0.5  # seconds between profile checks

    async def search_person(
        self, name: str, aliases: list[str], location: Location | None = None
    ) -> list[Entity]:
        await self._ensure_available()

        profiles: list[Profile] = []
        for username in generate_usernames(name, aliases)[: self.MAX_USERNAMES]:
            for platform in self.PLATFORMS:
                profile = await self._check_username(platform, username)
                if profile:
                    profiles.append(profile)
                if self.PROBE_DELAY:
                    await asyncio.sleep(self.PROBE_DELAY)

        self.log_access(True)

        if not profiles:
            return []

        logger.info(f"Username search found {len(profiles)} profile(s)")
        return [
            self.create_entity(
                name,
                self.RESULT_CONFIDENCE,
                [self.make_source(self.RESULT_CONFIDENCE)],
                profiles=profiles,
                locations=[location] if location else [],
            )
        ]

    async def _check_username(self, platform: str, username: str) -> Profile | None:
        """Profile if the platform page answers 200, otherwise None."""
        template = PLATFORM_URLS.get(platform)
        if not template:
            return None

        url = template.format(username=username)
        try:
            response = await self._request("GET", url, follow_redirects=True)
        except ConnectorError as e:
            # Unreachable page is treated as "no profile"
            logger.debug(f"Profile check failed for {platform}: {e.message}")
            return None

        if response.status_code != 200:
            return None

        return Profile(platform=platform, username=username, url=url, display_name=username)
