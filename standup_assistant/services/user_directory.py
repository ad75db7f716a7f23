from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from ..integrations.base import IntegrationError
from ..integrations.slack_client import SlackUser
from ..utils.logging import get_logger

logger = get_logger(__name__)

UserLookup = Callable[[str], Awaitable[SlackUser]]


@dataclass(frozen=True)
class UserProfile:
    user_id: str
    name: str
    avatar_url: Optional[str] = None
    email: Optional[str] = None


class UserDirectory:
    """Memoizes Slack user id -> display name, avatar and email.

    One instance per process, handed to every component that needs names.
    Entries never expire; the cache is not a source of truth and can be
    cleared at any time.
    """

    def __init__(self, lookup: UserLookup):
        self._lookup = lookup
        self._cache: Dict[str, UserProfile] = {}

    def __len__(self) -> int:
        return len(self._cache)

    async def get(self, user_id: Optional[str]) -> UserProfile:
        if not user_id:
            return UserProfile(user_id="", name="Unknown")

        cached = self._cache.get(user_id)
        if cached is not None:
            return cached

        try:
            user = await self._lookup(user_id)
        except IntegrationError as e:
            logger.error(f"Error fetching user {user_id}: {e}")
            # Not cached so a later call can retry the lookup
            return UserProfile(user_id=user_id, name=f"@{user_id}")

        profile = UserProfile(
            user_id=user_id,
            name=user.real_name or user.display_name or user.name or f"@{user_id}",
            avatar_url=user.avatar_url,
            email=user.email,
        )
        self._cache[user_id] = profile
        return profile

    async def display_name(self, user_id: str) -> str:
        profile = await self.get(user_id)
        return profile.name or f"User {user_id}"

    def clear(self) -> None:
        self._cache.clear()
