from __future__ import annotations

import asyncio
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone

import aiohttp
from pydantic import BaseModel
from slack_sdk.web.async_client import AsyncWebClient
from slack_sdk.web.async_slack_response import AsyncSlackResponse
from slack_sdk.errors import SlackApiError

from .base import (
    BaseIntegration,
    IntegrationConfig,
    IntegrationStatus,
    AuthenticationError,
    IntegrationError,
    NetworkError
)

# Slack-specific models
class SlackConfig(IntegrationConfig):
    """Slack integration configuration."""

    name: str = "slack"
    bot_token: Optional[str] = None
    default_channel: Optional[str] = None

class SlackMessage(BaseModel):
    """Slack message representation."""

    ts: str
    channel: str = ""
    user: str = ""
    text: str = ""
    thread_ts: Optional[str] = None
    bot_id: Optional[str] = None
    subtype: Optional[str] = None
    timestamp: datetime

    @property
    def is_bot(self) -> bool:
        return bool(self.bot_id) or self.subtype == "bot_message"

    @classmethod
    def from_slack_data(cls, data: Dict[str, Any], channel: str = "") -> 'SlackMessage':
        """Create from Slack API response."""
        return cls(
            ts=data["ts"],
            channel=data.get("channel", channel),
            user=data.get("user") or "",
            text=data.get("text") or "",
            thread_ts=data.get("thread_ts"),
            bot_id=data.get("bot_id"),
            subtype=data.get("subtype"),
            timestamp=datetime.fromtimestamp(float(data["ts"]), tz=timezone.utc)
        )

class SlackUser(BaseModel):
    """Slack user representation."""

    id: str
    name: str = ""
    real_name: str = ""
    display_name: str = ""
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    is_bot: bool = False
    timezone: Optional[str] = None

class SlackError(IntegrationError):
    """Slack-specific error."""
    pass

# Main Slack client
class SlackClient(BaseIntegration[SlackConfig]):
    """
    Slack Web API client used by the assistant.

    Features:
    - Bot identity lookup
    - User profile lookup (name, email, avatar)
    - Thread reply retrieval
    - Message posting (text or blocks)

    Every Web API failure surfaces as an IntegrationError: API errors as
    SlackError, timeouts and connection failures as NetworkError.
    """

    def __init__(
        self,
        config: SlackConfig,
        client: Optional[AsyncWebClient] = None
    ) -> None:
        super().__init__(config)
        self._client: Optional[AsyncWebClient] = client
        self._bot_user_id: Optional[str] = None

    def _web(self) -> AsyncWebClient:
        if self._client is None:
            if not self.config.bot_token:
                raise AuthenticationError(
                    "No valid token provided",
                    self.config.name
                )
            self._client = AsyncWebClient(token=self.config.bot_token)
        return self._client

    async def _call(self, method: str, **kwargs) -> AsyncSlackResponse:
        """Call a Web API method, converting transport and API failures."""
        try:
            response = await getattr(self._web(), method)(**kwargs)
        except SlackApiError as e:
            self._update_metrics_failure(str(e))
            raise SlackError(
                f"Slack API error: {str(e)}",
                self.config.name
            ) from e
        except asyncio.TimeoutError as e:
            self._update_metrics_failure("timeout")
            raise NetworkError(
                f"Slack {method} timed out",
                self.config.name
            ) from e
        except (aiohttp.ClientError, OSError) as e:
            self._update_metrics_failure(str(e))
            raise NetworkError(
                f"Network error: {str(e)}",
                self.config.name
            ) from e

        if not response["ok"]:
            self._update_metrics_failure(str(response.get("error")))
            raise SlackError(
                f"Slack {method} failed: {response.get('error')}",
                self.config.name
            )
        self._update_metrics_success()
        return response

    async def test_connection(self) -> bool:
        """Test Slack connection."""
        try:
            response = await self._call("auth_test")
        except IntegrationError as e:
            self.status = IntegrationStatus.ERROR
            self._logger.error("Connection test failed: %s", str(e))
            return False

        self.status = IntegrationStatus.CONNECTED
        self._bot_user_id = response.get("user_id")
        self._logger.debug("Connection test successful, bot: %s", response.get("user"))
        return True

    async def get_bot_user_id(self) -> Optional[str]:
        """Resolve (and remember) the assistant's own user id."""
        if self._bot_user_id is None:
            await self.test_connection()
        return self._bot_user_id

    # Message operations

    async def post_message(
        self,
        channel: str,
        text: str,
        thread_ts: Optional[str] = None,
        blocks: Optional[List[Dict[str, Any]]] = None
    ) -> SlackMessage:
        """Post message to channel."""
        response = await self._call(
            "chat_postMessage",
            channel=channel,
            text=text,
            thread_ts=thread_ts,
            blocks=blocks
        )
        return SlackMessage.from_slack_data(response["message"], channel=channel)

    async def get_thread_replies(
        self,
        channel: str,
        thread_ts: str,
        limit: int = 200
    ) -> List[SlackMessage]:
        """Get every message of a thread, parent first."""
        messages: List[SlackMessage] = []
        cursor: Optional[str] = None

        while True:
            kwargs: Dict[str, Any] = {"channel": channel, "ts": thread_ts, "limit": limit}
            if cursor:
                kwargs["cursor"] = cursor
            response = await self._call("conversations_replies", **kwargs)

            for msg_data in response.get("messages", []):
                messages.append(SlackMessage.from_slack_data(msg_data, channel=channel))

            cursor = (response.get("response_metadata") or {}).get("next_cursor")
            if not response.get("has_more") or not cursor:
                break

        return messages

    # User operations

    async def get_user_info(self, user_id: str) -> SlackUser:
        """Get user information."""
        response = await self._call("users_info", user=user_id)

        user_data = response["user"]
        profile = user_data.get("profile", {})
        return SlackUser(
            id=user_data["id"],
            name=user_data.get("name", ""),
            real_name=profile.get("real_name") or user_data.get("real_name", ""),
            display_name=profile.get("display_name", ""),
            email=profile.get("email"),
            avatar_url=profile.get("image_72"),
            is_bot=user_data.get("is_bot", False),
            timezone=user_data.get("tz")
        )
