import asyncio
from unittest.mock import AsyncMock, Mock

import aiohttp
import pytest
from slack_sdk.web.async_client import AsyncWebClient

from standup_assistant.integrations.base import NetworkError
from standup_assistant.integrations.slack_client import SlackClient, SlackConfig, SlackError, SlackUser
from standup_assistant.services.user_directory import UserDirectory


@pytest.fixture
def web():
    return Mock(spec=AsyncWebClient)


@pytest.fixture
def slack(web):
    return SlackClient(SlackConfig(bot_token="xoxb-test"), client=web)


class TestUserDirectory:
    @pytest.mark.asyncio
    async def test_lookups_are_memoized(self, directory, slack_lookup):
        first = await directory.get("U1ALICE")
        second = await directory.get("U1ALICE")

        assert first is second
        assert first.name == "Alice"
        assert first.email == "alice@example.com"
        slack_lookup.assert_awaited_once_with("U1ALICE")
        assert len(directory) == 1

    @pytest.mark.asyncio
    async def test_name_preference(self):
        lookup = AsyncMock(return_value=SlackUser(id="U9", name="handle", display_name="Disp"))
        directory = UserDirectory(lookup)

        assert await directory.display_name("U9") == "Disp"

    @pytest.mark.asyncio
    async def test_failure_falls_back_and_is_retried(self):
        lookup = AsyncMock(side_effect=[SlackError("user_not_found", "slack"), SlackUser(id="U9", real_name="Nina")])
        directory = UserDirectory(lookup)

        assert await directory.display_name("U9") == "@U9"
        assert await directory.display_name("U9") == "Nina"
        assert lookup.await_count == 2

    @pytest.mark.asyncio
    async def test_empty_id(self, directory, slack_lookup):
        profile = await directory.get(None)

        assert profile.name == "Unknown"
        slack_lookup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_clear(self, directory, slack_lookup):
        await directory.get("U1ALICE")
        directory.clear()
        await directory.get("U1ALICE")

        assert slack_lookup.await_count == 2


class TestSlackTransportFailures:
    @pytest.mark.asyncio
    async def test_timeout_falls_back_to_handle(self, slack, web):
        web.users_info.side_effect = asyncio.TimeoutError()
        directory = UserDirectory(slack.get_user_info)

        profile = await directory.get("U1ALICE")

        assert profile.name == "@U1ALICE"
        assert len(directory) == 0

    @pytest.mark.asyncio
    async def test_user_info_timeout_is_a_network_error(self, slack, web):
        web.users_info.side_effect = asyncio.TimeoutError()

        with pytest.raises(NetworkError):
            await slack.get_user_info("U1ALICE")

    @pytest.mark.asyncio
    async def test_connection_error_is_a_network_error(self, slack, web):
        web.conversations_replies.side_effect = aiohttp.ClientConnectionError("connection reset")

        with pytest.raises(NetworkError):
            await slack.get_thread_replies("C1", "100.000")

    @pytest.mark.asyncio
    async def test_bot_id_lookup_survives_connection_reset(self, slack, web):
        web.auth_test.side_effect = OSError("connection reset")

        assert await slack.get_bot_user_id() is None
        assert await slack.test_connection() is False

    @pytest.mark.asyncio
    async def test_not_ok_response_is_a_slack_error(self, slack, web):
        web.users_info.return_value = {"ok": False, "error": "user_not_found"}

        with pytest.raises(SlackError, match="user_not_found"):
            await slack.get_user_info("U404")
