"""
Mention handling: the entry point for every message that mentions the assistant.

Routes the text, gathers grounded context and replies in the originating
thread. Every failure resolves to a best-effort reply; nothing here raises
to the transport.
"""
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..config import Settings, settings as default_settings
from ..integrations.base import IntegrationError
from ..integrations.linear_client import LinearClient, LinearConfig
from ..integrations.slack_client import SlackClient, SlackConfig
from ..services.llm_provider import LLMProvider
from ..services.standup_repository import StandupRepository
from ..services.user_directory import UserDirectory
from ..utils.dates import Clock, to_date_str, zone_clock
from ..utils.logging import get_logger
from ..utils.slack_blocks import (
    HELP_FALLBACK_TEXT,
    help_blocks,
    profile_blocks,
    profile_fallback_text,
    status_blocks,
)
from .context_aggregator import LINEAR_DISABLED_TEXT, ContextAggregator
from .intent_router import CLARIFICATION_TEXT, Intent, RoutedQuery, route
from .response_synthesizer import ResponseSynthesizer

logger = get_logger(__name__)

NO_THREAD_UPDATES_TEXT = "No standup updates found in this thread."
THREAD_SUMMARY_FAILED_TEXT = "❌ Couldn't fetch the standup summary. Please try again later."
APOLOGY_TEXT = "Sorry, I encountered an error processing your request. Please try again."


class MentionEvent(BaseModel):
    """A message that mentions the assistant"""
    text: str = ""
    user: Optional[str] = None
    channel: str
    ts: str
    thread_ts: Optional[str] = None

    @property
    def reply_thread_ts(self) -> str:
        return self.thread_ts or self.ts


class Say(Protocol):
    async def __call__(
        self,
        *,
        thread_ts: str,
        text: str,
        blocks: Optional[List[Dict[str, Any]]] = None,
    ) -> Any:
        ...


class MentionAgent:
    """Answers questions about the team asked by mentioning the assistant"""

    def __init__(
        self,
        repository: StandupRepository,
        slack: SlackClient,
        aggregator: ContextAggregator,
        synthesizer: ResponseSynthesizer,
        linear: Optional[LinearClient] = None,
        bot_user_id: Optional[str] = None,
        clock: Optional[Clock] = None,
    ):
        self.repository = repository
        self.slack = slack
        self.aggregator = aggregator
        self.synthesizer = synthesizer
        self.linear = linear
        self.bot_user_id = bot_user_id
        self.clock = clock or zone_clock()

    async def _resolve_bot_user_id(self, text: str) -> Optional[str]:
        if self.bot_user_id or "<@" not in text:
            return self.bot_user_id
        try:
            self.bot_user_id = await self.slack.get_bot_user_id()
        except IntegrationError as e:
            logger.warning(f"Could not resolve bot user id: {e}")
        return self.bot_user_id

    async def handle(self, event: MentionEvent, say: Say) -> None:
        thread_ts = event.reply_thread_ts
        logger.info(f"Mention from {event.user} in {event.channel}: {event.text!r}")

        try:
            bot_user_id = await self._resolve_bot_user_id(event.text)
            query = route(event.text, bot_user_id)

            if query.has(Intent.HELP):
                await say(thread_ts=thread_ts, text=HELP_FALLBACK_TEXT, blocks=help_blocks(event.user))
                return

            if query.has(Intent.THREAD_SUMMARY):
                await say(thread_ts=thread_ts, text=await self.summarize_thread(event))
                return

            if query.has(Intent.LINEAR_TEST):
                await say(thread_ts=thread_ts, text=await self.linear_self_test())
                return

            if query.needs_clarification:
                await say(thread_ts=thread_ts, text=CLARIFICATION_TEXT)
                return

            await self.answer(query, event, say)
        except Exception as e:
            logger.error(f"Error handling mention: {e}", exc_info=True)
            await say(thread_ts=thread_ts, text=APOLOGY_TEXT)

    async def answer(self, query: RoutedQuery, event: MentionEvent, say: Say) -> None:
        thread_ts = event.reply_thread_ts
        aggregated = await self.aggregator.aggregate(query)

        if aggregated.profiles:
            for profile in aggregated.profiles:
                await say(
                    thread_ts=thread_ts,
                    text=profile_fallback_text(profile),
                    blocks=profile_blocks(profile),
                )
            if aggregated.contexts:
                synthesis = await self.synthesizer.synthesize(query.text, aggregated.contexts)
                await say(thread_ts=thread_ts, text=synthesis.text)
            return

        if not aggregated.contexts and query.general_search:
            await say(thread_ts=thread_ts, text=HELP_FALLBACK_TEXT, blocks=help_blocks(event.user))
            return

        synthesis = await self.synthesizer.synthesize(query.text, aggregated.contexts)

        structured = (
            aggregated.statuses
            and not query.has(Intent.WORK_SUMMARY)
            and not query.has(Intent.TICKET_STATUS)
        )
        if structured:
            await say(
                thread_ts=thread_ts,
                text=synthesis.text,
                blocks=status_blocks(aggregated.statuses, summary=synthesis.model_answer),
            )
            return

        await say(thread_ts=thread_ts, text=synthesis.text)

    async def summarize_thread(self, event: MentionEvent) -> str:
        """Bullet list of every human reply in the day's standup thread."""
        channel = event.channel
        thread_ts = event.reply_thread_ts

        try:
            today = to_date_str(self.clock().date())
            thread = await self.repository.get_thread_for_date(today)
            if thread is not None:
                channel = thread.channel_id or channel
                thread_ts = thread.thread_ts

            replies = await self.slack.get_thread_replies(channel, thread_ts)
        except (IntegrationError, SQLAlchemyError) as e:
            logger.error(f"Error fetching standup thread {thread_ts}: {e}")
            return THREAD_SUMMARY_FAILED_TEXT

        updates = [
            reply for reply in replies
            if reply.ts != thread_ts and reply.text and not reply.is_bot
        ]
        if not updates:
            return NO_THREAD_UPDATES_TEXT

        lines = [f"• *<@{reply.user}>*: {reply.text}" for reply in updates]
        return "📋 *Standup Summary:*\n" + "\n".join(lines)

    async def linear_self_test(self) -> str:
        if self.linear is None or not self.linear.is_enabled:
            return LINEAR_DISABLED_TEXT
        result = await self.linear.check_connection()
        return result.message


def create_mention_agent(
    settings: Optional[Settings] = None,
    session_factory: Optional[async_sessionmaker] = None,
    clock: Optional[Clock] = None,
) -> MentionAgent:
    """Wire a MentionAgent from settings"""
    settings = settings or default_settings
    if session_factory is None:
        from ..database import async_session
        session_factory = async_session

    clock = clock or zone_clock(settings.app_timezone)
    repository = StandupRepository(session_factory)
    slack = SlackClient(SlackConfig(
        bot_token=settings.slack_bot_token,
        default_channel=settings.slack_channel_id,
    ))
    linear = LinearClient(LinearConfig(
        api_key=settings.linear_api_key,
        api_url=settings.linear_api_url,
        timeout=settings.linear_timeout,
    ))
    directory = UserDirectory(slack.get_user_info)
    aggregator = ContextAggregator(repository, directory, linear=linear, clock=clock)
    synthesizer = ResponseSynthesizer(
        LLMProvider(settings),
        temperature=settings.openai_temperature,
        max_tokens=settings.max_tokens,
    )

    return MentionAgent(
        repository=repository,
        slack=slack,
        aggregator=aggregator,
        synthesizer=synthesizer,
        linear=linear,
        bot_user_id=settings.slack_bot_user_id,
        clock=clock,
    )
