"""
Context aggregation for routed queries.

Each intent maps to one gatherer in ``ContextAggregator.gatherers``. Gatherers
run in table order and, within a gatherer, one mentioned person at a time so
the context list follows mention order. Profile queries build structured
profiles instead; ticket lookups asked in the same breath still land in the
context list.
"""
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Awaitable, Callable, Dict, List, Optional

from ..integrations.base import IntegrationError
from ..integrations.linear_client import LinearClient, format_issue_summary, group_issues_by_state
from ..services.standup_repository import StandupRepository
from ..services.user_directory import UserDirectory
from ..utils.dates import Clock, format_short_date, parse_date_str, to_date_str, zone_clock
from ..utils.logging import get_logger
from .intent_router import Intent, RoutedQuery
from .profile_builder import ProfileBuilder, ProfileRecord
from .status_resolver import MemberStatus, StatusResolver

logger = get_logger(__name__)

LINEAR_DISABLED_TEXT = "Linear integration is not configured yet."
MISSING_TICKET_ID_TEXT = (
    'Please include a ticket identifier like "ABC-123" so I know which Linear issue to look up.'
)
HISTORY_DAYS = 14
ISSUE_LIMIT = 5


@dataclass
class AggregatedContext:
    contexts: List[str] = field(default_factory=list)
    statuses: List[MemberStatus] = field(default_factory=list)
    profiles: List[ProfileRecord] = field(default_factory=list)

    def add(self, text: Optional[str]) -> None:
        if text:
            self.contexts.append(text)


Gatherer = Callable[[RoutedQuery, AggregatedContext], Awaitable[None]]


class ContextAggregator:
    """Collects grounding facts for a routed query"""

    def __init__(
        self,
        repository: StandupRepository,
        directory: UserDirectory,
        linear: Optional[LinearClient] = None,
        clock: Optional[Clock] = None,
    ):
        self.repository = repository
        self.directory = directory
        self.linear = linear
        self.clock = clock or zone_clock()
        self.status_resolver = StatusResolver(repository, directory, self.clock)
        self.profile_builder = ProfileBuilder(repository, directory, self.clock)
        self.gatherers: Dict[Intent, Gatherer] = {
            Intent.AVAILABILITY: self._gather_availability,
            Intent.WORK_SUMMARY: self._gather_work,
            Intent.TICKET_STATUS: self._gather_tickets,
        }

    @property
    def linear_enabled(self) -> bool:
        return self.linear is not None and self.linear.is_enabled

    async def aggregate(self, query: RoutedQuery) -> AggregatedContext:
        result = AggregatedContext()

        if query.wants_profile:
            await self._gather_profiles(query, result)
            if query.has(Intent.TICKET_STATUS):
                await self._gather_tickets(query, result)
            return result

        for intent, gatherer in self.gatherers.items():
            if query.has(intent):
                await gatherer(query, result)

        if not result.contexts:
            for text in await self.general_context(query):
                result.add(text)

        logger.debug(f"Collected {len(result.contexts)} context strings")
        return result

    # Gatherers

    async def _gather_availability(self, query: RoutedQuery, result: AggregatedContext) -> None:
        for user_id in query.mentioned_users:
            status = await self.status_resolver.describe(user_id)
            result.statuses.append(status)
            result.add(status.text)

    async def _gather_work(self, query: RoutedQuery, result: AggregatedContext) -> None:
        for user_id in query.mentioned_users:
            result.add(await self.describe_standup_work(user_id))
            result.add(await self.describe_linear_work(user_id))

    async def _gather_tickets(self, query: RoutedQuery, result: AggregatedContext) -> None:
        if not self.linear_enabled:
            result.add(LINEAR_DISABLED_TEXT)
            return

        if not query.ticket_ids:
            result.add(MISSING_TICKET_ID_TEXT)
            return

        for identifier in query.ticket_ids:
            result.add(await self.describe_issue(identifier))

    async def _gather_profiles(self, query: RoutedQuery, result: AggregatedContext) -> None:
        for user_id in query.mentioned_users:
            profile = await self.profile_builder.build(user_id)
            if query.has(Intent.AVAILABILITY):
                profile.status = await self.status_resolver.describe(user_id)
            if query.has(Intent.WORK_SUMMARY):
                parts = [
                    await self.describe_standup_work(user_id),
                    await self.describe_linear_work(user_id),
                ]
                profile.work_summary = "\n\n".join(part for part in parts if part)
            result.profiles.append(profile)

    # Fact producers

    async def describe_standup_work(self, user_id: str) -> str:
        today = to_date_str(self.clock().date())
        entry = await self.repository.get_entry(user_id, today)
        if entry is None or entry.is_day_off:
            return ""

        sections = [
            ("Today's work", entry.today),
            ("Yesterday completed", entry.yesterday),
            ("Blockers", entry.blockers),
            ("Notes", entry.notes),
        ]
        lines = [f"{label}: {text.strip()}" for label, text in sections if text and text.strip()]
        if not lines:
            return ""

        name = await self.directory.display_name(user_id)
        return f"{name}'s standup for today:\n" + "\n".join(lines)

    async def describe_linear_work(self, user_id: str) -> str:
        if not self.linear_enabled:
            return ""

        profile = await self.directory.get(user_id)
        name = profile.name or f"User {user_id}"
        if not profile.email:
            logger.info(f"[Linear] Skipping work summary for {name} - no email in Slack profile")
            return ""

        try:
            linear_user = await self.linear.get_user_by_email(profile.email)
            if linear_user is None:
                logger.info(f"[Linear] Skipping work summary for {name} - no Linear user for {profile.email}")
                return ""
            issues = await self.linear.get_active_issues_for_user(linear_user.id, limit=ISSUE_LIMIT)
        except IntegrationError as e:
            logger.error(f"[Linear] Work summary lookup failed for {name}: {e}")
            return ""

        if not issues:
            return f"{name} has no active Linear issues assigned right now."

        lines = [f"Here's what {name} is working on in Linear:"]
        for state, state_issues in group_issues_by_state(issues[:ISSUE_LIMIT]):
            lines.append(f"*{state}*")
            for issue in state_issues:
                priority = f" ({issue.priority_label})" if issue.priority_label else ""
                lines.append(f"• {issue.identifier}: {issue.title}{priority}")
        return "\n".join(lines)

    async def describe_issue(self, identifier: str) -> str:
        identifier = identifier.upper()
        try:
            issue = await self.linear.get_issue_by_identifier(identifier)
        except IntegrationError as e:
            logger.error(f"[Linear] Lookup of {identifier} failed: {e}")
            return f"I couldn't look up the Linear issue {identifier}: {e}"

        if issue is None:
            return f"I couldn't find the Linear issue {identifier}."
        return format_issue_summary(issue)

    async def general_context(self, query: RoutedQuery) -> List[str]:
        """Recent history for mentioned people, or today's team roll call."""
        contexts: List[str] = []
        today = self.clock().date()

        for user_id in query.mentioned_users:
            name = await self.directory.display_name(user_id)
            since = to_date_str(today - timedelta(days=HISTORY_DAYS))
            entries = await self.repository.get_entries_since(user_id, since, limit=HISTORY_DAYS)
            if not entries:
                contexts.append(f"{name}: No recent standup submissions found.")
                continue
            lines = [self._summarize_entry(entry) for entry in entries]
            contexts.append(f"{name}'s recent activity:\n" + "\n".join(lines))

        if not query.mentioned_users and query.mentions_team:
            entries = await self.repository.get_entries_for_date(to_date_str(today))
            if entries:
                lines = []
                for entry in entries:
                    name = await self.directory.display_name(entry.slack_user_id)
                    if entry.is_day_off:
                        lines.append(f"{name}: Day off: {entry.day_off_reason or 'No reason provided'}")
                    else:
                        lines.append(f"{name}: Working today")
                contexts.append("Today's team status:\n" + "\n".join(lines))

        return contexts

    @staticmethod
    def _summarize_entry(entry) -> str:
        label = format_short_date(parse_date_str(entry.date))
        if entry.is_day_off:
            return f"{label}: Day off - {entry.day_off_reason or 'No reason provided'}"
        parts = []
        if entry.yesterday:
            parts.append(f"Yesterday: {entry.yesterday}")
        if entry.today:
            parts.append(f"Today: {entry.today}")
        if entry.blockers:
            parts.append(f"Blockers: {entry.blockers}")
        return f"{label}: {' | '.join(parts) if parts else 'Submitted with no details'}"
