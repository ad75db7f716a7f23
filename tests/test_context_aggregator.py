"""
Tests for context aggregation.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from standup_assistant.agents.context_aggregator import (
    LINEAR_DISABLED_TEXT,
    MISSING_TICKET_ID_TEXT,
    ContextAggregator,
)
from standup_assistant.agents.intent_router import route
from standup_assistant.integrations.linear_client import (
    LinearClient,
    LinearConfig,
    LinearError,
    LinearIssue,
    LinearUser,
)
from standup_assistant.services.standup_repository import StandupRepository


def make_entry(user_id="U1ALICE", day="2026-10-14", **fields):
    defaults = dict(
        slack_user_id=user_id,
        date=day,
        yesterday="",
        today="",
        blockers="",
        notes="",
        is_day_off=False,
        day_off_start_time=None,
        day_off_end_time=None,
        day_off_reason=None,
    )
    defaults.update(fields)
    return SimpleNamespace(**defaults)


def make_issue(identifier, state, priority=None):
    return LinearIssue(id=identifier.lower(), identifier=identifier, title=f"Work on {identifier}",
                       state=state, priority_label=priority)


@pytest.fixture
def repository():
    repo = Mock(spec=StandupRepository)
    repo.get_entry.return_value = None
    repo.get_latest_entry_before.return_value = None
    repo.get_next_day_off_after.return_value = None
    repo.get_entries_since.return_value = []
    repo.get_entries_for_date.return_value = []
    return repo


@pytest.fixture
def linear():
    client = LinearClient(LinearConfig(api_key="lin_api_test"))
    client.get_user_by_email = AsyncMock(return_value=LinearUser(id="lu1", name="Alice"))
    client.get_active_issues_for_user = AsyncMock(return_value=[])
    client.get_issue_by_identifier = AsyncMock(return_value=None)
    return client


@pytest.fixture
def disabled_linear():
    return LinearClient(LinearConfig())


class TestAvailability:
    @pytest.mark.asyncio
    async def test_one_status_per_mention_in_order(self, repository, directory, clock):
        aggregator = ContextAggregator(repository, directory, clock=clock)

        result = await aggregator.aggregate(route("where are <@U2BOB> and <@U1ALICE>?"))

        assert [s.display_name for s in result.statuses] == ["Bob", "Alice"]
        assert result.contexts[0].startswith("Bob hasn't submitted a standup yet today.")
        assert result.contexts[1].startswith("Alice hasn't submitted a standup yet today.")


class TestWorkSummary:
    @pytest.mark.asyncio
    async def test_standup_sections_only_when_present(self, repository, directory, clock):
        repository.get_entry.return_value = make_entry(today="• Build export", blockers="Waiting on QA")
        aggregator = ContextAggregator(repository, directory, clock=clock)

        text = await aggregator.describe_standup_work("U1ALICE")

        assert text == (
            "Alice's standup for today:\n"
            "Today's work: • Build export\n"
            "Blockers: Waiting on QA"
        )

    @pytest.mark.asyncio
    async def test_missing_or_day_off_entry_contributes_nothing(self, repository, directory, clock):
        aggregator = ContextAggregator(repository, directory, clock=clock)
        assert await aggregator.describe_standup_work("U1ALICE") == ""

        repository.get_entry.return_value = make_entry(is_day_off=True, today="ignored")
        assert await aggregator.describe_standup_work("U1ALICE") == ""

    @pytest.mark.asyncio
    async def test_linear_disabled_is_silent(self, repository, directory, clock, disabled_linear):
        aggregator = ContextAggregator(repository, directory, linear=disabled_linear, clock=clock)
        assert await aggregator.describe_linear_work("U1ALICE") == ""

    @pytest.mark.asyncio
    async def test_no_email_is_silent(self, repository, directory, clock, linear):
        aggregator = ContextAggregator(repository, directory, linear=linear, clock=clock)

        assert await aggregator.describe_linear_work("U2BOB") == ""
        linear.get_user_by_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_linear_account_is_silent(self, repository, directory, clock, linear):
        linear.get_user_by_email.return_value = None
        aggregator = ContextAggregator(repository, directory, linear=linear, clock=clock)

        assert await aggregator.describe_linear_work("U1ALICE") == ""

    @pytest.mark.asyncio
    async def test_lookup_failure_is_silent(self, repository, directory, clock, linear):
        linear.get_user_by_email.side_effect = LinearError("boom", "linear")
        aggregator = ContextAggregator(repository, directory, linear=linear, clock=clock)

        assert await aggregator.describe_linear_work("U1ALICE") == ""

    @pytest.mark.asyncio
    async def test_no_active_issues(self, repository, directory, clock, linear):
        aggregator = ContextAggregator(repository, directory, linear=linear, clock=clock)

        text = await aggregator.describe_linear_work("U1ALICE")

        assert text == "Alice has no active Linear issues assigned right now."

    @pytest.mark.asyncio
    async def test_issues_grouped_by_state(self, repository, directory, clock, linear):
        linear.get_active_issues_for_user.return_value = [
            make_issue("SAK-3", "In Review"),
            make_issue("SAK-1", "In Progress", "High"),
            make_issue("SAK-9", "Blocked"),
            make_issue("SAK-2", "In Progress"),
        ]
        aggregator = ContextAggregator(repository, directory, linear=linear, clock=clock)

        text = await aggregator.describe_linear_work("U1ALICE")

        assert text.splitlines() == [
            "Here's what Alice is working on in Linear:",
            "*In Progress*",
            "• SAK-1: Work on SAK-1 (High)",
            "• SAK-2: Work on SAK-2",
            "*In Review*",
            "• SAK-3: Work on SAK-3",
            "*Blocked*",
            "• SAK-9: Work on SAK-9",
        ]
        linear.get_user_by_email.assert_awaited_once_with("alice@example.com")
        linear.get_active_issues_for_user.assert_awaited_once_with("lu1", limit=5)

    @pytest.mark.asyncio
    async def test_work_query_adds_status_and_work(self, repository, directory, clock, linear):
        repository.get_entry.return_value = make_entry(today="• Build export")
        aggregator = ContextAggregator(repository, directory, linear=linear, clock=clock)

        result = await aggregator.aggregate(route("what is <@U1ALICE> working on?"))

        assert result.contexts == [
            "Alice submitted a standup today and is working.",
            "Alice's standup for today:\nToday's work: • Build export",
            "Alice has no active Linear issues assigned right now.",
        ]


class TestTickets:
    @pytest.mark.asyncio
    async def test_disabled_linear_makes_no_repository_calls(self, repository, directory, clock, disabled_linear):
        aggregator = ContextAggregator(repository, directory, linear=disabled_linear, clock=clock)

        result = await aggregator.aggregate(route("status of ABC-123"))

        assert result.contexts == [LINEAR_DISABLED_TEXT]
        assert repository.method_calls == []

    @pytest.mark.asyncio
    async def test_keyword_without_identifier(self, repository, directory, clock, linear):
        aggregator = ContextAggregator(repository, directory, linear=linear, clock=clock)

        result = await aggregator.aggregate(route("any news on that ticket?"))

        assert result.contexts == [MISSING_TICKET_ID_TEXT]

    @pytest.mark.asyncio
    async def test_each_identifier_is_looked_up(self, repository, directory, clock, linear):
        found = LinearIssue(id="1", identifier="ABC-1", title="Fix login", state="Todo",
                            priority_label="Urgent", url="https://linear.app/t/ABC-1")

        async def lookup(identifier):
            if identifier == "ABC-2":
                raise LinearError("timeout", "linear")
            return found if identifier == "ABC-1" else None

        linear.get_issue_by_identifier.side_effect = lookup
        aggregator = ContextAggregator(repository, directory, linear=linear, clock=clock)

        result = await aggregator.aggregate(route("status of ABC-1, ABC-2 and ABC-3"))

        assert result.contexts == [
            "ABC-1: Fix login | State: Todo | Priority: Urgent | https://linear.app/t/ABC-1",
            "I couldn't look up the Linear issue ABC-2: timeout",
            "I couldn't find the Linear issue ABC-3.",
        ]


class TestGeneralContext:
    @pytest.mark.asyncio
    async def test_team_roll_call(self, repository, directory, clock):
        repository.get_entries_for_date.return_value = [
            make_entry("U1ALICE"),
            make_entry("U2BOB", is_day_off=True, day_off_reason="Sick"),
        ]
        aggregator = ContextAggregator(repository, directory, clock=clock)

        result = await aggregator.aggregate(route("who's around today?"))

        assert result.contexts == ["Today's team status:\nAlice: Working today\nBob: Day off: Sick"]
        repository.get_entries_for_date.assert_awaited_once_with("2026-10-14")

    @pytest.mark.asyncio
    async def test_recent_history_for_mentions(self, repository, directory, clock):
        repository.get_entries_since.return_value = [
            make_entry(day="2026-10-13", yesterday="Reviews", today="Tests"),
            make_entry(day="2026-10-12", is_day_off=True, day_off_reason=None),
        ]
        aggregator = ContextAggregator(repository, directory, clock=clock)

        contexts = await aggregator.general_context(route("<@U1ALICE>"))

        assert contexts == [
            "Alice's recent activity:\n"
            "Oct 13: Yesterday: Reviews | Today: Tests\n"
            "Oct 12: Day off - No reason provided"
        ]
        repository.get_entries_since.assert_awaited_once_with("U1ALICE", "2026-09-30", limit=14)

    @pytest.mark.asyncio
    async def test_nothing_to_say(self, repository, directory, clock):
        aggregator = ContextAggregator(repository, directory, clock=clock)

        result = await aggregator.aggregate(route("hello"))

        assert result.contexts == []


class TestProfiles:
    @pytest.mark.asyncio
    async def test_profile_path_skips_context_list(self, repository, directory, clock):
        repository.get_latest_metrics.return_value = {"week": None, "month": None}
        repository.get_active_achievements.return_value = []
        repository.get_recent_alerts.return_value = []
        repository.get_entries_between.return_value = []
        aggregator = ContextAggregator(repository, directory, clock=clock)

        result = await aggregator.aggregate(route("tell me everything about <@U1ALICE>"))

        assert result.contexts == []
        assert len(result.profiles) == 1
        profile = result.profiles[0]
        assert profile.status is not None
        assert profile.status.display_name == "Alice"

    @pytest.mark.asyncio
    async def test_stats_only_has_no_status(self, repository, directory, clock):
        repository.get_latest_metrics.return_value = {"week": None, "month": None}
        repository.get_active_achievements.return_value = []
        repository.get_recent_alerts.return_value = []
        repository.get_entries_between.return_value = []
        aggregator = ContextAggregator(repository, directory, clock=clock)

        result = await aggregator.aggregate(route("<@U2BOB> stats"))

        assert result.profiles[0].status is None
        assert result.profiles[0].work_summary == ""

    @pytest.mark.asyncio
    async def test_tickets_alongside_profile(self, repository, directory, clock):
        repository.get_latest_metrics.return_value = {"week": None, "month": None}
        repository.get_active_achievements.return_value = []
        repository.get_recent_alerts.return_value = []
        repository.get_entries_between.return_value = []
        aggregator = ContextAggregator(repository, directory, clock=clock)

        result = await aggregator.aggregate(route("stats for <@U1ALICE> and ABC-1"))

        assert len(result.profiles) == 1
        assert result.contexts == [LINEAR_DISABLED_TEXT]
