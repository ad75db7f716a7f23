"""
Repository tests against a throwaway SQLite database.
"""
from datetime import datetime, timedelta

import pytest

from standup_assistant.models.achievement import Achievement
from standup_assistant.models.alert import Alert
from standup_assistant.models.performance_metrics import PerformanceMetrics
from standup_assistant.models.standup_thread import StandupThread


async def add_all(session_factory, *objects):
    async with session_factory() as session:
        session.add_all(objects)
        await session.commit()


class TestEntries:
    @pytest.mark.asyncio
    async def test_upsert_overwrites_same_day(self, repository):
        first = await repository.upsert_entry("U1", "2026-10-14", today="• Draft API")
        second = await repository.upsert_entry("U1", "2026-10-14", today="• Ship API", blockers="None")

        assert second.id == first.id
        stored = await repository.get_entry("U1", "2026-10-14")
        assert stored.today == "• Ship API"
        assert stored.blockers == "None"

    @pytest.mark.asyncio
    async def test_upsert_ignores_unknown_fields(self, repository):
        entry = await repository.upsert_entry("U1", "2026-10-14", mood="great")
        assert not hasattr(entry, "mood")

    @pytest.mark.asyncio
    async def test_latest_before_and_next_day_off(self, repository):
        await repository.upsert_entry("U1", "2026-10-09")
        await repository.upsert_entry("U1", "2026-10-12")
        await repository.upsert_entry("U1", "2026-10-14", is_day_off=True)
        await repository.upsert_entry("U1", "2026-10-16")
        await repository.upsert_entry("U1", "2026-10-20", is_day_off=True, day_off_reason="Trip")
        await repository.upsert_entry("U1", "2026-10-22", is_day_off=True)

        latest = await repository.get_latest_entry_before("U1", "2026-10-14")
        upcoming = await repository.get_next_day_off_after("U1", "2026-10-14")

        assert latest.date == "2026-10-12"
        assert upcoming.date == "2026-10-20"
        assert upcoming.day_off_reason == "Trip"

    @pytest.mark.asyncio
    async def test_ranges_are_newest_first(self, repository):
        for day in ("2026-10-01", "2026-10-05", "2026-10-10", "2026-10-14"):
            await repository.upsert_entry("U1", day)
        await repository.upsert_entry("U2", "2026-10-10")

        between = await repository.get_entries_between("U1", "2026-10-05", "2026-10-10")
        since = await repository.get_entries_since("U1", "2026-10-05", limit=2)

        assert [e.date for e in between] == ["2026-10-10", "2026-10-05"]
        assert [e.date for e in since] == ["2026-10-14", "2026-10-10"]

    @pytest.mark.asyncio
    async def test_entries_for_date(self, repository):
        await repository.upsert_entry("U1", "2026-10-14")
        await repository.upsert_entry("U2", "2026-10-14", is_day_off=True)
        await repository.upsert_entry("U3", "2026-10-13")

        entries = await repository.get_entries_for_date("2026-10-14")

        assert [e.slack_user_id for e in entries] == ["U1", "U2"]


class TestThreadsAndPerformance:
    @pytest.mark.asyncio
    async def test_thread_for_date(self, repository, session_factory):
        await add_all(session_factory, StandupThread(date="2026-10-14", thread_ts="1.0", channel_id="C1"))

        assert (await repository.get_thread_for_date("2026-10-14")).channel_id == "C1"
        assert await repository.get_thread_for_date("2026-10-13") is None

    @pytest.mark.asyncio
    async def test_latest_metrics_per_period(self, repository, session_factory):
        await add_all(
            session_factory,
            PerformanceMetrics(slack_user_id="U1", period="week", start_date="2026-10-05",
                               end_date="2026-10-11", overall_score=70),
            PerformanceMetrics(slack_user_id="U1", period="week", start_date="2026-10-12",
                               end_date="2026-10-18", overall_score=82),
            PerformanceMetrics(slack_user_id="U2", period="week", start_date="2026-10-19",
                               end_date="2026-10-25", overall_score=10),
        )

        metrics = await repository.get_latest_metrics("U1")

        assert metrics["week"].overall_score == 82
        assert metrics["month"] is None

    @pytest.mark.asyncio
    async def test_active_achievements_limited(self, repository, session_factory):
        base = datetime(2026, 10, 1)
        await add_all(session_factory, *[
            Achievement(slack_user_id="U1", achievement_type=f"type{i}", badge_name=f"Badge {i}",
                        level="bronze", earned_at=base + timedelta(days=i), is_active=i != 6)
            for i in range(7)
        ])

        achievements = await repository.get_active_achievements("U1", limit=5)

        assert [a.badge_name for a in achievements] == ["Badge 5", "Badge 4", "Badge 3", "Badge 2", "Badge 1"]

    @pytest.mark.asyncio
    async def test_recent_alerts_filter_status_and_age(self, repository, session_factory):
        now = datetime(2026, 10, 14, 8, 0)
        await add_all(
            session_factory,
            Alert(type="blocker", severity="warning", title="Fresh", affected_user_id="U1",
                  status="active", created_at=now - timedelta(days=1)),
            Alert(type="blocker", severity="info", title="Acked", affected_user_id="U1",
                  status="acknowledged", created_at=now - timedelta(days=2)),
            Alert(type="blocker", severity="info", title="Resolved", affected_user_id="U1",
                  status="resolved", created_at=now - timedelta(days=1)),
            Alert(type="blocker", severity="info", title="Old", affected_user_id="U1",
                  status="active", created_at=now - timedelta(days=10)),
        )

        alerts = await repository.get_recent_alerts("U1", now - timedelta(days=7))

        assert [a.title for a in alerts] == ["Fresh", "Acked"]
