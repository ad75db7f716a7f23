#!/usr/bin/env python3
"""
Seed Data Script for the Standup Assistant

Creates realistic data for development:
- 5 team members with 10 days of standup entries (including days off)
- Today's standup thread record
- Weekly performance metrics and a few achievements

Usage:
    python scripts/seed_data.py              # Add seed data
    python scripts/seed_data.py --clear      # Clear all data first
    python scripts/seed_data.py --thread-ts 1728720000.000100 --channel C0123
"""
import asyncio
from datetime import timedelta

from sqlalchemy import delete

from standup_assistant.config import settings
from standup_assistant.database import async_session, init_models
from standup_assistant.models.achievement import Achievement
from standup_assistant.models.performance_metrics import PerformanceMetrics
from standup_assistant.models.standup_entry import StandupEntry
from standup_assistant.models.standup_thread import StandupThread
from standup_assistant.services.standup_repository import StandupRepository
from standup_assistant.utils.dates import to_date_str, zone_clock


# ==================== DATA DEFINITIONS ====================

MEMBERS = [
    {"id": "U01ALICE", "name": "Alice Johnson"},
    {"id": "U02BOB", "name": "Bob Martinez"},
    {"id": "U03CAROL", "name": "Carol Williams"},
    {"id": "U04DAVE", "name": "Dave Chen"},
    {"id": "U05EMMA", "name": "Emma Rodriguez"},
]

WORK_ITEMS = [
    ("• Finished login form validation\n• Reviewed PR for payments",
     "• Start password reset flow\n• Pair on flaky e2e tests", "None"),
    ("1. Deployed search indexing job\n2. Fixed pagination bug",
     "1. Tune indexing batch size", "Waiting on staging credentials"),
    ("- Wrote migration for invoices\n- Updated API docs",
     "- Invoice PDF export", "None"),
]

# (member index, day offset from today, start, end, reason)
DAYS_OFF = [
    (1, -3, "00:00", "23:59", "Vacation"),
    (2, 0, "09:00", "13:00", "Doctor appointment"),
    (3, 2, "00:00", "23:59", "Public holiday travel"),
]


# ==================== SEEDING ====================

async def clear_all_data():
    """Delete all standup data"""
    print("🗑️  Clearing existing data...")
    async with async_session() as session:
        for model in (StandupEntry, StandupThread, PerformanceMetrics, Achievement):
            await session.execute(delete(model))
        await session.commit()
    print("✅ All data cleared")


async def create_entries(repository: StandupRepository, today):
    print("\n📝 Creating standup entries...")
    days_off = {(index, offset): rest for index, offset, *rest in DAYS_OFF}
    count = 0

    for offset in range(-9, 3):
        day = today + timedelta(days=offset)
        if day.weekday() >= 5:
            continue
        for index, member in enumerate(MEMBERS):
            date = to_date_str(day)
            if (index, offset) in days_off:
                start, end, reason = days_off[(index, offset)]
                await repository.upsert_entry(
                    member["id"], date,
                    slack_user_name=member["name"],
                    is_day_off=True,
                    day_off_start_time=start,
                    day_off_end_time=end,
                    day_off_reason=reason,
                )
                count += 1
            elif offset <= 0:
                yesterday, planned, blockers = WORK_ITEMS[(index + offset) % len(WORK_ITEMS)]
                await repository.upsert_entry(
                    member["id"], date,
                    slack_user_name=member["name"],
                    yesterday=yesterday,
                    today=planned,
                    blockers=blockers,
                )
                count += 1

    print(f"  ✓ Created {count} entries for {len(MEMBERS)} members")


async def create_thread(today, thread_ts: str, channel: str):
    print("\n🧵 Recording today's standup thread...")
    async with async_session() as session:
        session.add(StandupThread(date=to_date_str(today), thread_ts=thread_ts, channel_id=channel))
        await session.commit()
    print(f"  ✓ {to_date_str(today)} -> {channel}/{thread_ts}")


async def create_metrics(today):
    print("\n📊 Creating performance metrics and achievements...")
    week_start = today - timedelta(days=today.weekday())
    async with async_session() as session:
        for index, member in enumerate(MEMBERS):
            session.add(PerformanceMetrics(
                slack_user_id=member["id"],
                slack_user_name=member["name"],
                period="week",
                start_date=to_date_str(week_start),
                end_date=to_date_str(week_start + timedelta(days=6)),
                total_submissions=5 - index % 2,
                expected_submissions=5,
                consistency_score=100 - 20 * (index % 2),
                total_tasks_completed=12 - index,
                average_tasks_per_day=round((12 - index) / 5, 1),
                velocity_trend=("increasing", "stable", "decreasing")[index % 3],
                blocker_count=index % 2,
                risk_level="medium" if index % 2 else "low",
                risk_factors=["Missed submissions"] if index % 2 else [],
                overall_score=90 - 5 * index,
                team_average_score=80,
                percentile_rank=100 - 20 * index,
            ))
        session.add(Achievement(
            slack_user_id=MEMBERS[0]["id"],
            slack_user_name=MEMBERS[0]["name"],
            achievement_type="streak",
            badge_name="On a Roll",
            badge_icon="🔥",
            description="Submitted standups 5 days in a row",
            level="bronze",
            threshold=5,
        ))
        await session.commit()
    print(f"  ✓ Created weekly metrics for {len(MEMBERS)} members")


# ==================== MAIN ====================

async def seed_database(clear_first: bool = False, thread_ts: str = None, channel: str = None):
    """Main seed function"""
    print("=" * 60)
    print("🌱 Standup Assistant - Database Seeding")
    print("=" * 60)

    await init_models()
    if clear_first:
        await clear_all_data()

    today = zone_clock(settings.app_timezone)().date()
    repository = StandupRepository(async_session)
    await create_entries(repository, today)
    await create_metrics(today)
    if thread_ts and channel:
        await create_thread(today, thread_ts, channel)

    print("\n" + "=" * 60)
    print("✅ Database seeding complete!")
    print("=" * 60)
    print("\n💡 Try mentioning the bot with:")
    print(f"  where is <@{MEMBERS[1]['id']}>?")
    print(f"  tell me everything about <@{MEMBERS[0]['id']}>")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Seed the Standup Assistant database")
    parser.add_argument("--clear", action="store_true", help="Clear all data before seeding")
    parser.add_argument("--thread-ts", help="Slack ts of today's standup thread")
    parser.add_argument("--channel", default=settings.slack_channel_id, help="Channel of the standup thread")
    args = parser.parse_args()

    asyncio.run(seed_database(clear_first=args.clear, thread_ts=args.thread_ts, channel=args.channel))
