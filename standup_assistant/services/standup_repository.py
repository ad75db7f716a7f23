from typing import List, Optional, Dict, Any
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..models.standup_entry import StandupEntry
from ..models.standup_thread import StandupThread
from ..models.performance_metrics import PerformanceMetrics
from ..models.achievement import Achievement
from ..models.alert import Alert
from ..utils.logging import get_logger

logger = get_logger(__name__)

OPEN_ALERT_STATUSES = ("active", "acknowledged")


class StandupRepository:
    """Read access to standup data, plus the submission upsert.

    Each call runs in its own short-lived session so independent reads can be
    awaited concurrently. Date arguments are ``YYYY-MM-DD`` strings.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def _first(self, stmt):
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def _all(self, stmt) -> list:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    # Standup entries

    async def get_entry(self, user_id: str, date: str) -> Optional[StandupEntry]:
        stmt = select(StandupEntry).where(
            StandupEntry.slack_user_id == user_id,
            StandupEntry.date == date
        )
        return await self._first(stmt)

    async def get_latest_entry_before(self, user_id: str, date: str) -> Optional[StandupEntry]:
        stmt = (
            select(StandupEntry)
            .where(StandupEntry.slack_user_id == user_id, StandupEntry.date < date)
            .order_by(StandupEntry.date.desc())
            .limit(1)
        )
        return await self._first(stmt)

    async def get_next_day_off_after(self, user_id: str, date: str) -> Optional[StandupEntry]:
        stmt = (
            select(StandupEntry)
            .where(
                StandupEntry.slack_user_id == user_id,
                StandupEntry.is_day_off.is_(True),
                StandupEntry.date > date
            )
            .order_by(StandupEntry.date.asc())
            .limit(1)
        )
        return await self._first(stmt)

    async def get_entries_since(self, user_id: str, since: str, limit: int = 10) -> List[StandupEntry]:
        """Entries dated on or after ``since``, newest first."""
        stmt = (
            select(StandupEntry)
            .where(StandupEntry.slack_user_id == user_id, StandupEntry.date >= since)
            .order_by(StandupEntry.date.desc())
            .limit(limit)
        )
        return await self._all(stmt)

    async def get_entries_between(self, user_id: str, start: str, end: str) -> List[StandupEntry]:
        """Entries dated in [start, end], newest first."""
        stmt = (
            select(StandupEntry)
            .where(
                StandupEntry.slack_user_id == user_id,
                StandupEntry.date >= start,
                StandupEntry.date <= end
            )
            .order_by(StandupEntry.date.desc())
        )
        return await self._all(stmt)

    async def get_entries_for_date(self, date: str) -> List[StandupEntry]:
        stmt = select(StandupEntry).where(StandupEntry.date == date).order_by(StandupEntry.id)
        return await self._all(stmt)

    async def upsert_entry(self, user_id: str, date: str, **fields: Any) -> StandupEntry:
        """Create the (user, date) entry or overwrite it on re-submission."""
        async with self._session_factory() as session:
            stmt = select(StandupEntry).where(
                StandupEntry.slack_user_id == user_id,
                StandupEntry.date == date
            )
            result = await session.execute(stmt)
            entry = result.scalar_one_or_none()
            if entry is None:
                entry = StandupEntry(slack_user_id=user_id, date=date)
                session.add(entry)

            for key, value in fields.items():
                if hasattr(entry, key):
                    setattr(entry, key, value)

            await session.commit()
            await session.refresh(entry)

        logger.info(f"Saved standup for {user_id} on {date}")
        return entry

    # Threads

    async def get_thread_for_date(self, date: str) -> Optional[StandupThread]:
        stmt = select(StandupThread).where(StandupThread.date == date)
        return await self._first(stmt)

    # Performance data (written by batch jobs)

    async def get_latest_metrics(self, user_id: str) -> Dict[str, Optional[PerformanceMetrics]]:
        """Most recent metrics document per period kind."""
        latest: Dict[str, Optional[PerformanceMetrics]] = {}
        for period in ("week", "month"):
            stmt = (
                select(PerformanceMetrics)
                .where(
                    PerformanceMetrics.slack_user_id == user_id,
                    PerformanceMetrics.period == period
                )
                .order_by(PerformanceMetrics.start_date.desc())
                .limit(1)
            )
            latest[period] = await self._first(stmt)
        return latest

    async def get_active_achievements(self, user_id: str, limit: int = 5) -> List[Achievement]:
        stmt = (
            select(Achievement)
            .where(Achievement.slack_user_id == user_id, Achievement.is_active.is_(True))
            .order_by(Achievement.earned_at.desc(), Achievement.id.desc())
            .limit(limit)
        )
        return await self._all(stmt)

    async def get_recent_alerts(self, user_id: str, since: datetime, limit: int = 3) -> List[Alert]:
        stmt = (
            select(Alert)
            .where(
                Alert.affected_user_id == user_id,
                Alert.status.in_(OPEN_ALERT_STATUSES),
                Alert.created_at >= since
            )
            .order_by(Alert.created_at.desc(), Alert.id.desc())
            .limit(limit)
        )
        return await self._all(stmt)
