import asyncio
from dataclasses import dataclass, field
from datetime import date, timedelta, timezone
from typing import Any, Awaitable, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..models.achievement import Achievement
from ..models.alert import Alert
from ..models.performance_metrics import PerformanceMetrics
from ..services.standup_repository import StandupRepository
from ..services.user_directory import UserDirectory
from ..utils.dates import Clock, to_date_str, zone_clock
from ..utils.logging import get_logger
from .status_resolver import EntryLike, MemberStatus

logger = get_logger(__name__)

STREAK_MAX_DAYS = 100
RECENT_WINDOW_DAYS = 7
ACHIEVEMENT_LIMIT = 5
ALERT_LIMIT = 3


@dataclass
class ProfileRecord:
    user_id: str
    display_name: str
    weekly_metrics: Optional[PerformanceMetrics] = None
    monthly_metrics: Optional[PerformanceMetrics] = None
    achievements: List[Achievement] = field(default_factory=list)
    alerts: List[Alert] = field(default_factory=list)
    streak: int = 0
    work_days: int = 0
    days_off: int = 0
    status: Optional[MemberStatus] = None
    work_summary: str = ""

    @property
    def latest_metrics(self) -> Optional[PerformanceMetrics]:
        return self.weekly_metrics or self.monthly_metrics


def count_streak(entries: Iterable[EntryLike], today: date, max_days: int = STREAK_MAX_DAYS) -> int:
    """Consecutive days, ending today, that have a non-day-off entry."""
    worked = {entry.date for entry in entries if not entry.is_day_off}
    streak = 0
    day = today
    for _ in range(max_days):
        if to_date_str(day) not in worked:
            break
        streak += 1
        day -= timedelta(days=1)
    return streak


def count_recent_days(entries: Iterable[EntryLike]) -> Dict[str, int]:
    work_days = days_off = 0
    for entry in entries:
        if entry.is_day_off:
            days_off += 1
        else:
            work_days += 1
    return {"work_days": work_days, "days_off": days_off}


class ProfileBuilder:
    """Assembles the performance profile of one person.

    The independent reads for a person run concurrently; a failed read leaves
    its part of the profile empty.
    """

    def __init__(
        self,
        repository: StandupRepository,
        directory: UserDirectory,
        clock: Optional[Clock] = None,
    ):
        self.repository = repository
        self.directory = directory
        self.clock = clock or zone_clock()

    async def _safe(self, label: str, user_id: str, awaitable: Awaitable[Any], default: Any) -> Any:
        try:
            return await awaitable
        except SQLAlchemyError as e:
            logger.error(f"Failed to load {label} for {user_id}: {e}")
            return default

    async def compute_streak(self, user_id: str) -> int:
        today = self.clock().date()
        start = to_date_str(today - timedelta(days=STREAK_MAX_DAYS - 1))
        entries = await self.repository.get_entries_between(user_id, start, to_date_str(today))
        return count_streak(entries, today)

    async def build(self, user_id: str) -> ProfileRecord:
        now = self.clock()
        today = now.date()
        week_start = to_date_str(today - timedelta(days=RECENT_WINDOW_DAYS - 1))
        alerts_since = (now - timedelta(days=RECENT_WINDOW_DAYS)).astimezone(timezone.utc).replace(tzinfo=None)

        display_name, metrics, achievements, alerts, streak, recent = await asyncio.gather(
            self.directory.display_name(user_id),
            self._safe("metrics", user_id, self.repository.get_latest_metrics(user_id), {}),
            self._safe(
                "achievements", user_id,
                self.repository.get_active_achievements(user_id, limit=ACHIEVEMENT_LIMIT), [],
            ),
            self._safe(
                "alerts", user_id,
                self.repository.get_recent_alerts(user_id, alerts_since, limit=ALERT_LIMIT), [],
            ),
            self._safe("streak", user_id, self.compute_streak(user_id), 0),
            self._safe(
                "recent entries", user_id,
                self.repository.get_entries_between(user_id, week_start, to_date_str(today)), [],
            ),
        )

        counts = count_recent_days(recent)
        return ProfileRecord(
            user_id=user_id,
            display_name=display_name,
            weekly_metrics=metrics.get("week"),
            monthly_metrics=metrics.get("month"),
            achievements=achievements,
            alerts=alerts,
            streak=streak,
            work_days=counts["work_days"],
            days_off=counts["days_off"],
        )
