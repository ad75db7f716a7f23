"""
Availability resolution for a single team member on a single date.

``resolve_status`` is a pure function of the stored entries and the current
time; ``StatusResolver`` fetches those entries and calls it.
"""
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Protocol

from ..services.standup_repository import StandupRepository
from ..services.user_directory import UserDirectory
from ..utils.dates import (
    Clock,
    DateRelation,
    classify_date,
    day_off_window,
    describe_day_off_range,
    format_long_date,
    humanize_upcoming_date,
    minute_of_day,
    parse_date_str,
    partial_day_kind,
    to_date_str,
    zone_clock,
)
from ..utils.logging import get_logger

logger = get_logger(__name__)

NO_REASON = "No details provided"


class EntryLike(Protocol):
    date: str
    is_day_off: bool
    day_off_start_time: Optional[str]
    day_off_end_time: Optional[str]
    day_off_reason: Optional[str]


class AvailabilityState(str, Enum):
    SCHEDULED_OFF = "scheduled_off"
    NOT_YET_DUE = "not_yet_due"
    OUT_NOW = "out_now"
    OUT_LATER = "out_later"
    BACK = "back"
    WORKING = "working"
    NOT_SUBMITTED = "not_submitted"
    WAS_OFF = "was_off"
    WORKED = "worked"
    DID_NOT_SUBMIT = "did_not_submit"


STATUS_EMOJI = {
    AvailabilityState.SCHEDULED_OFF: "📅",
    AvailabilityState.NOT_YET_DUE: "✅",
    AvailabilityState.OUT_NOW: "🚫",
    AvailabilityState.OUT_LATER: "⏰",
    AvailabilityState.BACK: "✅",
    AvailabilityState.WORKING: "✅",
    AvailabilityState.NOT_SUBMITTED: "❓",
    AvailabilityState.WAS_OFF: "🌴",
    AvailabilityState.WORKED: "✅",
    AvailabilityState.DID_NOT_SUBMIT: "❓",
}


@dataclass(frozen=True)
class MemberStatus:
    user_id: str
    display_name: str
    target_date: str
    relation: DateRelation
    state: AvailabilityState
    status_line: str
    history_line: str = ""
    upcoming_line: str = ""
    reason: Optional[str] = None

    @property
    def status_emoji(self) -> str:
        return STATUS_EMOJI[self.state]

    @property
    def text(self) -> str:
        return " ".join(part for part in (self.status_line, self.history_line, self.upcoming_line) if part)


def _reason(entry: EntryLike) -> str:
    return entry.day_off_reason or NO_REASON


def _range(entry: EntryLike) -> str:
    return describe_day_off_range(entry.day_off_start_time, entry.day_off_end_time)


def describe_upcoming(entry: Optional[EntryLike], today: date) -> str:
    """One-line description of the next day off after today."""
    if entry is None:
        return ""
    label = humanize_upcoming_date(parse_date_str(entry.date), today)
    kind = partial_day_kind(entry.day_off_start_time, entry.day_off_end_time)
    window = f"{_range(entry)}, {kind}" if kind else _range(entry)
    return f"Next day off: {label} ({window}). Reason: {_reason(entry)}."


def resolve_status(
    user_id: str,
    display_name: str,
    target: date,
    now: datetime,
    entry: Optional[EntryLike],
    last_entry: Optional[EntryLike] = None,
    next_day_off: Optional[EntryLike] = None,
) -> MemberStatus:
    """Classify availability of one person on ``target`` as seen at ``now``.

    ``entry`` is the stored entry for ``target`` itself. ``last_entry`` (the
    latest entry before today) only matters for today without a submission.
    ``next_day_off`` is the nearest day off strictly after today.
    """
    today = now.date()
    relation = classify_date(target, today)
    label = format_long_date(target)
    day_off = entry if entry is not None and entry.is_day_off else None
    history_line = ""
    reason = day_off.day_off_reason if day_off is not None else None

    if relation is DateRelation.FUTURE:
        if day_off is not None:
            state = AvailabilityState.SCHEDULED_OFF
            status_line = (
                f"{display_name} has time off scheduled for {label} ({_range(day_off)}). "
                f"Reason: {_reason(day_off)}."
            )
        else:
            state = AvailabilityState.NOT_YET_DUE
            status_line = (
                f"{display_name} has no time off planned for {label}; "
                f"that standup isn't due yet."
            )

    elif relation is DateRelation.TODAY:
        if day_off is not None:
            start, end = day_off_window(day_off.day_off_start_time, day_off.day_off_end_time)
            current = minute_of_day(now)
            range_text = _range(day_off)
            if start <= current < end:
                state = AvailabilityState.OUT_NOW
                status_line = f"{display_name} is out of the office right now ({range_text})."
            elif current < start:
                state = AvailabilityState.OUT_LATER
                status_line = f"{display_name} is working right now but will be out from {range_text}."
            else:
                state = AvailabilityState.BACK
                status_line = f"{display_name} is back now (was out {range_text})."
            status_line += f" Reason: {_reason(day_off)}."
        elif entry is not None:
            state = AvailabilityState.WORKING
            status_line = f"{display_name} submitted a standup today and is working."
        else:
            state = AvailabilityState.NOT_SUBMITTED
            status_line = f"{display_name} hasn't submitted a standup yet today."
            if last_entry is not None:
                status_line += f" Last update was {format_long_date(parse_date_str(last_entry.date))}."
            else:
                history_line = "No historical standups found."

    else:
        if day_off is not None:
            state = AvailabilityState.WAS_OFF
            status_line = (
                f"{display_name} was off on {label} ({_range(day_off)}). "
                f"Reason: {_reason(day_off)}."
            )
        elif entry is not None:
            state = AvailabilityState.WORKED
            status_line = f"{display_name} worked on {label} and submitted a standup."
        else:
            state = AvailabilityState.DID_NOT_SUBMIT
            status_line = f"{display_name} did not submit a standup on {label}."

    return MemberStatus(
        user_id=user_id,
        display_name=display_name,
        target_date=to_date_str(target),
        relation=relation,
        state=state,
        status_line=status_line,
        history_line=history_line,
        upcoming_line=describe_upcoming(next_day_off, today),
        reason=reason,
    )


class StatusResolver:
    """Fetches the entries a status needs and resolves it"""

    def __init__(
        self,
        repository: StandupRepository,
        directory: UserDirectory,
        clock: Optional[Clock] = None,
    ):
        self.repository = repository
        self.directory = directory
        self.clock = clock or zone_clock()

    async def describe(self, user_id: str, target: Optional[date] = None) -> MemberStatus:
        now = self.clock()
        today_str = to_date_str(now.date())
        target = target or now.date()
        target_str = to_date_str(target)

        display_name = await self.directory.display_name(user_id)
        entry = await self.repository.get_entry(user_id, target_str)

        last_entry = None
        if entry is None and target_str == today_str:
            last_entry = await self.repository.get_latest_entry_before(user_id, today_str)

        next_day_off = await self.repository.get_next_day_off_after(user_id, today_str)

        status = resolve_status(
            user_id,
            display_name,
            target,
            now,
            entry,
            last_entry=last_entry,
            next_day_off=next_day_off,
        )
        logger.debug(f"Resolved {user_id} on {target_str}: {status.state.value}")
        return status
