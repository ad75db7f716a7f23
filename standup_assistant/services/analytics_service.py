"""
Thread analytics for a day's standup thread.

``compute_thread_analytics`` is a single pass over the thread's replies plus
the persisted entries for that date. Nothing is stored; every call starts
from scratch.
"""
import math
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from ..integrations.slack_client import SlackClient, SlackMessage
from ..models.standup_entry import StandupEntry
from ..utils.logging import get_logger
from .standup_repository import StandupRepository
from .user_directory import UserDirectory

logger = get_logger(__name__)

DAY_LABELS = "yesterday|monday|tuesday|wednesday|thursday|friday|saturday|sunday"
SECTION_LABELS = f"{DAY_LABELS}|today|blockers?|notes"

DAY_SECTION = re.compile(rf"\b({DAY_LABELS}):(.*?)(?=\b(?:{SECTION_LABELS}):|$)", re.IGNORECASE | re.DOTALL)
TODAY_SECTION = re.compile(rf"\btoday:(.*?)(?=\b(?:{SECTION_LABELS}):|$)", re.IGNORECASE | re.DOTALL)
BLOCKER_SECTION = re.compile(rf"\bblockers?:(.*?)(?=\b(?:{SECTION_LABELS}):|$)", re.IGNORECASE | re.DOTALL)

ITEM_SPLIT = re.compile(r"[•\-–]|\d+\.")
MENTION_TOKEN = re.compile(r"<[@#!][^>]*>")
TOPIC_PUNCTUATION = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()<>@|?\"'\[\]]")

STOP_WORDS = frozenset({
    "today", "yesterday", "blockers", "working", "going", "about", "with", "this",
    "that", "have", "from", "will", "would", "should", "could", "been", "were",
    "they", "their", "there", "what", "when", "where", "which", "while", "whom", "whose",
})

TOP_TOPIC_COUNT = 8
RECENT_SUBMISSION_COUNT = 5


@dataclass
class TopicCount:
    text: str
    count: int


@dataclass
class ResponseTimeBuckets:
    within_1h: int = 0
    within_3h: int = 0
    within_8h: int = 0
    over_8h: int = 0

    def add(self, hours: float) -> None:
        if hours <= 1:
            self.within_1h += 1
        elif hours <= 3:
            self.within_3h += 1
        elif hours <= 8:
            self.within_8h += 1
        else:
            self.over_8h += 1


@dataclass
class RosterMember:
    user_id: str
    name: str = ""
    avatar_url: Optional[str] = None
    submitted_in_thread: bool = False
    is_day_off: bool = False
    day_off_reason: Optional[str] = None
    task_count: int = 0
    has_blocker: bool = False


@dataclass
class ThreadAnalytics:
    date: str
    thread_ts: str
    team_size: int
    participants: List[str] = field(default_factory=list)
    completion_rate: int = 0
    task_counts: Dict[str, int] = field(default_factory=dict)
    yesterday_items: int = 0
    today_items: int = 0
    blocker_items: int = 0
    blocker_count: int = 0
    blocker_users: List[str] = field(default_factory=list)
    response_times: ResponseTimeBuckets = field(default_factory=ResponseTimeBuckets)
    topics: List[TopicCount] = field(default_factory=list)
    avg_message_length: int = 0
    avg_tasks_per_person: float = 0.0
    recent_submissions: List[str] = field(default_factory=list)
    roster: List[RosterMember] = field(default_factory=list)

    @property
    def total_tasks(self) -> int:
        return self.yesterday_items + self.today_items


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def split_items(section_text: str) -> List[str]:
    return [item.strip() for item in ITEM_SPLIT.split(section_text) if item.strip()]


def count_tasks_from_text(text: Optional[str]) -> int:
    """Marker count for a persisted section; at least 1 when it has text."""
    if not text:
        return 0
    markers = ITEM_SPLIT.findall(text)
    if markers:
        return len(markers)
    return 1 if text.strip() else 0


def has_blocker(text: str) -> bool:
    lowered = text.lower()
    if "blocker:" not in lowered and "blockers:" not in lowered:
        return False
    return "blocker: none" not in lowered and "blockers: none" not in lowered


def extract_topic_words(text: str) -> List[str]:
    cleaned = TOPIC_PUNCTUATION.sub("", MENTION_TOKEN.sub(" ", text).lower())
    return [word for word in cleaned.split() if len(word) > 4 and word not in STOP_WORDS]


def top_topics(texts: Iterable[str], limit: int = TOP_TOPIC_COUNT) -> List[TopicCount]:
    """Most frequent topic words; ties keep first-seen order."""
    counts: Dict[str, int] = {}
    for text in texts:
        for word in extract_topic_words(text):
            counts[word] = counts.get(word, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [TopicCount(text=word, count=count) for word, count in ranked[:limit]]


def count_reply_items(text: str) -> Dict[str, int]:
    counts = {"yesterday": 0, "today": 0, "blockers": 0}

    day_match = DAY_SECTION.search(text)
    if day_match:
        counts["yesterday"] = len(split_items(day_match.group(2)))

    today_match = TODAY_SECTION.search(text)
    if today_match:
        counts["today"] = len(split_items(today_match.group(1)))

    blocker_match = BLOCKER_SECTION.search(text)
    if blocker_match:
        blocker_text = blocker_match.group(1).strip()
        if blocker_text and blocker_text.lower() != "none":
            counts["blockers"] = len(split_items(blocker_match.group(1)))

    return counts


def is_countable_reply(message: SlackMessage, thread_ts: str, excluded: Iterable[str] = ()) -> bool:
    return (
        message.ts != thread_ts
        and bool(message.user)
        and bool(message.text)
        and not message.is_bot
        and message.user not in set(excluded)
    )


def compute_thread_analytics(
    date: str,
    thread_ts: str,
    replies: Sequence[SlackMessage],
    entries: Sequence[StandupEntry] = (),
    team_size: int = 18,
    excluded_user_ids: Iterable[str] = (),
) -> ThreadAnalytics:
    excluded = set(excluded_user_ids)
    analytics = ThreadAnalytics(date=date, thread_ts=thread_ts, team_size=team_size)
    thread_start = float(thread_ts)
    total_length = 0
    texts: List[str] = []
    blocker_users: Dict[str, bool] = {}

    for reply in replies:
        if not is_countable_reply(reply, thread_ts, excluded):
            continue

        texts.append(reply.text)
        total_length += len(reply.text)
        analytics.response_times.add((float(reply.ts) - thread_start) / 3600)

        if reply.user not in analytics.task_counts:
            analytics.participants.append(reply.user)
            analytics.task_counts[reply.user] = 0

        if has_blocker(reply.text):
            analytics.blocker_count += 1
            blocker_users[reply.user] = True

        items = count_reply_items(reply.text)
        analytics.yesterday_items += items["yesterday"]
        analytics.today_items += items["today"]
        analytics.blocker_items += items["blockers"]
        analytics.task_counts[reply.user] += items["yesterday"] + items["today"]

    participant_count = len(analytics.participants)
    analytics.blocker_users = list(blocker_users)
    analytics.topics = top_topics(texts)
    analytics.recent_submissions = analytics.participants[:RECENT_SUBMISSION_COUNT]
    if team_size > 0:
        analytics.completion_rate = round_half_up(participant_count / team_size * 100)
    if participant_count:
        analytics.avg_message_length = round_half_up(total_length / participant_count)
        analytics.avg_tasks_per_person = round(analytics.total_tasks / participant_count, 1)

    analytics.roster = reconcile_roster(analytics, entries)
    return analytics


def reconcile_roster(analytics: ThreadAnalytics, entries: Sequence[StandupEntry]) -> List[RosterMember]:
    """Thread participants plus anyone with a stored entry for the date."""
    by_user = {entry.slack_user_id: entry for entry in entries}
    member_ids = list(analytics.participants)
    for entry in entries:
        if entry.slack_user_id not in member_ids:
            member_ids.append(entry.slack_user_id)

    roster = []
    for user_id in member_ids:
        entry = by_user.get(user_id)
        is_day_off = bool(entry is not None and entry.is_day_off)
        if user_id in analytics.task_counts:
            task_count = analytics.task_counts[user_id]
        elif entry is not None and not is_day_off:
            task_count = count_tasks_from_text(entry.yesterday) + count_tasks_from_text(entry.today)
        else:
            task_count = 0
        roster.append(RosterMember(
            user_id=user_id,
            submitted_in_thread=user_id in analytics.task_counts,
            is_day_off=is_day_off,
            day_off_reason=entry.day_off_reason if entry is not None else None,
            task_count=task_count,
            has_blocker=user_id in analytics.blocker_users,
        ))
    return roster


class AnalyticsService:
    """Fetches a day's thread and entries and computes its analytics"""

    def __init__(
        self,
        repository: StandupRepository,
        slack: SlackClient,
        directory: UserDirectory,
        team_size: int = 18,
        excluded_user_ids: Iterable[str] = (),
    ):
        self.repository = repository
        self.slack = slack
        self.directory = directory
        self.team_size = team_size
        self.excluded_user_ids = list(excluded_user_ids)

    async def analyze_date(self, date: str) -> Optional[ThreadAnalytics]:
        """Analytics for the standup thread of ``date``; None when no thread exists."""
        thread = await self.repository.get_thread_for_date(date)
        if thread is None:
            logger.info(f"No standup thread recorded for {date}")
            return None

        replies = await self.slack.get_thread_replies(thread.channel_id, thread.thread_ts)
        entries = await self.repository.get_entries_for_date(date)

        analytics = compute_thread_analytics(
            date,
            thread.thread_ts,
            replies,
            entries,
            team_size=self.team_size,
            excluded_user_ids=self.excluded_user_ids,
        )

        for member in analytics.roster:
            profile = await self.directory.get(member.user_id)
            member.name = profile.name
            member.avatar_url = profile.avatar_url

        logger.info(
            f"Analytics for {date}: {len(analytics.participants)}/{self.team_size} submitted, "
            f"{analytics.blocker_count} blockers"
        )
        return analytics
