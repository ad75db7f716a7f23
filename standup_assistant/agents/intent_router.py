"""
Intent routing for assistant mentions.

Classifies the text of a mention into a set of intents, and extracts the
people and ticket identifiers it refers to. Pure function of the text.

Precedence (first match wins for the exclusive branches):

1. ``help``          -> help card only
2. ``standup``       -> thread summary only
3. ``linear test``   -> tracker self-test only
4. keyword flags over the remaining text
5. a person-scoped intent with nobody mentioned -> ask who
6. people mentioned but no intent -> availability + work summary
7. nothing at all -> general context search
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional


class Intent(str, Enum):
    AVAILABILITY = "availability"
    WORK_SUMMARY = "work_summary"
    PERFORMANCE = "performance"
    FULL_PROFILE = "full_profile"
    TICKET_STATUS = "ticket_status"
    THREAD_SUMMARY = "thread_summary"
    LINEAR_TEST = "linear_test"
    HELP = "help"


PERSON_INTENTS = frozenset({
    Intent.AVAILABILITY,
    Intent.WORK_SUMMARY,
    Intent.PERFORMANCE,
    Intent.FULL_PROFILE,
})

HELP_PATTERN = re.compile(r"\bhelp\b")
THREAD_SUMMARY_PATTERN = re.compile(r"\bstandup\b")
LINEAR_TEST_PATTERN = re.compile(r"\blinear\s+test\b")

MENTION_PATTERN = re.compile(r"<@([A-Z0-9]+)(?:\|[^>]*)?>")
TICKET_PATTERN = re.compile(r"\b[A-Z][A-Z0-9]+-\d+\b")

AVAILABILITY_KEYWORDS = ("where", "ooo", "out of office", "day off", "available")
WORK_KEYWORDS = ("working", "doing", "up to", "work on")
PERFORMANCE_KEYWORDS = ("performance", "profile", "stats")
FULL_PROFILE_KEYWORDS = ("about", "everything")
TICKET_KEYWORDS = ("ticket", "issue")
TEAM_KEYWORDS = ("team", "everyone", "who")

CLARIFICATION_TEXT = (
    "Please mention who you're asking about, e.g. `where is @username?` "
    "or `what is @username working on?`"
)


@dataclass(frozen=True)
class RoutedQuery:
    text: str
    intents: FrozenSet[Intent] = frozenset()
    mentioned_users: List[str] = field(default_factory=list)
    ticket_ids: List[str] = field(default_factory=list)
    ticket_keyword: bool = False
    needs_clarification: bool = False
    general_search: bool = False

    def has(self, intent: Intent) -> bool:
        return intent in self.intents

    @property
    def wants_profile(self) -> bool:
        return self.has(Intent.PERFORMANCE) or self.has(Intent.FULL_PROFILE)

    @property
    def mentions_team(self) -> bool:
        return contains_any(normalize(self.text), TEAM_KEYWORDS)


def normalize(text: str) -> str:
    return " ".join((text or "").lower().split())


def contains_any(normalized: str, keywords: Iterable[str]) -> bool:
    return any(keyword in normalized for keyword in keywords)


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def extract_mentions(text: str, bot_user_id: Optional[str] = None) -> List[str]:
    """User ids mentioned in the text, in order of first appearance."""
    return [
        user_id for user_id in _unique(MENTION_PATTERN.findall(text or ""))
        if user_id != bot_user_id
    ]


def extract_ticket_ids(text: str) -> List[str]:
    without_mentions = MENTION_PATTERN.sub(" ", text or "")
    return _unique(match.upper() for match in TICKET_PATTERN.findall(without_mentions))


def route(text: str, bot_user_id: Optional[str] = None) -> RoutedQuery:
    normalized = normalize(text)

    if HELP_PATTERN.search(normalized):
        return RoutedQuery(text=text, intents=frozenset({Intent.HELP}))

    if THREAD_SUMMARY_PATTERN.search(normalized):
        return RoutedQuery(text=text, intents=frozenset({Intent.THREAD_SUMMARY}))

    if LINEAR_TEST_PATTERN.search(normalized):
        return RoutedQuery(text=text, intents=frozenset({Intent.LINEAR_TEST}))

    mentioned = extract_mentions(text, bot_user_id)
    ticket_ids = extract_ticket_ids(text)
    ticket_keyword = contains_any(normalized, TICKET_KEYWORDS)
    has_mentions = bool(mentioned)

    intents = set()
    if contains_any(normalized, AVAILABILITY_KEYWORDS):
        intents.add(Intent.AVAILABILITY)
    # "status" alone is about a person only when someone is mentioned and no
    # ticket is in play; otherwise it belongs to the ticket lookup
    if has_mentions and "status" in normalized and not ticket_keyword and not ticket_ids:
        intents.add(Intent.AVAILABILITY)
    if contains_any(normalized, WORK_KEYWORDS):
        intents.update({Intent.WORK_SUMMARY, Intent.AVAILABILITY})
    if contains_any(normalized, PERFORMANCE_KEYWORDS):
        intents.add(Intent.PERFORMANCE)
    if contains_any(normalized, FULL_PROFILE_KEYWORDS):
        intents.update({
            Intent.FULL_PROFILE,
            Intent.AVAILABILITY,
            Intent.WORK_SUMMARY,
            Intent.PERFORMANCE,
        })
    if ticket_keyword or ticket_ids:
        intents.add(Intent.TICKET_STATUS)

    if intents & PERSON_INTENTS and not has_mentions:
        return RoutedQuery(
            text=text,
            intents=frozenset(intents),
            ticket_ids=ticket_ids,
            ticket_keyword=ticket_keyword,
            needs_clarification=True,
        )

    if not intents and has_mentions:
        intents.update({Intent.AVAILABILITY, Intent.WORK_SUMMARY})

    return RoutedQuery(
        text=text,
        intents=frozenset(intents),
        mentioned_users=mentioned,
        ticket_ids=ticket_ids,
        ticket_keyword=ticket_keyword,
        general_search=not intents and not mentioned and not ticket_ids,
    )
