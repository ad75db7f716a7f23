"""
Block Kit builders for assistant replies.
"""
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from ..agents.profile_builder import ProfileRecord
    from ..agents.status_resolver import MemberStatus

Block = Dict[str, Any]

HELP_FALLBACK_TEXT = (
    "Hi! I can help you check team member availability, work status, Linear tickets, "
    "and answer general questions about recent standups."
)


def section(text: str) -> Block:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def context(text: str) -> Block:
    return {"type": "context", "elements": [{"type": "mrkdwn", "text": text}]}


def header(text: str) -> Block:
    return {"type": "header", "text": {"type": "plain_text", "text": text[:150], "emoji": True}}


def divider() -> Block:
    return {"type": "divider"}


def help_blocks(user_id: Optional[str]) -> List[Block]:
    greeting = f"👋 Hi <@{user_id}>! Here's what I can help you with:" if user_id else "👋 Hi! Here's what I can help you with:"
    return [
        section(greeting),
        section(
            "*Quick Status Checks:*\n"
            "• `@Standup where is @username?` - Check availability\n"
            "• `@Standup what is @username doing?` - Current work & status\n"
            "• `@Standup status of SAK-123` - Linear ticket status"
        ),
        section(
            "*Profiles:*\n"
            "• `@Standup show @username's stats` - Scores, streak and badges\n"
            "• `@Standup tell me everything about @username` - Full profile"
        ),
        section(
            "*General Questions:*\n"
            "• `@Standup what has @username been working on?` - Recent activity\n"
            "• `@Standup who is off today?` - Team overview"
        ),
        section(
            "*Summaries & Tools:*\n"
            "• Mention me with `standup` for a summary of today's standup thread\n"
            "• `@Standup linear test` - Check the Linear connection"
        ),
        context("💡 Just ask me questions naturally - I use AI to understand and answer!"),
    ]


def status_blocks(statuses: Sequence["MemberStatus"], summary: Optional[str] = None) -> List[Block]:
    blocks: List[Block] = []
    if summary:
        blocks.append(section(f"💬 {summary}"))
        blocks.append(divider())

    for status in statuses:
        text = f"{status.status_emoji} {status.status_line}"
        if status.history_line:
            text = f"{text} {status.history_line}"
        blocks.append(section(text))
        if status.upcoming_line:
            blocks.append(context(f"📅 {status.upcoming_line}"))
    return blocks


def _score(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{round(value)}"


def profile_blocks(profile: "ProfileRecord") -> List[Block]:
    blocks: List[Block] = [header(f"📊 {profile.display_name}")]

    if profile.status is not None:
        text = f"{profile.status.status_emoji} {profile.status.status_line}"
        if profile.status.history_line:
            text = f"{text} {profile.status.history_line}"
        blocks.append(section(text))
        if profile.status.upcoming_line:
            blocks.append(context(f"📅 {profile.status.upcoming_line}"))

    metrics = profile.latest_metrics
    if metrics is not None:
        risk_text = f"*Risk:* {metrics.risk_level}"
        if metrics.risk_factors:
            risk_text += f" ({', '.join(metrics.risk_factors)})"
        blocks.append(section(
            f"*Overall score:* {_score(metrics.overall_score)}/100 ({metrics.period} of {metrics.start_date})\n"
            f"*Consistency:* {_score(metrics.consistency_score)}% · "
            f"*Submissions:* {metrics.total_submissions}/{metrics.expected_submissions} · "
            f"*Velocity:* {metrics.average_tasks_per_day or 0:.1f} tasks/day ({metrics.velocity_trend})\n"
            f"*Percentile:* {_score(metrics.percentile_rank)} · {risk_text}"
        ))
        if profile.monthly_metrics is not None and profile.weekly_metrics is not None:
            blocks.append(context(
                f"This month: {_score(profile.monthly_metrics.overall_score)}/100 overall, "
                f"{_score(profile.monthly_metrics.consistency_score)}% consistency"
            ))
    else:
        blocks.append(section("No performance metrics have been calculated yet."))

    blocks.append(section(
        f"🔥 *Streak:* {profile.streak} day{'s' if profile.streak != 1 else ''} · "
        f"*Last 7 days:* {profile.work_days} worked, {profile.days_off} off"
    ))

    if profile.achievements:
        badges = ", ".join(f"{a.badge_icon} {a.badge_name} ({a.level})" for a in profile.achievements)
        blocks.append(section(f"🏆 *Achievements:* {badges}"))

    if profile.alerts:
        lines = "\n".join(f"• [{alert.severity}] {alert.title}" for alert in profile.alerts)
        blocks.append(section(f"⚠️ *Recent alerts:*\n{lines}"))

    if profile.work_summary:
        blocks.append(divider())
        blocks.append(section(profile.work_summary))

    return blocks


def profile_fallback_text(profile: "ProfileRecord") -> str:
    metrics = profile.latest_metrics
    score = f"{_score(metrics.overall_score)}/100" if metrics is not None else "no score yet"
    return f"{profile.display_name}: {score}, {profile.streak}-day streak"
