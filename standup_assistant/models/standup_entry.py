from sqlalchemy import Column, String, Text, Boolean, UniqueConstraint
from .base import BaseModel, SlackUserMixin


class StandupEntry(SlackUserMixin, BaseModel):
    """One standup submission per person per calendar day (YYYY-MM-DD)"""
    __tablename__ = "standup_entries"
    __table_args__ = (
        UniqueConstraint("slack_user_id", "date", name="uq_standup_entry_user_date"),
    )

    date = Column(String(10), nullable=False, index=True)

    # Free-text sections
    yesterday = Column(Text, nullable=False, default="")
    today = Column(Text, nullable=False, default="")
    blockers = Column(Text, nullable=False, default="")
    notes = Column(Text, nullable=False, default="")

    # Day off, optionally scoped to a HH:MM window
    is_day_off = Column(Boolean, nullable=False, default=False)
    day_off_start_time = Column(String(5), nullable=True)
    day_off_end_time = Column(String(5), nullable=True)
    day_off_reason = Column(Text, nullable=True)

    source = Column(String, nullable=False, default="modal")  # slash_command, modal, dm
