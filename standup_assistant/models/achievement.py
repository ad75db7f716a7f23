from sqlalchemy import Column, String, Float, Text, Boolean, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from .base import BaseModel, SlackUserMixin


class Achievement(SlackUserMixin, BaseModel):
    """Badge earned by a team member; revoked softly through is_active"""
    __tablename__ = "achievements"
    __table_args__ = (
        UniqueConstraint("slack_user_id", "achievement_type", "level", name="uq_achievement_user_type_level"),
    )

    # streak, velocity, helper, early_bird, consistency, team_player
    achievement_type = Column(String, nullable=False, index=True)
    badge_name = Column(String, nullable=False)
    badge_icon = Column(String, nullable=False, default="🏅")
    description = Column(Text, nullable=False, default="")

    level = Column(String, nullable=False)  # bronze, silver, gold, platinum
    threshold = Column(Float, default=0)

    earned_at = Column(DateTime(timezone=True), server_default=func.now())
    is_active = Column(Boolean, nullable=False, default=True)
