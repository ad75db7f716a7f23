from sqlalchemy import Column, String, Integer, Float, Text, Boolean, DateTime, JSON
from .base import BaseModel


class Alert(BaseModel):
    """Advisory raised about a team member.

    Lifecycle: active -> acknowledged | resolved | dismissed.
    """
    __tablename__ = "alerts"

    workspace_id = Column(String, nullable=False, default="")

    # performance, blocker, sentiment, capacity, consistency, goal, commitment
    type = Column(String, nullable=False, index=True)
    severity = Column(String, nullable=False, index=True)  # info, warning, critical
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")

    affected_user_id = Column(String, nullable=False, index=True)
    affected_user_name = Column(String, nullable=False, default="")

    metric = Column(String, nullable=True)
    current_value = Column(Float, nullable=True)
    threshold = Column(Float, nullable=True)

    suggested_actions = Column(JSON, default=list)

    status = Column(String, nullable=False, default="active", index=True)
    acknowledged_by = Column(String, nullable=True)
    acknowledged_at = Column(DateTime(timezone=True), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    is_recurring = Column(Boolean, default=False)
    occurrence_count = Column(Integer, default=1)
    priority = Column(Integer, default=5)  # 1-10
    expires_at = Column(DateTime(timezone=True), nullable=True)
