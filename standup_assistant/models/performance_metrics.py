from sqlalchemy import Column, String, Integer, Float, JSON, UniqueConstraint
from .base import BaseModel, SlackUserMixin


class PerformanceMetrics(SlackUserMixin, BaseModel):
    """Aggregated performance for one person over a week or month.

    Written by the metrics batch job; read-only here.
    """
    __tablename__ = "performance_metrics"
    __table_args__ = (
        UniqueConstraint("slack_user_id", "period", "start_date", name="uq_metrics_user_period_start"),
    )

    period = Column(String, nullable=False)  # week, month
    start_date = Column(String(10), nullable=False, index=True)
    end_date = Column(String(10), nullable=False)

    total_submissions = Column(Integer, default=0)
    expected_submissions = Column(Integer, default=0)
    consistency_score = Column(Float, default=0)  # 0-100

    total_tasks_completed = Column(Integer, default=0)
    average_tasks_per_day = Column(Float, default=0)
    velocity_trend = Column(String, default="stable")  # increasing, stable, decreasing

    blocker_count = Column(Integer, default=0)
    risk_level = Column(String, default="low")  # low, medium, high
    risk_factors = Column(JSON, default=list)

    overall_score = Column(Float, default=0)  # 0-100
    team_average_score = Column(Float, default=0)
    percentile_rank = Column(Float, default=0)  # 0-100
