from sqlalchemy import Column, String
from .base import BaseModel


class StandupThread(BaseModel):
    """Links a calendar date to the Slack thread collecting that day's replies"""
    __tablename__ = "standup_threads"

    date = Column(String(10), nullable=False, unique=True, index=True)
    thread_ts = Column(String, nullable=False)
    channel_id = Column(String, nullable=False)
