from sqlalchemy import Column, Integer, DateTime, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class BaseModel(Base):
    __abstract__ = True

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id}>"


class SlackUserMixin:
    """Columns identifying the Slack member a row belongs to"""

    slack_user_id = Column(String, nullable=False, index=True)
    slack_user_name = Column(String, nullable=False, default="")
    workspace_id = Column(String, nullable=False, default="")
