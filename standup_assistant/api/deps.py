"""
Shared FastAPI dependencies.

Collaborators are built once per process; tests replace them through
``app.dependency_overrides``.
"""
from functools import lru_cache

from ..agents.mention_agent import MentionAgent, create_mention_agent
from ..config import settings
from ..integrations.linear_client import LinearClient
from ..services.analytics_service import AnalyticsService


@lru_cache()
def get_mention_agent() -> MentionAgent:
    return create_mention_agent(settings)


def get_linear_client() -> LinearClient:
    return get_mention_agent().linear


def get_analytics_service() -> AnalyticsService:
    agent = get_mention_agent()
    return AnalyticsService(
        repository=agent.repository,
        slack=agent.slack,
        directory=agent.aggregator.directory,
        team_size=settings.team_size,
        excluded_user_ids=settings.analytics_excluded_user_ids,
    )
