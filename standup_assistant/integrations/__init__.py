"""
Integrations library for the standup assistant.

Provides typed, async integrations with external services:
- Slack (events transport lives elsewhere; this is the Web API side)
- Linear (GraphQL issue tracker)
"""

from .base import BaseIntegration, IntegrationError, IntegrationConfig
from .slack_client import SlackClient, SlackConfig, SlackError, SlackMessage, SlackUser
from .linear_client import (
    LinearClient,
    LinearConfig,
    LinearError,
    LinearIssue,
    LinearUser,
    format_issue_summary,
    group_issues_by_state,
)

__all__ = [
    "BaseIntegration",
    "IntegrationError",
    "IntegrationConfig",
    "SlackClient",
    "SlackConfig",
    "SlackError",
    "SlackMessage",
    "SlackUser",
    "LinearClient",
    "LinearConfig",
    "LinearError",
    "LinearIssue",
    "LinearUser",
    "format_issue_summary",
    "group_issues_by_state",
]
