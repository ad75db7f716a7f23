from __future__ import annotations

from typing import Dict, Any, List, Optional, Tuple
import re

from pydantic import BaseModel, Field, field_validator

from .base import (
    BaseIntegration,
    IntegrationConfig,
    IntegrationStatus,
    AuthenticationError,
    IntegrationError
)

# Workflow states in display order; anything else sorts after, alphabetically
STATE_ORDER = ["Backlog", "Todo", "In Progress", "In Review", "In Testing", "Done", "Canceled"]

IDENTIFIER_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9]*)-(\d+)$")

ISSUE_FIELDS = """
            id
            identifier
            title
            url
            dueDate
            priorityLabel
            updatedAt
            state { name }
"""

VIEWER_QUERY = """query {
  viewer { id name email }
}"""

USER_BY_EMAIL_QUERY = """query UserByEmail($email: String!) {
  users(filter: { email: { eq: $email } }) {
    nodes { id name email }
  }
}"""

ACTIVE_ISSUES_QUERY = """query ActiveIssues($userId: ID!, $first: Int!) {
  issues(
    filter: { assignee: { id: { eq: $userId } } }
    orderBy: updatedAt
    first: $first
  ) {
    nodes {%s}
  }
}""" % ISSUE_FIELDS

ISSUE_BY_NUMBER_QUERY = """query IssueByNumber($number: Float!) {
  issues(filter: { number: { eq: $number } }, first: 10) {
    nodes {%s}
  }
}""" % ISSUE_FIELDS


# Linear-specific models
class LinearConfig(IntegrationConfig):
    """Linear integration configuration."""

    name: str = "linear"
    api_key: Optional[str] = None
    api_url: str = Field(default="https://api.linear.app/graphql")

    @field_validator('api_url')
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        if not v.startswith(('http://', 'https://')):
            raise ValueError('API URL must start with http:// or https://')
        return v.rstrip('/')

class LinearUser(BaseModel):
    """Linear user representation."""

    id: str
    name: str
    email: Optional[str] = None

class LinearIssue(BaseModel):
    """Linear issue representation."""

    id: str
    identifier: str
    title: str
    url: Optional[str] = None
    due_date: Optional[str] = None
    priority_label: Optional[str] = None
    state: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> 'LinearIssue':
        state = node.get("state") or {}
        return cls(
            id=node["id"],
            identifier=node["identifier"],
            title=node.get("title", ""),
            url=node.get("url"),
            due_date=node.get("dueDate"),
            priority_label=node.get("priorityLabel"),
            state=state.get("name"),
            updated_at=node.get("updatedAt")
        )

class LinearConnectionResult(BaseModel):
    success: bool
    message: str

class LinearError(IntegrationError):
    """Linear-specific error."""
    pass


class LinearClient(BaseIntegration[LinearConfig]):
    """
    Linear GraphQL client.

    Read-only: user by email, active issues by assignee, issue by identifier,
    and a connectivity self-test.
    """

    @property
    def is_enabled(self) -> bool:
        return self.config.enabled and bool(self.config.api_key)

    def _get_default_headers(self) -> Dict[str, str]:
        headers = super()._get_default_headers()
        if self.config.api_key:
            # Linear personal API keys are sent without a scheme
            headers["Authorization"] = self.config.api_key
        return headers

    async def _graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.config.api_key:
            raise AuthenticationError("LINEAR_API_KEY is not configured", self.config.name)

        response = await self._make_request(
            "POST",
            self.config.api_url,
            json={"query": query, "variables": variables or {}}
        )
        payload = self._safe_json(response) or {}

        if payload.get("errors"):
            raise LinearError(
                f"Linear API returned errors: {payload['errors']}",
                self.config.name,
                response.status_code,
                payload
            )
        return payload.get("data") or {}

    async def test_connection(self) -> bool:
        result = await self.check_connection()
        return result.success

    async def check_connection(self) -> LinearConnectionResult:
        """Run the viewer query and describe the outcome."""
        if not self.config.api_key:
            return LinearConnectionResult(success=False, message="LINEAR_API_KEY is not configured")

        try:
            data = await self._graphql(VIEWER_QUERY)
        except IntegrationError as e:
            self.status = IntegrationStatus.ERROR
            self._logger.error("Connection test failed: %s", str(e))
            return LinearConnectionResult(success=False, message=f"Connection failed: {e}")

        viewer = data.get("viewer") or {}
        self.status = IntegrationStatus.CONNECTED
        return LinearConnectionResult(
            success=True,
            message=f"Connected as {viewer.get('name')} ({viewer.get('email')})"
        )

    async def get_user_by_email(self, email: str) -> Optional[LinearUser]:
        data = await self._graphql(USER_BY_EMAIL_QUERY, {"email": email})
        nodes = (data.get("users") or {}).get("nodes") or []
        if not nodes:
            return None
        return LinearUser(**nodes[0])

    async def get_active_issues_for_user(self, user_id: str, limit: int = 5) -> List[LinearIssue]:
        """Most recently updated issues assigned to the user."""
        data = await self._graphql(ACTIVE_ISSUES_QUERY, {"userId": user_id, "first": limit})
        nodes = (data.get("issues") or {}).get("nodes") or []
        return [LinearIssue.from_node(node) for node in nodes][:limit]

    async def get_issue_by_identifier(self, identifier: str) -> Optional[LinearIssue]:
        """Find an issue such as ``ABC-123``; matching is case-insensitive.

        Linear's ``issue(id:)`` wants a UUID, so search by number and match the
        full identifier.
        """
        match = IDENTIFIER_PATTERN.match(identifier.strip())
        if not match:
            self._logger.warning("Invalid issue identifier: %s", identifier)
            return None

        number = int(match.group(2))
        data = await self._graphql(ISSUE_BY_NUMBER_QUERY, {"number": number})
        nodes = (data.get("issues") or {}).get("nodes") or []

        wanted = identifier.strip().upper()
        for node in nodes:
            if node.get("identifier", "").upper() == wanted:
                return LinearIssue.from_node(node)
        return None


def format_issue_summary(issue: LinearIssue) -> str:
    pieces = [f"{issue.identifier}: {issue.title}"]
    if issue.state:
        pieces.append(f"State: {issue.state}")
    if issue.priority_label:
        pieces.append(f"Priority: {issue.priority_label}")
    if issue.due_date:
        pieces.append(f"Due: {issue.due_date}")
    if issue.url:
        pieces.append(issue.url)
    return " | ".join(pieces)


def _state_sort_key(state: str) -> Tuple[int, str]:
    if state in STATE_ORDER:
        return (STATE_ORDER.index(state), "")
    return (len(STATE_ORDER), state)


def group_issues_by_state(issues: List[LinearIssue]) -> List[Tuple[str, List[LinearIssue]]]:
    """Group issues by workflow state in display order."""
    groups: Dict[str, List[LinearIssue]] = {}
    for issue in issues:
        groups.setdefault(issue.state or "Unknown", []).append(issue)
    return [(state, groups[state]) for state in sorted(groups, key=_state_sort_key)]
