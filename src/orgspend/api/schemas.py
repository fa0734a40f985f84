"""Backend response schemas.

Every documented field is required and typed; unknown extra fields are
ignored. A payload that does not fit is a decode error, never guessed at.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from orgspend.models.entities import AgentType


class _Response(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class AgentSummaryResponse(_Response):
    agent_name: str
    total_traces: int
    total_sessions: int
    total_observations: int
    total_tokens: int
    total_cost: float
    total_users: int
    avg_tokens_per_trace: float
    environment: str


class AgentLeaderboardResponse(_Response):
    agent_name: str
    type: AgentType
    cost: float
    requests: int
    avg_cost_per_request: float


class UserAgentUsageResponse(_Response):
    agent_name: str
    cost: float
    requests: int


class UserLeaderboardResponse(_Response):
    user_id: str
    total_cost: float
    total_requests: int
    agents: list[UserAgentUsageResponse] = Field(default_factory=list)


class UsagePatternEntry(_Response):
    date: str
    cost: float
    requests: int
    tokens: int
    users: int


class CostBreakdownEntry(_Response):
    agent: str
    percentage: float


class RequestEntry(_Response):
    project_id: str
    trace_id: str
    timestamp: str
    cost: float
    tokens: int
    agent_name: str
    agent_environment: str


class RequestPagination(_Response):
    page: int
    limit: int
    total: int
    total_pages: int


class UserDetailsResponse(_Response):
    user_id: str
    team: str
    role: str
    total_cost: float
    total_requests: int
    agents_used: list[str]
    usage_pattern: list[UsagePatternEntry]
    cost_breakdown: list[CostBreakdownEntry]
    all_requests: list[RequestEntry]
    all_requests_pagination: RequestPagination


class DashboardSummaryResponse(_Response):
    current_week_spend: float
    projected_amount: float
    active_users: int
    total_users: int
    active_agents: int
    avg_cost_per_user: float
    active_users_summary: str


class TeamSummaryResponse(_Response):
    team_name: str
    total_traces: int
    total_sessions: int
    total_observations: int
    total_tokens: int
    total_cost: float
    total_users: int
    avg_tokens_per_trace: float
    environment: str
    department: str | None = None
    active_agents: int | None = None


class TeamResponse(_Response):
    """One row of the teams endpoint."""

    team_name: str
    department: str
    weekly_cost: float
    total_users: int
    active_users: int
    vs_last_week: float = 0.0
    cost_per_user: float = 0.0
