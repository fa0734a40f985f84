"""Entity snapshots produced by a single generation pass."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class AgentType(StrEnum):
    PRE_BUILT = "Pre-built"
    DIY = "DIY"
    FOUNDATION = "Foundation"


class SessionStatus(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"


class AlertType(StrEnum):
    BUDGET = "budget"
    USAGE = "usage"
    ERROR = "error"


class AlertSeverity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ModelFamily(StrEnum):
    GPT = "GPT"
    CLAUDE = "Claude"
    GEMINI = "Gemini"
    LLAMA = "Llama"


class Snapshot(BaseModel):
    """Immutable base for every entity."""

    model_config = ConfigDict(frozen=True)


class Project(Snapshot):
    """A project owned by a department."""

    id: str
    name: str
    department_id: str
    weekly_spend: float = 0.0
    user_count: int = 0
    agent_count: int = 0


class Department(Snapshot):
    """Weekly budget and spend for one department."""

    id: str
    name: str
    weekly_budget: float
    current_spend: float = 0.0
    projected_spend: float = 0.0
    week_over_week_change: float = 0.0
    active_users: int = 0
    total_users: int = 0
    cost_per_user: float = 0.0
    projects: list[Project] = Field(default_factory=list)

    @property
    def utilization(self) -> float:
        """Spend as a fraction of budget (0 when there is no budget)."""
        if self.weekly_budget <= 0:
            return 0.0
        return self.current_spend / self.weekly_budget


class DailyUsage(Snapshot):
    date: datetime
    cost: float = 0.0
    request_count: int = 0


class AgentUsage(Snapshot):
    """Share of a user's spend attributed to one agent."""

    agent_id: str
    agent_name: str
    cost: float = 0.0
    request_count: int = 0
    percentage: float = 0.0


class Session(Snapshot):
    """One agent invocation; the base fact every aggregate derives from."""

    id: str
    timestamp: datetime
    user_id: str
    agent_id: str
    agent_name: str
    cost: float
    token_count: int
    duration: int
    status: SessionStatus = SessionStatus.SUCCESS


class User(Snapshot):
    """A user with their weekly usage profile.

    ``department`` is the owning department's display name; joins go through
    ``department_id``.
    """

    id: str
    email: str
    name: str
    department_id: str
    department: str
    role: str = ""
    weekly_spend: float = 0.0
    request_count: int = 0
    agent_count: int = 0
    trend_data: list[DailyUsage] = Field(default_factory=list)
    agent_breakdown: list[AgentUsage] = Field(default_factory=list)
    recent_sessions: list[Session] = Field(default_factory=list)


class Agent(Snapshot):
    id: str
    name: str
    type: AgentType
    weekly_spend: float = 0.0
    request_count: int = 0
    average_cost: float = 0.0
    popularity_rank: int = 0


class TokenUsage(Snapshot):
    input: int = 0
    output: int = 0
    total: int = 0


class LLMModel(Snapshot):
    """Weekly usage of one underlying LLM."""

    id: str
    name: str
    provider: str
    model_family: ModelFamily
    weekly_spend: float = 0.0
    request_count: int = 0
    average_cost: float = 0.0
    average_latency: int = 0  # milliseconds
    success_rate: float = 0.0  # percent
    week_over_week_change: float = 0.0
    token_usage: TokenUsage = Field(default_factory=TokenUsage)
    top_agents: list[str] = Field(default_factory=list)


class TimeSeriesPoint(Snapshot):
    """Aggregate of sessions falling in one time bucket."""

    timestamp: datetime
    cost: float = 0.0
    request_count: int = 0
    user_count: int = 0


class Alert(Snapshot):
    id: str
    type: AlertType
    severity: AlertSeverity
    message: str
    department_id: str | None = None
    user_id: str | None = None
    timestamp: datetime
