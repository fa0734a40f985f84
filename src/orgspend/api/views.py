"""UI-facing shapes built from backend responses."""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from orgspend.models.analytics import BudgetProjection
from orgspend.models.entities import AgentType


class AgentUsed(BaseModel):
    agent_name: str
    cost: float = 0.0
    requests: int = 0


class UserData(BaseModel):
    id: str
    name: str
    cost: float = 0.0
    requests: int = 0
    avg_cost_per_request: float = 0.0
    agents_used: list[AgentUsed] = Field(default_factory=list)


class AgentData(BaseModel):
    id: str
    name: str
    type: AgentType
    total_cost: float = 0.0
    total_tokens: int = 0
    active_users: int = 0
    sessions: int = 0
    requests: int = 0
    avg_cost_per_request: float = 0.0
    environment: str = ""
    users: list[UserData] = Field(default_factory=list)


class TeamData(BaseModel):
    id: str
    name: str
    department: str
    total_cost: float = 0.0
    weekly_variance: str = "0%"
    total_users: int = 0
    active_users: int = 0
    cost_per_user: float = 0.0


class ChartPoint(BaseModel):
    """A bar in a cost chart; ``display_name`` is the shortened label."""

    kind: Literal["agent", "user", "team"]
    display_name: str
    full_name: str
    cost: float = 0.0
    requests: int = 0


class AgentAnalytics(BaseModel):
    agents: list[AgentData] = Field(default_factory=list)
    chart_data: list[ChartPoint] = Field(default_factory=list)
    total_cost: float = 0.0
    total_agents: int = 0


class UserAnalytics(BaseModel):
    users: list[UserData] = Field(default_factory=list)
    chart_data: list[ChartPoint] = Field(default_factory=list)
    total_cost: float = 0.0
    total_users: int = 0
    total_requests: int = 0


class TeamAnalytics(BaseModel):
    teams: list[TeamData] = Field(default_factory=list)
    chart_data: list[ChartPoint] = Field(default_factory=list)
    total_cost: float = 0.0
    total_teams: int = 0


class DashboardBudget(BaseModel):
    projection: BudgetProjection
    active_users: int = 0
    total_users: int = 0
    active_agents: int = 0
    avg_cost_per_user: float = 0.0
    active_users_summary: str = ""


class WeekSpend(BaseModel):
    week_start: date
    week_end: date
    actual_spend: float
    projected_spend: float
