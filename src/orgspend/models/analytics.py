"""Aggregated views returned by the query service."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from orgspend.models.entities import (
    AgentType,
    AgentUsage,
    Department,
    Session,
    TimeSeriesPoint,
    User,
)
from orgspend.models.pagination import Paginated


class DepartmentSummary(BaseModel):
    """Organization-wide spend rollup across departments."""

    total_spend: float = 0.0
    total_budget: float = 0.0
    budget_utilization: float = 0.0  # percent
    alert_count: int = 0
    departments: list[Department] = Field(default_factory=list)


class UserDetails(BaseModel):
    user: User
    cost_trend: list[TimeSeriesPoint] = Field(default_factory=list)
    top_agents: list[AgentUsage] = Field(default_factory=list)
    recent_activity: list[Session] = Field(default_factory=list)


class TrendSummary(BaseModel):
    total_cost: float = 0.0
    total_requests: int = 0
    average_cost_per_request: float = 0.0
    peak_usage_date: datetime | None = None


class TimeSeriesData(BaseModel):
    points: list[TimeSeriesPoint] = Field(default_factory=list)
    summary: TrendSummary = Field(default_factory=TrendSummary)


class BudgetProjection(BaseModel):
    """Where spend stands against a weekly budget."""

    current_spend: float = 0.0
    projected_spend: float = 0.0
    weekly_budget: float = 0.0
    budget_used_percentage: float = 0.0
    projected_used_percentage: float = 0.0
    is_over_budget: bool = False
    over_budget_amount: float = 0.0
    remaining_budget: float = 0.0


class DepartmentBudget(BaseModel):
    department_id: str
    department_name: str
    projection: BudgetProjection


class BudgetOverview(BaseModel):
    organization: BudgetProjection
    departments: list[DepartmentBudget] = Field(default_factory=list)
    over_budget_count: int = 0


class DataSummary(BaseModel):
    """Entity counts and headline totals of the loaded dataset."""

    departments: int = 0
    users: int = 0
    agents: int = 0
    models: int = 0
    sessions: int = 0
    time_series_points: int = 0
    alerts: int = 0
    total_weekly_spend: float = 0.0
    total_weekly_budget: float = 0.0
    high_usage_users: int = 0
    zero_usage_users: int = 0
    generated_at: datetime | None = None


class DepartmentStatistics(BaseModel):
    total_departments: int = 0
    total_budget: float = 0.0
    total_spend: float = 0.0
    budget_utilization: float = 0.0  # percent
    over_budget_count: int = 0
    average_spend_per_department: float = 0.0
    average_budget_per_department: float = 0.0


class UserStatistics(BaseModel):
    total_users: int = 0
    active_users: int = 0
    inactive_users: int = 0
    total_spend: float = 0.0
    total_requests: int = 0
    average_spend_per_user: float = 0.0
    average_spend_per_active_user: float = 0.0
    average_requests_per_user: float = 0.0


class AgentTypeStatistics(BaseModel):
    count: int = 0
    total_spend: float = 0.0
    total_requests: int = 0


class AgentStatistics(BaseModel):
    total_agents: int = 0
    total_spend: float = 0.0
    total_requests: int = 0
    average_spend_per_agent: float = 0.0
    average_requests_per_agent: float = 0.0
    by_type: dict[AgentType, AgentTypeStatistics] = Field(default_factory=dict)


class HealthStatus(BaseModel):
    status: str = "healthy"
    timestamp: datetime
    data_stats: DataSummary


class FilteredData(BaseModel):
    """Four independently paginated result sets for one filter state."""

    departments: Paginated
    users: Paginated
    agents: Paginated
    sessions: Paginated
