"""Protocol definitions for services."""

from __future__ import annotations

from typing import Protocol

from result import Result

from orgspend.models.analytics import (
    BudgetOverview,
    DepartmentSummary,
    FilteredData,
    HealthStatus,
    TimeSeriesData,
    UserDetails,
)
from orgspend.models.entities import Agent, AgentUsage, Department, LLMModel, Session, User
from orgspend.models.errors import ApiError
from orgspend.models.exports import ExportFormat, ExportResult
from orgspend.models.filters import (
    ExportFilters,
    FilterOptions,
    FilterState,
    SessionFilters,
    TimeRange,
    TrendFilters,
)
from orgspend.models.pagination import Paginated, PaginationOptions


class DepartmentQueries(Protocol):
    """Interface for department-level queries."""

    async def get_department_summary(
        self, time_range: TimeRange | None = None
    ) -> Result[DepartmentSummary, ApiError]: ...

    async def get_department_comparison(
        self,
        time_range: TimeRange | None = None,
        pagination: PaginationOptions | None = None,
    ) -> Result[Paginated[Department], ApiError]: ...

    async def get_users_by_department(
        self,
        department_id: str,
        time_range: TimeRange | None = None,
        pagination: PaginationOptions | None = None,
    ) -> Result[Paginated[User], ApiError]: ...

    async def get_budget_overview(
        self, time_range: TimeRange | None = None
    ) -> Result[BudgetOverview, ApiError]: ...


class UsageQueries(Protocol):
    """Interface for user, agent, session and trend queries."""

    async def get_user_details(
        self, user_id: str, time_range: TimeRange | None = None
    ) -> Result[UserDetails, ApiError]: ...

    async def get_agent_usage_by_user(
        self, user_id: str, time_range: TimeRange | None = None
    ) -> Result[list[AgentUsage], ApiError]: ...

    async def get_agent_leaderboard(
        self,
        time_range: TimeRange | None = None,
        limit: int = 10,
        pagination: PaginationOptions | None = None,
    ) -> Result[Paginated[Agent], ApiError]: ...

    async def get_model_leaderboard(
        self,
        time_range: TimeRange | None = None,
        pagination: PaginationOptions | None = None,
    ) -> Result[Paginated[LLMModel], ApiError]: ...

    async def get_recent_sessions(
        self,
        filters: SessionFilters,
        pagination: PaginationOptions | None = None,
    ) -> Result[Paginated[Session], ApiError]: ...

    async def get_usage_trends(
        self, filters: TrendFilters
    ) -> Result[TimeSeriesData, ApiError]: ...


class DataServiceProtocol(DepartmentQueries, UsageQueries, Protocol):
    """Full query surface consumed by the presentation layer."""

    async def export_data(
        self, filters: ExportFilters, format: ExportFormat | str = ExportFormat.CSV
    ) -> Result[ExportResult, ApiError]: ...

    async def get_filtered_data(
        self,
        filters: FilterState,
        pagination: PaginationOptions | None = None,
    ) -> Result[FilteredData, ApiError]: ...

    async def get_filter_options(self) -> Result[FilterOptions, ApiError]: ...

    async def health_check(self) -> Result[HealthStatus, ApiError]: ...
