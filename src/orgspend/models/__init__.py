"""Pydantic models for orgspend."""

from orgspend.models.analytics import (
    AgentStatistics,
    AgentTypeStatistics,
    BudgetOverview,
    BudgetProjection,
    DataSummary,
    DepartmentBudget,
    DepartmentStatistics,
    DepartmentSummary,
    FilteredData,
    HealthStatus,
    TimeSeriesData,
    TrendSummary,
    UserDetails,
    UserStatistics,
)
from orgspend.models.dataset import Dataset
from orgspend.models.entities import (
    Agent,
    AgentType,
    AgentUsage,
    Alert,
    AlertSeverity,
    AlertType,
    DailyUsage,
    Department,
    LLMModel,
    ModelFamily,
    Project,
    Session,
    SessionStatus,
    TimeSeriesPoint,
    TokenUsage,
    User,
)
from orgspend.models.errors import ApiError
from orgspend.models.exports import ExportFormat, ExportResult
from orgspend.models.filters import (
    AgentOption,
    DepartmentOption,
    ExportFilters,
    FilterOptions,
    FilterState,
    Granularity,
    SessionFilters,
    TimeRange,
    TimeRangePreset,
    TrendFilters,
    UserOption,
)
from orgspend.models.pagination import Paginated, PaginationInfo, PaginationOptions
from orgspend.models.sessions import AgentInfo, SessionContext, SessionDetails, UserInfo

__all__ = [
    "Agent",
    "AgentInfo",
    "AgentOption",
    "AgentStatistics",
    "AgentType",
    "AgentTypeStatistics",
    "AgentUsage",
    "Alert",
    "AlertSeverity",
    "AlertType",
    "ApiError",
    "BudgetOverview",
    "BudgetProjection",
    "DailyUsage",
    "DataSummary",
    "Dataset",
    "Department",
    "DepartmentBudget",
    "DepartmentOption",
    "DepartmentStatistics",
    "DepartmentSummary",
    "ExportFilters",
    "ExportFormat",
    "ExportResult",
    "FilterOptions",
    "FilterState",
    "FilteredData",
    "Granularity",
    "HealthStatus",
    "LLMModel",
    "ModelFamily",
    "Paginated",
    "PaginationInfo",
    "PaginationOptions",
    "Project",
    "Session",
    "SessionContext",
    "SessionDetails",
    "SessionFilters",
    "SessionStatus",
    "TimeRange",
    "TimeRangePreset",
    "TimeSeriesData",
    "TimeSeriesPoint",
    "TokenUsage",
    "TrendFilters",
    "TrendSummary",
    "User",
    "UserDetails",
    "UserInfo",
    "UserOption",
    "UserStatistics",
]
