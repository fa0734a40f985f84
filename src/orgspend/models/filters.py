"""Query descriptors passed from the presentation layer."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orgspend.models.entities import AgentType, SessionStatus


class Granularity(StrEnum):
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"


class _Descriptor(BaseModel):
    model_config = ConfigDict(frozen=True)


class TimeRange(_Descriptor):
    """Inclusive ``[start, end]`` window with a bucket size."""

    start: datetime
    end: datetime
    granularity: Granularity = Granularity.DAILY

    @field_validator("start", "end")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        """Offset-less bounds are read as UTC; session timestamps always carry one."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def contains(self, timestamp: datetime) -> bool:
        return self.start <= timestamp <= self.end

    @classmethod
    def last_days(
        cls,
        days: int,
        *,
        now: datetime | None = None,
        granularity: Granularity = Granularity.DAILY,
    ) -> TimeRange:
        end = now or datetime.now(UTC)
        return cls(start=end - timedelta(days=days), end=end, granularity=granularity)


class FilterState(_Descriptor):
    """Cross-dimension filter; every non-empty dimension is ANDed."""

    time_range: TimeRange
    departments: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)
    users: list[str] = Field(default_factory=list)
    agents: list[str] = Field(default_factory=list)
    cost_threshold: float | None = None


class SessionFilters(_Descriptor):
    time_range: TimeRange
    user_id: str | None = None
    agent_id: str | None = None
    department_id: str | None = None
    status: SessionStatus | None = None
    min_cost: float | None = None
    max_cost: float | None = None


class TrendFilters(_Descriptor):
    time_range: TimeRange
    granularity: Granularity = Granularity.DAILY
    department_ids: list[str] = Field(default_factory=list)
    user_ids: list[str] = Field(default_factory=list)
    agent_ids: list[str] = Field(default_factory=list)

    @property
    def has_dimensions(self) -> bool:
        return bool(self.department_ids or self.user_ids or self.agent_ids)


class ExportFilters(_Descriptor):
    time_range: TimeRange
    departments: list[str] = Field(default_factory=list)
    users: list[str] = Field(default_factory=list)
    agents: list[str] = Field(default_factory=list)
    include_details: bool = False

    @property
    def has_entities(self) -> bool:
        return bool(self.departments or self.users or self.agents)


class DepartmentOption(BaseModel):
    id: str
    name: str


class UserOption(BaseModel):
    id: str
    name: str
    department: str


class AgentOption(BaseModel):
    id: str
    name: str
    type: AgentType


class TimeRangePreset(BaseModel):
    label: str
    range: TimeRange


class FilterOptions(BaseModel):
    """Values a filter bar can offer."""

    departments: list[DepartmentOption] = Field(default_factory=list)
    users: list[UserOption] = Field(default_factory=list)
    agents: list[AgentOption] = Field(default_factory=list)
    time_ranges: list[TimeRangePreset] = Field(default_factory=list)
