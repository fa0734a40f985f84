"""Data service — department, user, agent, session and trend queries.

Every public operation goes through the :class:`RequestSimulator` first and
returns ``Ok`` with its view or ``Err`` with an :class:`ApiError`. Unknown ids
fail with 404; filters that match nothing give empty results.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, TypeVar

from result import Err, Ok, Result

from orgspend.models.analytics import (
    BudgetOverview,
    DepartmentSummary,
    FilteredData,
    HealthStatus,
    TimeSeriesData,
    UserDetails,
)
from orgspend.models.entities import (
    Agent,
    AgentUsage,
    Department,
    LLMModel,
    Session,
    TimeSeriesPoint,
    User,
)
from orgspend.models.errors import BAD_REQUEST, ApiError, not_found
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
from orgspend.models.pagination import Paginated, PaginationOptions
from orgspend.models.sessions import AgentInfo, SessionContext, SessionDetails, UserInfo
from orgspend.services.budget import budget_overview
from orgspend.services.export_service import ExportService
from orgspend.services.pagination import paginate, single_page
from orgspend.services.resilience import RequestSimulator
from orgspend.services.timeseries import aggregate_sessions, filter_points, summarize

if TYPE_CHECKING:
    from orgspend.data.store import MockDataStore

T = TypeVar("T", bound=Department | User | Agent | LLMModel)

logger = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 35
RECENT_ACTIVITY_LIMIT = 20
RELATED_SESSIONS_LIMIT = 5
RELATED_SESSION_WINDOW = timedelta(hours=24)
DEFAULT_FILTER_PAGINATION = PaginationOptions(page=1, limit=50, sort_by="name", sort_order="asc")


class DataService:
    """Aggregation and query service over a :class:`MockDataStore`."""

    def __init__(
        self,
        store: MockDataStore,
        simulator: RequestSimulator | None = None,
        *,
        exporter: ExportService | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._simulator = simulator or RequestSimulator()
        self._clock = clock or (lambda: datetime.now(UTC))
        self._exporter = exporter or ExportService(store, clock=self._clock)

    # -- configuration ----------------------------------------------------

    def enable_error_simulation(self, enabled: bool = True) -> None:
        self._simulator.enable_error_simulation(enabled)

    def set_error_rate(self, rate: float) -> None:
        """Probability of an injected error, clamped to ``[0, 1]``."""
        self._simulator.set_error_rate(rate)

    def default_time_range(self) -> TimeRange:
        return TimeRange.last_days(DEFAULT_RANGE_DAYS, now=self._clock())

    # -- departments ------------------------------------------------------

    async def get_department_summary(
        self, time_range: TimeRange | None = None
    ) -> Result[DepartmentSummary, ApiError]:
        """Totals and budget utilization (percent) across all departments."""

        def op() -> Result[DepartmentSummary, ApiError]:
            departments = self._store.get_departments()
            dept_ids = {d.id for d in departments}
            total_spend = sum(d.current_spend for d in departments)
            total_budget = sum(d.weekly_budget for d in departments)
            alerts = [a for a in self._store.get_alerts() if a.department_id in dept_ids]
            return Ok(
                DepartmentSummary(
                    total_spend=total_spend,
                    total_budget=total_budget,
                    budget_utilization=(
                        total_spend / total_budget * 100 if total_budget > 0 else 0.0
                    ),
                    alert_count=len(alerts),
                    departments=departments,
                )
            )

        return await self._simulator.run(op)

    async def get_department_comparison(
        self,
        time_range: TimeRange | None = None,
        pagination: PaginationOptions | None = None,
    ) -> Result[Paginated[Department], ApiError]:
        return await self._simulator.run(
            lambda: Ok(self._page(self._store.get_departments(), pagination))
        )

    async def get_users_by_department(
        self,
        department_id: str,
        time_range: TimeRange | None = None,
        pagination: PaginationOptions | None = None,
    ) -> Result[Paginated[User], ApiError]:
        def op() -> Result[Paginated[User], ApiError]:
            if self._store.find_department_by_id(department_id) is None:
                return Err(not_found(f"Department with id {department_id} not found"))
            return Ok(self._page(self._store.get_users_by_department(department_id), pagination))

        return await self._simulator.run(op)

    # -- users ------------------------------------------------------------

    async def get_user_details(
        self, user_id: str, time_range: TimeRange | None = None
    ) -> Result[UserDetails, ApiError]:
        """A user with their daily cost trend, top agents and recent sessions."""
        window = time_range or self.default_time_range()

        def op() -> Result[UserDetails, ApiError]:
            user = self._store.find_user_by_id(user_id)
            if user is None:
                return Err(not_found(f"User with id {user_id} not found"))
            cost_trend = [
                TimeSeriesPoint(
                    timestamp=day.date,
                    cost=day.cost,
                    request_count=day.request_count,
                    user_count=1,
                )
                for day in user.trend_data
            ]
            activity = [
                s
                for s in self._store.get_sessions_by_user(user_id)
                if window.contains(s.timestamp)
            ]
            activity.sort(key=lambda s: s.timestamp, reverse=True)
            return Ok(
                UserDetails(
                    user=user,
                    cost_trend=cost_trend,
                    top_agents=list(user.agent_breakdown),
                    recent_activity=activity[:RECENT_ACTIVITY_LIMIT],
                )
            )

        return await self._simulator.run(op)

    async def get_agent_usage_by_user(
        self, user_id: str, time_range: TimeRange | None = None
    ) -> Result[list[AgentUsage], ApiError]:
        def op() -> Result[list[AgentUsage], ApiError]:
            user = self._store.find_user_by_id(user_id)
            if user is None:
                return Err(not_found(f"User with id {user_id} not found"))
            return Ok(list(user.agent_breakdown))

        return await self._simulator.run(op)

    # -- agents and models ------------------------------------------------

    async def get_agent_leaderboard(
        self,
        time_range: TimeRange | None = None,
        limit: int = 10,
        pagination: PaginationOptions | None = None,
    ) -> Result[Paginated[Agent], ApiError]:
        """Top ``limit`` agents by weekly spend."""

        def op() -> Result[Paginated[Agent], ApiError]:
            ranked = sorted(self._store.get_agents(), key=lambda a: a.weekly_spend, reverse=True)
            return Ok(self._page(ranked[: max(limit, 0)], pagination))

        return await self._simulator.run(op)

    async def get_model_leaderboard(
        self,
        time_range: TimeRange | None = None,
        pagination: PaginationOptions | None = None,
    ) -> Result[Paginated[LLMModel], ApiError]:
        def op() -> Result[Paginated[LLMModel], ApiError]:
            ranked = sorted(self._store.get_models(), key=lambda m: m.weekly_spend, reverse=True)
            return Ok(self._page(ranked, pagination))

        return await self._simulator.run(op)

    # -- sessions ---------------------------------------------------------

    async def get_recent_sessions(
        self,
        filters: SessionFilters,
        pagination: PaginationOptions | None = None,
    ) -> Result[Paginated[Session], ApiError]:
        """Sessions matching every supplied filter, newest first by default."""

        def op() -> Result[Paginated[Session], ApiError]:
            sessions = self._filter_sessions(filters)
            if pagination is not None:
                options = pagination.model_copy(
                    update={"sort_by": pagination.sort_by or "timestamp"}
                )
                return Ok(paginate(sessions, options))
            sessions.sort(key=lambda s: s.timestamp, reverse=True)
            return Ok(single_page(sessions))

        return await self._simulator.run(op)

    def _filter_sessions(self, filters: SessionFilters) -> list[Session]:
        store = self._store
        if filters.user_id is not None:
            sessions = store.get_sessions_by_user(filters.user_id)
        else:
            sessions = store.get_sessions()

        if filters.agent_id is not None:
            sessions = [s for s in sessions if s.agent_id == filters.agent_id]
        if filters.department_id is not None:
            members = {u.id for u in store.get_users_by_department(filters.department_id)}
            sessions = [s for s in sessions if s.user_id in members]
        if filters.status is not None:
            sessions = [s for s in sessions if s.status == filters.status]
        if filters.min_cost is not None:
            sessions = [s for s in sessions if s.cost >= filters.min_cost]
        if filters.max_cost is not None:
            sessions = [s for s in sessions if s.cost <= filters.max_cost]
        return [s for s in sessions if filters.time_range.contains(s.timestamp)]

    async def get_session_details(self, session_id: str) -> Result[SessionDetails, ApiError]:
        def op() -> Result[SessionDetails, ApiError]:
            store = self._store
            session = store.find_session_by_id(session_id)
            if session is None:
                return Err(not_found(f"Session with id {session_id} not found"))
            user = store.find_user_by_id(session.user_id)
            if user is None:
                return Err(not_found(f"User for session {session_id} not found"))
            agent = store.find_agent_by_id(session.agent_id)
            if agent is None:
                return Err(not_found(f"Agent for session {session_id} not found"))

            related = [
                s
                for s in store.get_sessions_by_user(user.id)
                if s.id != session.id
                and s.agent_id == session.agent_id
                and abs(s.timestamp - session.timestamp) < RELATED_SESSION_WINDOW
            ]
            related.sort(key=lambda s: s.timestamp, reverse=True)
            return Ok(
                SessionDetails(
                    session=session,
                    context=SessionContext(
                        user_info=UserInfo(
                            name=user.name, email=user.email, department=user.department
                        ),
                        agent_info=AgentInfo(name=agent.name, type=agent.type),
                        related_sessions=related[:RELATED_SESSIONS_LIMIT],
                    ),
                )
            )

        return await self._simulator.run(op)

    # -- trends -----------------------------------------------------------

    async def get_usage_trends(self, filters: TrendFilters) -> Result[TimeSeriesData, ApiError]:
        """Bucketed cost and requests in range, with summary totals.

        The stored daily series is used as-is unless a dimension filter or a
        non-daily granularity requires re-aggregating the sessions.
        """

        def op() -> Result[TimeSeriesData, ApiError]:
            store = self._store
            window = filters.time_range
            if filters.has_dimensions or filters.granularity != Granularity.DAILY:
                sessions = [s for s in store.get_sessions() if window.contains(s.timestamp)]
                if filters.department_ids:
                    members = {
                        u.id
                        for dept_id in filters.department_ids
                        for u in store.get_users_by_department(dept_id)
                    }
                    sessions = [s for s in sessions if s.user_id in members]
                if filters.user_ids:
                    wanted_users = set(filters.user_ids)
                    sessions = [s for s in sessions if s.user_id in wanted_users]
                if filters.agent_ids:
                    wanted_agents = set(filters.agent_ids)
                    sessions = [s for s in sessions if s.agent_id in wanted_agents]
                points = aggregate_sessions(sessions, filters.granularity)
            else:
                points = filter_points(store.get_time_series(), window)
            return Ok(TimeSeriesData(points=points, summary=summarize(points)))

        return await self._simulator.run(op)

    # -- export and filtering ---------------------------------------------

    async def export_data(
        self, filters: ExportFilters, format: ExportFormat | str = ExportFormat.CSV
    ) -> Result[ExportResult, ApiError]:
        def op() -> Result[ExportResult, ApiError]:
            try:
                fmt = ExportFormat(format)
            except ValueError:
                return Err(
                    ApiError(
                        status=BAD_REQUEST,
                        message=f"Unsupported export format: {format}",
                        code="INVALID_FORMAT",
                    )
                )
            result = self._exporter.export(filters, fmt)
            logger.info("Exported %d characters to %s", result.size, result.filename)
            return Ok(result)

        return await self._simulator.run(op)

    async def get_filtered_data(
        self,
        filters: FilterState,
        pagination: PaginationOptions | None = None,
    ) -> Result[FilteredData, ApiError]:
        """Departments, users, agents and sessions narrowed by every filter.

        Department filters cascade to users, and the resulting user and agent
        sets narrow the sessions. ``projects`` is accepted but does not narrow
        any set because sessions carry no project reference.
        """

        def op() -> Result[FilteredData, ApiError]:
            store = self._store
            departments = store.get_departments()
            users = store.get_users()
            agents = store.get_agents()

            if filters.departments:
                wanted_depts = set(filters.departments)
                departments = [d for d in departments if d.id in wanted_depts]
                kept = {d.id for d in departments}
                users = [u for u in users if u.department_id in kept]
            if filters.users:
                wanted_users = set(filters.users)
                users = [u for u in users if u.id in wanted_users]
            if filters.agents:
                wanted_agents = set(filters.agents)
                agents = [a for a in agents if a.id in wanted_agents]

            window = filters.time_range
            sessions = [s for s in store.get_sessions() if window.contains(s.timestamp)]
            if filters.departments or filters.users:
                user_ids = {u.id for u in users}
                sessions = [s for s in sessions if s.user_id in user_ids]
            if filters.agents:
                agent_ids = {a.id for a in agents}
                sessions = [s for s in sessions if s.agent_id in agent_ids]

            threshold = filters.cost_threshold
            if threshold is not None:
                sessions = [s for s in sessions if s.cost >= threshold]
                users = [u for u in users if u.weekly_spend >= threshold]
                agents = [a for a in agents if a.weekly_spend >= threshold]

            options = pagination or DEFAULT_FILTER_PAGINATION
            by_spend = options.model_copy(update={"sort_by": "weekly_spend"})
            by_time = options.model_copy(update={"sort_by": "timestamp"})
            return Ok(
                FilteredData(
                    departments=paginate(departments, options),
                    users=paginate(users, by_spend),
                    agents=paginate(agents, by_spend),
                    sessions=paginate(sessions, by_time),
                )
            )

        return await self._simulator.run(op)

    async def get_filter_options(self) -> Result[FilterOptions, ApiError]:
        def op() -> Result[FilterOptions, ApiError]:
            store = self._store
            now = self._clock()
            presets = [
                TimeRangePreset(label="Last 7 days", range=TimeRange.last_days(7, now=now)),
                TimeRangePreset(label="Last 30 days", range=TimeRange.last_days(30, now=now)),
                TimeRangePreset(
                    label="Last 3 months",
                    range=TimeRange.last_days(90, now=now, granularity=Granularity.WEEKLY),
                ),
            ]
            return Ok(
                FilterOptions(
                    departments=[
                        DepartmentOption(id=d.id, name=d.name) for d in store.get_departments()
                    ],
                    users=[
                        UserOption(id=u.id, name=u.name, department=u.department)
                        for u in store.get_users()
                    ],
                    agents=[
                        AgentOption(id=a.id, name=a.name, type=a.type) for a in store.get_agents()
                    ],
                    time_ranges=presets,
                )
            )

        return await self._simulator.run(op)

    # -- budget and health ------------------------------------------------

    async def get_budget_overview(
        self, time_range: TimeRange | None = None
    ) -> Result[BudgetOverview, ApiError]:
        return await self._simulator.run(
            lambda: Ok(budget_overview(self._store.get_departments()))
        )

    async def health_check(self) -> Result[HealthStatus, ApiError]:
        return await self._simulator.run(
            lambda: Ok(
                HealthStatus(
                    status="healthy",
                    timestamp=self._clock(),
                    data_stats=self._store.get_data_summary(),
                )
            )
        )

    @staticmethod
    def _page(
        items: list[T], pagination: PaginationOptions | None
    ) -> Paginated[T]:
        return paginate(items, pagination) if pagination is not None else single_page(items)
