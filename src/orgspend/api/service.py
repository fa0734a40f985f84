"""Analytics API service — backend queries mapped to UI-facing shapes."""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import UTC, date, datetime, timedelta
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError
from result import Err, Ok, Result

from orgspend.api.client import ApiClient, ApiClientError
from orgspend.api.schemas import (
    AgentLeaderboardResponse,
    AgentSummaryResponse,
    DashboardSummaryResponse,
    TeamResponse,
    TeamSummaryResponse,
    UserDetailsResponse,
    UserLeaderboardResponse,
)
from orgspend.api.views import (
    AgentAnalytics,
    AgentData,
    AgentUsed,
    ChartPoint,
    DashboardBudget,
    TeamAnalytics,
    TeamData,
    UserAnalytics,
    UserData,
    WeekSpend,
)
from orgspend.models.entities import AgentType
from orgspend.models.errors import ApiError, decode_error
from orgspend.services.budget import project_budget

T = TypeVar("T")

logger = logging.getLogger(__name__)

ALL_ENVIRONMENTS = "All"
DEFAULT_WEEKLY_BUDGET = 250.0

_AGENT_SUMMARIES = TypeAdapter(list[AgentSummaryResponse])
_AGENT_LEADERBOARD = TypeAdapter(list[AgentLeaderboardResponse])
_USER_LEADERBOARD = TypeAdapter(list[UserLeaderboardResponse])
_USER_DETAILS = TypeAdapter(UserDetailsResponse)
_TEAMS = TypeAdapter(list[TeamResponse])
_TEAM_SUMMARIES = TypeAdapter(list[TeamSummaryResponse])
_DASHBOARD_SUMMARY = TypeAdapter(DashboardSummaryResponse)

_TEAM_ABBREVIATIONS = (
    ("Consulting", "Consult."),
    ("Development", "Dev."),
    ("Department", "Dept."),
    ("Engineering", "Eng."),
    ("Business", "Bus."),
    ("Unknown", "Unk."),
)


def week_date_range(offset: int = 0, today: date | None = None) -> tuple[str, str]:
    """Monday and Sunday (``YYYY-MM-DD``) of the week ``offset`` weeks back."""
    today = today or datetime.now(UTC).date()
    monday = today - timedelta(days=today.weekday() + 7 * offset)
    sunday = monday + timedelta(days=6)
    return monday.isoformat(), sunday.isoformat()


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "-", text.lower())


def agent_label(name: str) -> str:
    return name[:12] + "..." if len(name) > 12 else name


def user_label(name: str) -> str:
    """Emails shorten to their local part; anything still long is cut."""
    if len(name) <= 15:
        return name
    label = name.split("@")[0] if "@" in name else name
    return label[:12] + "..." if len(label) > 15 else label


def team_label(name: str) -> str:
    if len(name) <= 10:
        return name
    label = name
    for word, short in _TEAM_ABBREVIATIONS:
        label = label.replace(word, short, 1)
    return label[:10] + "..." if len(label) > 10 else label


def format_variance(change: float) -> str:
    if change > 0:
        return f"+{change:g}%"
    if change < 0:
        return f"{change:g}%"
    return "0%"


class AnalyticsApiService:
    """Reads agent, user, team and budget analytics from the backend.

    Transport and HTTP failures come back as ``Err`` with the client's error;
    payloads that do not match the schemas come back as decode errors.
    """

    def __init__(
        self,
        client: ApiClient,
        *,
        default_environment: str = "UAT",
        default_days: int = 7,
        default_limit: int = 100,
        default_offset: int = 0,
    ) -> None:
        self._client = client
        self._default_environment = default_environment
        self._default_days = default_days
        self._default_limit = default_limit
        self._default_offset = default_offset

    def _environment(self, environment: str | None) -> str:
        """Backend environment; ``All`` is not accepted and maps to the default."""
        if not environment or environment == ALL_ENVIRONMENTS:
            return self._default_environment
        return environment

    async def _fetch(
        self,
        endpoint: str,
        adapter: TypeAdapter[T],
        params: dict[str, Any] | None = None,
    ) -> Result[T, ApiError]:
        try:
            payload = await self._client.get(endpoint, params)
        except ApiClientError as exc:
            logger.warning("Request to %s failed: %s", endpoint, exc.message)
            return Err(exc.to_api_error())
        try:
            return Ok(adapter.validate_python(payload))
        except ValidationError as exc:
            logger.warning("Undecodable response from %s: %d errors", endpoint, exc.error_count())
            details = exc.errors(include_url=False, include_context=False)
            return Err(decode_error(endpoint, details))

    # -- agents -----------------------------------------------------------

    async def get_agent_analytics(
        self,
        environment: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Result[AgentAnalytics, ApiError]:
        """Agents by descending cost, joined with leaderboard and user usage."""
        summary_r, leaderboard_r, users_r = await asyncio.gather(
            self._fetch(
                "users/agent-summary",
                _AGENT_SUMMARIES,
                {"start_date": start_date, "end_date": end_date},
            ),
            self._fetch(
                "analytics/dashboard/agents/leaderboard",
                _AGENT_LEADERBOARD,
                {"environment": self._environment(environment), "days": self._default_days},
            ),
            self._fetch(
                "analytics/dashboard/users/leaderboard",
                _USER_LEADERBOARD,
                {
                    "limit": limit or self._default_limit,
                    "offset": offset or self._default_offset,
                },
            ),
        )
        for result in (summary_r, leaderboard_r, users_r):
            if isinstance(result, Err):
                return result

        summaries = summary_r.ok_value
        if environment and environment != ALL_ENVIRONMENTS:
            summaries = [s for s in summaries if s.environment == environment]
        leaderboard = {entry.agent_name: entry for entry in leaderboard_r.ok_value}
        user_rows = users_r.ok_value

        agents: list[AgentData] = []
        for summary in summaries:
            entry = leaderboard.get(summary.agent_name)
            users = [
                UserData(
                    id=row.user_id,
                    name=row.user_id,
                    cost=usage.cost,
                    requests=usage.requests,
                    agents_used=[
                        AgentUsed(agent_name=a.agent_name, cost=a.cost, requests=a.requests)
                        for a in row.agents
                    ],
                )
                for row in user_rows
                for usage in row.agents
                if usage.agent_name == summary.agent_name
            ]
            agents.append(
                AgentData(
                    id=slugify(f"{summary.agent_name}-{summary.environment}"),
                    name=summary.agent_name,
                    type=entry.type if entry else AgentType.FOUNDATION,
                    total_cost=summary.total_cost,
                    total_tokens=summary.total_tokens,
                    active_users=summary.total_users,
                    sessions=summary.total_sessions,
                    requests=entry.requests if entry and entry.requests else summary.total_traces,
                    avg_cost_per_request=entry.avg_cost_per_request if entry else 0.0,
                    environment=summary.environment,
                    users=users,
                )
            )
        agents.sort(key=lambda a: a.total_cost, reverse=True)
        return Ok(
            AgentAnalytics(
                agents=agents,
                chart_data=[
                    ChartPoint(
                        kind="agent",
                        display_name=agent_label(a.name),
                        full_name=a.name,
                        cost=a.total_cost,
                        requests=a.requests,
                    )
                    for a in agents
                ],
                total_cost=sum(a.total_cost for a in agents),
                total_agents=len(agents),
            )
        )

    # -- users ------------------------------------------------------------

    async def get_user_analytics(
        self, environment: str | None = None, limit: int = 50
    ) -> Result[UserAnalytics, ApiError]:
        rows_r = await self._fetch(
            "analytics/dashboard/users/leaderboard",
            _USER_LEADERBOARD,
            {"environment": self._environment(environment), "limit": limit},
        )
        if isinstance(rows_r, Err):
            return rows_r

        users = [
            UserData(
                id=row.user_id,
                name=row.user_id,
                cost=row.total_cost,
                requests=row.total_requests,
                avg_cost_per_request=(
                    row.total_cost / row.total_requests if row.total_requests else 0.0
                ),
                agents_used=[
                    AgentUsed(agent_name=a.agent_name, cost=a.cost, requests=a.requests)
                    for a in row.agents
                ],
            )
            for row in rows_r.ok_value
        ]
        users.sort(key=lambda u: u.cost, reverse=True)
        return Ok(
            UserAnalytics(
                users=users,
                chart_data=[
                    ChartPoint(
                        kind="user",
                        display_name=user_label(u.name),
                        full_name=u.name,
                        cost=u.cost,
                        requests=u.requests,
                    )
                    for u in users
                ],
                total_cost=sum(u.cost for u in users),
                total_users=len(users),
                total_requests=sum(u.requests for u in users),
            )
        )

    async def get_user_details(
        self,
        user_id: str,
        environment: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> Result[UserDetailsResponse, ApiError]:
        return await self._fetch(
            f"analytics/dashboard/users/{user_id}",
            _USER_DETAILS,
            {"page": page, "limit": limit, "environment": self._environment(environment)},
        )

    # -- teams ------------------------------------------------------------

    async def get_team_analytics(
        self,
        environment: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> Result[TeamAnalytics, ApiError]:
        rows_r = await self._fetch(
            "analytics/dashboard/teams",
            _TEAMS,
            {
                "environment": self._environment(environment),
                "start_date": start_date,
                "end_date": end_date,
                "days": self._default_days,
            },
        )
        if isinstance(rows_r, Err):
            return rows_r

        teams = [
            TeamData(
                id=slugify(row.team_name),
                name=row.team_name,
                department=row.department,
                total_cost=row.weekly_cost,
                weekly_variance=format_variance(row.vs_last_week),
                total_users=row.total_users,
                active_users=row.active_users,
                cost_per_user=row.cost_per_user,
            )
            for row in rows_r.ok_value
        ]
        teams.sort(key=lambda t: t.total_cost, reverse=True)
        if teams and all(t.total_cost == 0 for t in teams):
            logger.info("All %d teams report zero cost", len(teams))
        return Ok(
            TeamAnalytics(
                teams=teams,
                chart_data=[
                    ChartPoint(
                        kind="team",
                        display_name=team_label(t.name),
                        full_name=t.name,
                        cost=t.total_cost,
                    )
                    for t in teams
                ],
                total_cost=sum(t.total_cost for t in teams),
                total_teams=len(teams),
            )
        )

    async def get_team_summary(
        self, start_date: str | None = None, end_date: str | None = None
    ) -> Result[list[TeamSummaryResponse], ApiError]:
        return await self._fetch(
            "users/team-summary",
            _TEAM_SUMMARIES,
            {"start_date": start_date, "end_date": end_date},
        )

    # -- budget -----------------------------------------------------------

    async def get_dashboard_budget(
        self,
        environment: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        weekly_budget: float = DEFAULT_WEEKLY_BUDGET,
    ) -> Result[DashboardBudget, ApiError]:
        summary_r = await self._fetch(
            "analytics/dashboard/summary",
            _DASHBOARD_SUMMARY,
            {
                "environment": self._environment(environment),
                "start_date": start_date,
                "end_date": end_date,
            },
        )
        if isinstance(summary_r, Err):
            return summary_r
        summary = summary_r.ok_value
        return Ok(
            DashboardBudget(
                projection=project_budget(
                    summary.current_week_spend, summary.projected_amount, weekly_budget
                ),
                active_users=summary.active_users,
                total_users=summary.total_users,
                active_agents=summary.active_agents,
                avg_cost_per_user=summary.avg_cost_per_user,
                active_users_summary=summary.active_users_summary,
            )
        )

    async def get_budget_history(
        self,
        weeks: int = 6,
        environment: str | None = None,
        today: date | None = None,
    ) -> Result[list[WeekSpend], ApiError]:
        """Actual and projected spend per week, oldest first."""
        history: list[WeekSpend] = []
        for offset in range(weeks):
            start, end = week_date_range(offset, today)
            summary_r = await self._fetch(
                "analytics/dashboard/summary",
                _DASHBOARD_SUMMARY,
                {
                    "environment": self._environment(environment),
                    "start_date": start,
                    "end_date": end,
                },
            )
            if isinstance(summary_r, Err):
                return summary_r
            history.append(
                WeekSpend(
                    week_start=date.fromisoformat(start),
                    week_end=date.fromisoformat(end),
                    actual_spend=summary_r.ok_value.current_week_spend,
                    projected_spend=summary_r.ok_value.projected_amount,
                )
            )
        history.reverse()
        return Ok(history)
