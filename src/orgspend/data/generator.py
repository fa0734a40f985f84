"""Relationship-preserving mock data generator.

One :meth:`MockDataGenerator.generate` call builds the whole closure in
dependency order: departments, agents, LLM models, users, sessions, the daily
time series and alerts. Every derived collection is computed from the base
collections of the same pass, so totals reconcile across views.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import UTC, datetime, timedelta

from orgspend.data.random_source import RandomSource, choice, randint, sample, seeded, uniform
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
from orgspend.services.timeseries import aggregate_sessions

logger = logging.getLogger(__name__)

DEPARTMENT_NAMES: tuple[str, ...] = (
    "Trackers",
    "Community",
    "Media Tracking",
    "Server",
    "HCP-Pt",
    "Business Development",
    "Consulting US",
    "Ferma Agents",
    "Finance",
    "Client",
    "Consulting India",
)

AGENT_NAMES: dict[AgentType, tuple[str, ...]] = {
    AgentType.PRE_BUILT: (
        "Foundational Models",
        "Scoping",
        "Hashtag",
        "Digital Tracker",
        "Synapse Reports",
    ),
    AgentType.DIY: ("Message Labs", "Salesforce", "RBAC Agent", "Survey Coding"),
    AgentType.FOUNDATION: ("Foundational Models",),
}

# USD per token
COST_PER_TOKEN: dict[AgentType, float] = {
    AgentType.PRE_BUILT: 0.00003,
    AgentType.DIY: 0.00001,
    AgentType.FOUNDATION: 0.000005,
}

LLM_MODELS: tuple[tuple[str, str, ModelFamily], ...] = (
    ("GPT-4 Turbo", "OpenAI", ModelFamily.GPT),
    ("Claude 3.5 Sonnet", "Anthropic", ModelFamily.CLAUDE),
    ("Gemini 1.5 Pro", "Google", ModelFamily.GEMINI),
    ("Llama 3.1 70B", "Meta", ModelFamily.LLAMA),
)

_COST_PER_REQUEST: dict[ModelFamily, tuple[float, float]] = {
    ModelFamily.GPT: (0.003, 0.008),
    ModelFamily.CLAUDE: (0.002, 0.006),
    ModelFamily.GEMINI: (0.001, 0.004),
    ModelFamily.LLAMA: (0.0005, 0.002),
}

_LATENCY_MS: dict[ModelFamily, tuple[int, int]] = {
    ModelFamily.GPT: (800, 2500),
    ModelFamily.CLAUDE: (1200, 3000),
    ModelFamily.GEMINI: (600, 2000),
    ModelFamily.LLAMA: (400, 1500),
}

USER_ROLES: tuple[str, ...] = (
    "Software Engineer",
    "Senior Engineer",
    "Engineering Manager",
    "Product Manager",
    "Designer",
    "Data Scientist",
    "Marketing Manager",
    "Sales Representative",
    "Customer Success Manager",
)

FIRST_NAMES: tuple[str, ...] = (
    "Alex", "Jordan", "Taylor", "Morgan", "Casey", "Riley", "Avery", "Quinn",
    "Sarah", "Michael", "Emma", "David", "Jessica", "James", "Ashley", "Robert",
    "Emily", "John", "Madison", "William", "Samantha", "Christopher", "Amanda", "Daniel",
)  # fmt: skip

LAST_NAMES: tuple[str, ...] = (
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson",
    "Thomas", "Taylor", "Moore", "Jackson", "Martin", "Lee", "Perez", "Thompson", "White",
)  # fmt: skip

# (upper bound of the profile draw, spend range, request range)
USAGE_PROFILES: tuple[tuple[float, tuple[float, float], tuple[int, int]], ...] = (
    (0.1, (0.0, 0.0), (0, 0)),
    (0.3, (1.0, 20.0), (1, 50)),
    (0.8, (20.0, 100.0), (50, 300)),
    (1.0, (100.0, 500.0), (300, 1500)),
)

TREND_DAYS = 7
RECENT_SESSIONS = 10
HIGH_USAGE_THRESHOLD = 200.0
VERY_HIGH_USAGE_THRESHOLD = 400.0
BUDGET_WARNING_UTILIZATION = 0.8


class MockDataGenerator:
    """Builds a consistent :class:`Dataset` from a :class:`RandomSource`.

    Same random seed and same ``now`` produce identical datasets.
    """

    def __init__(
        self,
        rng: RandomSource | None = None,
        *,
        now: datetime | None = None,
        department_names: tuple[str, ...] = DEPARTMENT_NAMES,
    ) -> None:
        self._rng = rng if rng is not None else seeded()
        self._now = now
        self._department_names = department_names

    def generate(self) -> Dataset:
        now = self._now or datetime.now(UTC)
        departments = self.generate_departments()
        agents = self.generate_agents()
        models = self.generate_models()
        users = self.generate_users(departments, agents, now=now)
        sessions, users = self.generate_sessions(users, agents, now=now)
        time_series = self.generate_time_series(sessions)
        alerts = self.generate_alerts(departments, users, now=now)
        logger.debug(
            "Generated %d departments, %d users, %d sessions",
            len(departments),
            len(users),
            len(sessions),
        )
        return Dataset(
            departments=tuple(departments),
            agents=tuple(agents),
            models=tuple(models),
            users=tuple(users),
            sessions=tuple(sessions),
            time_series=tuple(time_series),
            alerts=tuple(alerts),
            generated_at=now,
        )

    # -- departments ------------------------------------------------------

    def generate_departments(self) -> list[Department]:
        rng = self._rng
        departments: list[Department] = []
        for index, name in enumerate(self._department_names, start=1):
            dept_id = f"dept-{index}"
            weekly_budget = uniform(rng, 200, 1000)
            current_spend = uniform(rng, 50, weekly_budget * 1.2)
            projected_spend = current_spend * uniform(rng, 1.0, 1.3)
            week_over_week = uniform(rng, -30, 50)
            total_users = randint(rng, 5, 25)
            active_users = min(total_users, randint(rng, 3, total_users))
            departments.append(
                Department(
                    id=dept_id,
                    name=name,
                    weekly_budget=weekly_budget,
                    current_spend=current_spend,
                    projected_spend=projected_spend,
                    week_over_week_change=week_over_week,
                    active_users=active_users,
                    total_users=total_users,
                    cost_per_user=current_spend / max(active_users, 1),
                    projects=self._generate_projects(dept_id, name),
                )
            )
        return departments

    def _generate_projects(self, department_id: str, department_name: str) -> list[Project]:
        rng = self._rng
        return [
            Project(
                id=f"{department_id}-proj-{i}",
                name=f"{department_name} Project {i}",
                department_id=department_id,
                weekly_spend=uniform(rng, 20, 200),
                user_count=randint(rng, 2, 8),
                agent_count=randint(rng, 1, 5),
            )
            for i in range(1, randint(rng, 2, 5) + 1)
        ]

    # -- agents and models ------------------------------------------------

    def realistic_cost(self, agent_type: AgentType, token_count: int) -> float:
        """Token cost for ``agent_type`` with +/-20% jitter."""
        return token_count * COST_PER_TOKEN[agent_type] * uniform(self._rng, 0.8, 1.2)

    def generate_agents(self) -> list[Agent]:
        rng = self._rng
        drafts: list[Agent] = []
        for agent_type, names in AGENT_NAMES.items():
            for index, name in enumerate(names, start=1):
                request_count = randint(rng, 50, 2000)
                average_cost = self.realistic_cost(agent_type, 1000)
                drafts.append(
                    Agent(
                        id=f"agent-{agent_type.lower()}-{index}",
                        name=name,
                        type=agent_type,
                        weekly_spend=request_count * average_cost,
                        request_count=request_count,
                        average_cost=average_cost,
                    )
                )
        ranked = sorted(drafts, key=lambda a: a.weekly_spend, reverse=True)
        return [
            agent.model_copy(update={"popularity_rank": rank})
            for rank, agent in enumerate(ranked, start=1)
        ]

    def generate_models(self) -> list[LLMModel]:
        rng = self._rng
        models: list[LLMModel] = []
        for index, (name, provider, family) in enumerate(LLM_MODELS, start=1):
            request_count = randint(rng, 800, 2500)
            cost_per_request = uniform(rng, *_COST_PER_REQUEST[family])
            input_tokens = request_count * randint(rng, 150, 800)
            output_tokens = request_count * randint(rng, 50, 400)
            models.append(
                LLMModel(
                    id=f"model-{index}",
                    name=name,
                    provider=provider,
                    model_family=family,
                    weekly_spend=round(request_count * cost_per_request, 2),
                    request_count=request_count,
                    average_cost=round(cost_per_request, 4),
                    average_latency=randint(rng, *_LATENCY_MS[family]),
                    success_rate=uniform(rng, 94, 99.5),
                    week_over_week_change=uniform(rng, -25, 35),
                    token_usage=TokenUsage(
                        input=input_tokens,
                        output=output_tokens,
                        total=input_tokens + output_tokens,
                    ),
                    top_agents=list(AGENT_NAMES[AgentType.PRE_BUILT][: randint(rng, 2, 4)]),
                )
            )
        return sorted(models, key=lambda m: m.weekly_spend, reverse=True)

    # -- users ------------------------------------------------------------

    def generate_users(
        self,
        departments: list[Department],
        agents: list[Agent],
        *,
        now: datetime,
    ) -> list[User]:
        rng = self._rng
        users: list[User] = []
        for department in departments:
            for _ in range(department.total_users):
                first = choice(rng, FIRST_NAMES)
                last = choice(rng, LAST_NAMES)
                weekly_spend, request_count = self._usage_profile()
                breakdown = self._agent_breakdown(agents, weekly_spend)
                users.append(
                    User(
                        id=f"user-{len(users) + 1}",
                        email=f"{first.lower()}.{last.lower()}@company.com",
                        name=f"{first} {last}",
                        department_id=department.id,
                        department=department.name,
                        role=choice(rng, USER_ROLES),
                        weekly_spend=weekly_spend,
                        request_count=request_count,
                        agent_count=len(breakdown),
                        trend_data=self._daily_usage(weekly_spend, request_count, now),
                        agent_breakdown=breakdown,
                    )
                )
        return users

    def _usage_profile(self) -> tuple[float, int]:
        rng = self._rng
        draw = rng.random()
        for upper, (spend_lo, spend_hi), (req_lo, req_hi) in USAGE_PROFILES:
            if draw < upper:
                break
        if spend_hi == 0:
            return 0.0, 0
        return uniform(rng, spend_lo, spend_hi), randint(rng, req_lo, req_hi)

    def _daily_usage(
        self, weekly_spend: float, weekly_requests: int, now: datetime
    ) -> list[DailyUsage]:
        """Spread a week's usage over the last 7 UTC days.

        Each day but the last takes 5-40% of what remains; the last day takes
        the remainder so the week sums exactly.
        """
        rng = self._rng
        today = now.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)
        days = [today - timedelta(days=offset) for offset in range(TREND_DAYS - 1, -1, -1)]
        if weekly_spend == 0:
            return [DailyUsage(date=day) for day in days]

        trend: list[DailyUsage] = []
        remaining_cost = weekly_spend
        remaining_requests = weekly_requests
        for day in days[:-1]:
            max_cost = remaining_cost * 0.4
            cost = uniform(rng, min(remaining_cost * 0.05, max_cost), max_cost)
            max_requests = round(remaining_requests * 0.4)
            min_requests = min(round(remaining_requests * 0.05), max_requests)
            requests = randint(rng, min_requests, max_requests)
            trend.append(DailyUsage(date=day, cost=cost, request_count=requests))
            remaining_cost = max(0.0, remaining_cost - cost)
            remaining_requests = max(0, remaining_requests - requests)
        trend.append(
            DailyUsage(date=days[-1], cost=remaining_cost, request_count=remaining_requests)
        )
        return trend

    def _agent_breakdown(self, agents: list[Agent], total_spend: float) -> list[AgentUsage]:
        if total_spend == 0 or not agents:
            return []
        rng = self._rng
        selected = sample(rng, agents, randint(rng, 1, min(5, len(agents))))
        breakdown: list[AgentUsage] = []
        remaining = total_spend
        for position, agent in enumerate(selected):
            is_last = position == len(selected) - 1
            cost = remaining if is_last else remaining * uniform(rng, 0.1, 0.6)
            breakdown.append(
                AgentUsage(
                    agent_id=agent.id,
                    agent_name=agent.name,
                    cost=cost,
                    request_count=round(cost / agent.average_cost) if agent.average_cost else 0,
                    percentage=cost / total_spend * 100,
                )
            )
            remaining -= cost
        return sorted(breakdown, key=lambda u: u.cost, reverse=True)

    # -- sessions ---------------------------------------------------------

    def generate_sessions(
        self,
        users: list[User],
        agents: list[Agent],
        *,
        now: datetime,
    ) -> tuple[list[Session], list[User]]:
        """Sessions newest first, plus users with ``recent_sessions`` attached."""
        rng = self._rng
        window = timedelta(days=TREND_DAYS).total_seconds()
        sessions: list[Session] = []
        for user in users:
            if user.weekly_spend == 0:
                continue
            count = max(1, round(user.request_count * uniform(rng, 0.8, 1.2)))
            for _ in range(count):
                agent = choice(rng, agents)
                token_count = randint(rng, 100, 5000)
                cost = self.realistic_cost(agent.type, token_count)
                status_draw = rng.random()
                if status_draw < 0.05:
                    status = SessionStatus.ERROR
                elif status_draw < 0.08:
                    status = SessionStatus.TIMEOUT
                else:
                    status = SessionStatus.SUCCESS
                sessions.append(
                    Session(
                        id=f"session-{len(sessions) + 1}",
                        timestamp=now - timedelta(seconds=window * (1 - rng.random())),
                        user_id=user.id,
                        agent_id=agent.id,
                        agent_name=agent.name,
                        cost=cost,
                        token_count=token_count,
                        duration=randint(rng, 1, 300),
                        status=status,
                    )
                )

        sessions.sort(key=lambda s: s.timestamp, reverse=True)
        by_user: dict[str, list[Session]] = defaultdict(list)
        for session in sessions:
            recent = by_user[session.user_id]
            if len(recent) < RECENT_SESSIONS:
                recent.append(session)
        users = [
            user.model_copy(update={"recent_sessions": by_user.get(user.id, [])})
            for user in users
        ]
        return sessions, users

    def generate_time_series(self, sessions: list[Session]) -> list[TimeSeriesPoint]:
        return aggregate_sessions(sessions)

    # -- alerts -----------------------------------------------------------

    def _within_days(self, now: datetime, days: int) -> datetime:
        return now - timedelta(days=days) * (1 - self._rng.random())

    def generate_alerts(
        self,
        departments: list[Department],
        users: list[User],
        *,
        now: datetime,
    ) -> list[Alert]:
        alerts: list[Alert] = []

        def next_id() -> str:
            return f"alert-{len(alerts) + 1}"

        for department in departments:
            utilization = department.utilization
            if utilization > 1.0:
                alerts.append(
                    Alert(
                        id=next_id(),
                        type=AlertType.BUDGET,
                        severity=AlertSeverity.HIGH,
                        message=(
                            f"{department.name} has exceeded weekly budget by "
                            f"{(utilization - 1) * 100:.1f}%"
                        ),
                        department_id=department.id,
                        timestamp=self._within_days(now, 1),
                    )
                )
            elif utilization > BUDGET_WARNING_UTILIZATION:
                alerts.append(
                    Alert(
                        id=next_id(),
                        type=AlertType.BUDGET,
                        severity=AlertSeverity.MEDIUM,
                        message=(
                            f"{department.name} is at {utilization * 100:.1f}% of weekly budget"
                        ),
                        department_id=department.id,
                        timestamp=self._within_days(now, 2),
                    )
                )

        for user in users:
            if user.weekly_spend <= HIGH_USAGE_THRESHOLD:
                continue
            severity = (
                AlertSeverity.HIGH
                if user.weekly_spend > VERY_HIGH_USAGE_THRESHOLD
                else AlertSeverity.MEDIUM
            )
            alerts.append(
                Alert(
                    id=next_id(),
                    type=AlertType.USAGE,
                    severity=severity,
                    message=f"{user.name} has high weekly usage: ${user.weekly_spend:.2f}",
                    user_id=user.id,
                    timestamp=self._within_days(now, 1),
                )
            )

        return sorted(alerts, key=lambda a: a.timestamp, reverse=True)
