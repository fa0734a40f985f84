"""Shared fixtures for orgspend tests."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from orgspend.data.store import MockDataStore
from orgspend.models import (
    Agent,
    AgentType,
    AgentUsage,
    Alert,
    AlertSeverity,
    AlertType,
    DailyUsage,
    Dataset,
    Department,
    LLMModel,
    ModelFamily,
    Session,
    SessionStatus,
    TimeRange,
    User,
)
from orgspend.services.data_service import DataService
from orgspend.services.resilience import RequestSimulator
from orgspend.services.timeseries import aggregate_sessions

FIXED_NOW = datetime(2024, 1, 8, 12, 0, tzinfo=UTC)
SEED = 1234


def _session(
    session_id: str,
    timestamp: datetime,
    user_id: str,
    agent: Agent,
    cost: float,
    status: SessionStatus = SessionStatus.SUCCESS,
) -> Session:
    return Session(
        id=session_id,
        timestamp=timestamp,
        user_id=user_id,
        agent_id=agent.id,
        agent_name=agent.name,
        cost=cost,
        token_count=1000,
        duration=30,
        status=status,
    )


def build_fixture_dataset() -> Dataset:
    """Two departments, two agents, three users (one idle) and four sessions."""
    engineering = Department(
        id="dept-test-1",
        name="Test Engineering",
        weekly_budget=500,
        current_spend=450,
        projected_spend=475,
        week_over_week_change=12.5,
        active_users=8,
        total_users=10,
        cost_per_user=56.25,
    )
    product = Department(
        id="dept-test-2",
        name="Test Product",
        weekly_budget=300,
        current_spend=350,
        projected_spend=380,
        week_over_week_change=-5.2,
        active_users=5,
        total_users=7,
        cost_per_user=70,
    )
    assistant = Agent(
        id="agent-test-1",
        name="Test Agent 1",
        type=AgentType.PRE_BUILT,
        weekly_spend=150,
        request_count=100,
        average_cost=1.5,
        popularity_rank=1,
    )
    builder = Agent(
        id="agent-test-2",
        name="Test Agent 2",
        type=AgentType.DIY,
        weekly_spend=80,
        request_count=200,
        average_cost=0.4,
        popularity_rank=2,
    )
    model = LLMModel(
        id="model-test-1",
        name="Test Model",
        provider="Test Provider",
        model_family=ModelFamily.CLAUDE,
        weekly_spend=42,
        request_count=1000,
    )

    sessions = (
        _session(
            "session-test-2", datetime(2024, 1, 7, 15, tzinfo=UTC), "user-test-1", assistant, 1.0
        ),
        _session(
            "session-test-1", datetime(2024, 1, 7, 10, tzinfo=UTC), "user-test-1", assistant, 2.5
        ),
        _session(
            "session-test-3",
            datetime(2024, 1, 6, 9, tzinfo=UTC),
            "user-test-2",
            builder,
            0.8,
            SessionStatus.ERROR,
        ),
        _session(
            "session-test-4",
            datetime(2024, 1, 6, 8, tzinfo=UTC),
            "user-test-1",
            builder,
            0.3,
            SessionStatus.TIMEOUT,
        ),
    )

    john = User(
        id="user-test-1",
        email="john.doe@company.com",
        name="John Doe",
        department_id=engineering.id,
        department=engineering.name,
        role="Software Engineer",
        weekly_spend=250,
        request_count=150,
        agent_count=2,
        trend_data=[
            DailyUsage(date=datetime(2024, 1, 6, tzinfo=UTC), cost=100, request_count=60),
            DailyUsage(date=datetime(2024, 1, 7, tzinfo=UTC), cost=150, request_count=90),
        ],
        agent_breakdown=[
            AgentUsage(
                agent_id=assistant.id,
                agent_name=assistant.name,
                cost=200,
                request_count=133,
                percentage=80,
            ),
            AgentUsage(
                agent_id=builder.id,
                agent_name=builder.name,
                cost=50,
                request_count=125,
                percentage=20,
            ),
        ],
        recent_sessions=[s for s in sessions if s.user_id == "user-test-1"],
    )
    jane = User(
        id="user-test-2",
        email="jane.smith@company.com",
        name="Jane Smith",
        department_id=product.id,
        department=product.name,
        role="Product Manager",
        weekly_spend=120,
        request_count=80,
        agent_count=1,
        agent_breakdown=[
            AgentUsage(
                agent_id=builder.id,
                agent_name=builder.name,
                cost=120,
                request_count=300,
                percentage=100,
            )
        ],
        recent_sessions=[s for s in sessions if s.user_id == "user-test-2"],
    )
    idle = User(
        id="user-test-3",
        email="zero.user@company.com",
        name="Zero User",
        department_id=engineering.id,
        department=engineering.name,
    )

    alerts = (
        Alert(
            id="alert-test-1",
            type=AlertType.BUDGET,
            severity=AlertSeverity.HIGH,
            message="Test Product has exceeded weekly budget by 16.7%",
            department_id=product.id,
            timestamp=datetime(2024, 1, 7, 12, tzinfo=UTC),
        ),
        Alert(
            id="alert-test-2",
            type=AlertType.BUDGET,
            severity=AlertSeverity.MEDIUM,
            message="Test Engineering is at 90.0% of weekly budget",
            department_id=engineering.id,
            timestamp=datetime(2024, 1, 7, 6, tzinfo=UTC),
        ),
        Alert(
            id="alert-test-3",
            type=AlertType.USAGE,
            severity=AlertSeverity.MEDIUM,
            message="John Doe has high weekly usage: $250.00",
            user_id=john.id,
            timestamp=datetime(2024, 1, 6, 20, tzinfo=UTC),
        ),
    )

    return Dataset(
        departments=(engineering, product),
        agents=(assistant, builder),
        models=(model,),
        users=(john, jane, idle),
        sessions=sessions,
        time_series=tuple(aggregate_sessions(sessions)),
        alerts=alerts,
        generated_at=FIXED_NOW,
    )


@pytest.fixture
def fixture_store() -> MockDataStore:
    """Store over the hand-built fixture dataset."""
    return MockDataStore.from_dataset(build_fixture_dataset())


@pytest.fixture(scope="session")
def seeded_store() -> MockDataStore:
    """A generated dataset shared by the whole run; treat it as read-only."""
    return MockDataStore.with_seed(SEED, now=FIXED_NOW)


@pytest.fixture
def fast_simulator() -> RequestSimulator:
    """No latency and a rate limit no test reaches."""
    return RequestSimulator(latency_min_ms=0, latency_max_ms=0, rate_limit_requests=10_000)


@pytest.fixture
def service(fixture_store: MockDataStore, fast_simulator: RequestSimulator) -> DataService:
    return DataService(fixture_store, fast_simulator, clock=lambda: FIXED_NOW)


@pytest.fixture
def seeded_service(seeded_store: MockDataStore, fast_simulator: RequestSimulator) -> DataService:
    return DataService(seeded_store, fast_simulator, clock=lambda: FIXED_NOW)


@pytest.fixture
def window() -> TimeRange:
    """The week leading up to ``FIXED_NOW``."""
    return TimeRange.last_days(7, now=FIXED_NOW)
