"""In-memory mock data store: one generated dataset per instance."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime

from orgspend.data.generator import HIGH_USAGE_THRESHOLD, MockDataGenerator
from orgspend.data.random_source import seeded
from orgspend.models.analytics import (
    AgentStatistics,
    AgentTypeStatistics,
    DataSummary,
    DepartmentStatistics,
    UserStatistics,
)
from orgspend.models.dataset import Dataset
from orgspend.models.entities import (
    Agent,
    AgentType,
    Alert,
    Department,
    LLMModel,
    Session,
    TimeSeriesPoint,
    User,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Index:
    """Lookups built once per dataset."""

    departments: dict[str, Department] = field(default_factory=dict)
    users: dict[str, User] = field(default_factory=dict)
    agents: dict[str, Agent] = field(default_factory=dict)
    sessions: dict[str, Session] = field(default_factory=dict)
    users_by_department: dict[str, list[User]] = field(default_factory=dict)
    sessions_by_user: dict[str, list[Session]] = field(default_factory=dict)

    @classmethod
    def build(cls, dataset: Dataset) -> _Index:
        users_by_department: dict[str, list[User]] = defaultdict(list)
        for user in dataset.users:
            users_by_department[user.department_id].append(user)
        sessions_by_user: dict[str, list[Session]] = defaultdict(list)
        for session in dataset.sessions:
            sessions_by_user[session.user_id].append(session)
        return cls(
            departments={d.id: d for d in dataset.departments},
            users={u.id: u for u in dataset.users},
            agents={a.id: a for a in dataset.agents},
            sessions={s.id: s for s in dataset.sessions},
            users_by_department=dict(users_by_department),
            sessions_by_user=dict(sessions_by_user),
        )


class MockDataStore:
    """Holds one consistent :class:`Dataset` and its indexes.

    Regeneration swaps dataset and indexes in a single assignment, so a reader
    never sees collections from two different passes.
    """

    def __init__(
        self,
        generator: MockDataGenerator | None = None,
        *,
        dataset: Dataset | None = None,
    ) -> None:
        self._generator = generator or MockDataGenerator()
        self._state: tuple[Dataset, _Index]
        if dataset is not None:
            self._load(dataset)
        else:
            self.reset()

    @classmethod
    def with_seed(cls, seed: int, now: datetime | None = None) -> MockDataStore:
        return cls(MockDataGenerator(seeded(seed), now=now))

    @classmethod
    def from_dataset(cls, dataset: Dataset) -> MockDataStore:
        """Wrap a prebuilt dataset, e.g. test fixtures."""
        return cls(dataset=dataset)

    def _load(self, dataset: Dataset) -> None:
        self._state = (dataset, _Index.build(dataset))
        logger.info(
            "Loaded dataset: %d departments, %d users, %d agents, %d sessions, %d alerts",
            len(dataset.departments),
            len(dataset.users),
            len(dataset.agents),
            len(dataset.sessions),
            len(dataset.alerts),
        )

    def reset(self) -> None:
        """Replace the dataset with a freshly generated one."""
        self._load(self._generator.generate())

    def regenerate_data(self) -> None:
        self.reset()

    @property
    def dataset(self) -> Dataset:
        return self._state[0]

    @property
    def _index(self) -> _Index:
        return self._state[1]

    # -- getters ----------------------------------------------------------

    def get_departments(self) -> list[Department]:
        return list(self.dataset.departments)

    def get_users(self) -> list[User]:
        return list(self.dataset.users)

    def get_agents(self) -> list[Agent]:
        return list(self.dataset.agents)

    def get_models(self) -> list[LLMModel]:
        return list(self.dataset.models)

    def get_sessions(self) -> list[Session]:
        return list(self.dataset.sessions)

    def get_time_series(self) -> list[TimeSeriesPoint]:
        return list(self.dataset.time_series)

    def get_alerts(self) -> list[Alert]:
        return list(self.dataset.alerts)

    def get_all_data(self) -> Dataset:
        return self.dataset

    # -- lookups ----------------------------------------------------------

    def find_department_by_id(self, department_id: str) -> Department | None:
        return self._index.departments.get(department_id)

    def find_user_by_id(self, user_id: str) -> User | None:
        return self._index.users.get(user_id)

    def find_agent_by_id(self, agent_id: str) -> Agent | None:
        return self._index.agents.get(agent_id)

    def find_session_by_id(self, session_id: str) -> Session | None:
        return self._index.sessions.get(session_id)

    def get_users_by_department(self, department_id: str) -> list[User]:
        return list(self._index.users_by_department.get(department_id, []))

    def get_sessions_by_user(self, user_id: str) -> list[Session]:
        """The user's sessions, newest first."""
        return list(self._index.sessions_by_user.get(user_id, []))

    def get_agents_by_type(self, agent_type: AgentType) -> list[Agent]:
        return [a for a in self.dataset.agents if a.type == agent_type]

    def get_alerts_by_department(self, department_id: str) -> list[Alert]:
        return [a for a in self.dataset.alerts if a.department_id == department_id]

    def get_alerts_by_user(self, user_id: str) -> list[Alert]:
        return [a for a in self.dataset.alerts if a.user_id == user_id]

    # -- statistics -------------------------------------------------------

    def get_data_summary(self) -> DataSummary:
        data = self.dataset
        return DataSummary(
            departments=len(data.departments),
            users=len(data.users),
            agents=len(data.agents),
            models=len(data.models),
            sessions=len(data.sessions),
            time_series_points=len(data.time_series),
            alerts=len(data.alerts),
            total_weekly_spend=sum(d.current_spend for d in data.departments),
            total_weekly_budget=sum(d.weekly_budget for d in data.departments),
            high_usage_users=sum(1 for u in data.users if u.weekly_spend > HIGH_USAGE_THRESHOLD),
            zero_usage_users=sum(1 for u in data.users if u.weekly_spend == 0),
            generated_at=data.generated_at,
        )

    def get_department_statistics(self) -> DepartmentStatistics:
        departments = self.dataset.departments
        count = max(len(departments), 1)
        total_budget = sum(d.weekly_budget for d in departments)
        total_spend = sum(d.current_spend for d in departments)
        return DepartmentStatistics(
            total_departments=len(departments),
            total_budget=total_budget,
            total_spend=total_spend,
            budget_utilization=total_spend / total_budget * 100 if total_budget > 0 else 0.0,
            over_budget_count=sum(1 for d in departments if d.current_spend > d.weekly_budget),
            average_spend_per_department=total_spend / count,
            average_budget_per_department=total_budget / count,
        )

    def get_user_statistics(self) -> UserStatistics:
        users = self.dataset.users
        active = [u for u in users if u.weekly_spend > 0]
        total_spend = sum(u.weekly_spend for u in users)
        total_requests = sum(u.request_count for u in users)
        return UserStatistics(
            total_users=len(users),
            active_users=len(active),
            inactive_users=len(users) - len(active),
            total_spend=total_spend,
            total_requests=total_requests,
            average_spend_per_user=total_spend / max(len(users), 1),
            average_spend_per_active_user=total_spend / max(len(active), 1),
            average_requests_per_user=total_requests / max(len(users), 1),
        )

    def get_agent_statistics(self) -> AgentStatistics:
        agents = self.dataset.agents
        total_spend = sum(a.weekly_spend for a in agents)
        total_requests = sum(a.request_count for a in agents)
        by_type: dict[AgentType, AgentTypeStatistics] = {}
        for agent in agents:
            stats = by_type.setdefault(agent.type, AgentTypeStatistics())
            stats.count += 1
            stats.total_spend += agent.weekly_spend
            stats.total_requests += agent.request_count
        return AgentStatistics(
            total_agents=len(agents),
            total_spend=total_spend,
            total_requests=total_requests,
            average_spend_per_agent=total_spend / max(len(agents), 1),
            average_requests_per_agent=total_requests / max(len(agents), 1),
            by_type=by_type,
        )
