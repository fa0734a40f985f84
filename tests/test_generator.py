"""Tests for the mock data generator."""

from __future__ import annotations

import random
from collections import Counter
from datetime import UTC, datetime, timedelta

import pytest
from conftest import FIXED_NOW

from orgspend.data.generator import (
    DEPARTMENT_NAMES,
    RECENT_SESSIONS,
    TREND_DAYS,
    USAGE_PROFILES,
    MockDataGenerator,
)
from orgspend.data.random_source import choice, randint, sample, seeded, uniform
from orgspend.data.store import MockDataStore
from orgspend.models import AgentType, AlertSeverity, AlertType, Department, SessionStatus, User


class TestRandomSource:
    def test_seeded_sources_repeat(self) -> None:
        first = seeded(7)
        second = seeded(7)
        assert [first.random() for _ in range(5)] == [second.random() for _ in range(5)]

    def test_randint_is_inclusive(self) -> None:
        rng = seeded(3)
        values = {randint(rng, 1, 3) for _ in range(500)}
        assert values == {1, 2, 3}

    def test_uniform_bounds(self) -> None:
        rng = seeded(3)
        assert all(2.0 <= uniform(rng, 2.0, 5.0) < 5.0 for _ in range(500))

    def test_choice_and_sample(self) -> None:
        rng = seeded(11)
        items = ("a", "b", "c", "d")
        assert choice(rng, items) in items
        picked = sample(rng, items, 3)
        assert len(picked) == 3
        assert len(set(picked)) == 3
        assert len(sample(rng, items, 10)) == 4

    def test_any_object_with_random_drives_the_helpers(self) -> None:
        class ScriptedSource:
            def __init__(self, values: list[float]) -> None:
                self.values = list(values)

            def random(self) -> float:
                return self.values.pop(0)

        rng = ScriptedSource([0.0, 0.99, 0.5, 0.25])
        assert randint(rng, 1, 4) == 1
        assert randint(rng, 1, 4) == 4
        assert choice(rng, ("a", "b", "c", "d")) == "c"
        assert uniform(rng, 0.0, 8.0) == 2.0
        assert rng.values == []


class TestGeneratedDataset:
    def test_same_seed_same_dataset(self) -> None:
        small = ("Alpha", "Beta")
        first = MockDataGenerator(seeded(99), now=FIXED_NOW, department_names=small).generate()
        second = MockDataGenerator(seeded(99), now=FIXED_NOW, department_names=small).generate()
        assert first == second

    def test_department_closure(self, seeded_store: MockDataStore) -> None:
        departments = seeded_store.get_departments()
        assert [d.name for d in departments] == list(DEPARTMENT_NAMES)
        per_department = Counter(u.department_id for u in seeded_store.get_users())
        for dept in departments:
            assert 200 <= dept.weekly_budget < 1000
            assert dept.total_users == per_department[dept.id]
            assert dept.active_users <= dept.total_users
            assert 2 <= len(dept.projects) <= 5
            assert all(p.department_id == dept.id for p in dept.projects)

    def test_users_reference_department_by_id_and_name(
        self, seeded_store: MockDataStore
    ) -> None:
        for user in seeded_store.get_users():
            dept = seeded_store.find_department_by_id(user.department_id)
            assert dept is not None
            assert user.department == dept.name

    def test_zero_spend_users_are_idle(self, seeded_store: MockDataStore) -> None:
        idle = [u for u in seeded_store.get_users() if u.weekly_spend == 0]
        assert idle
        for user in idle:
            assert user.request_count == 0
            assert user.agent_count == 0
            assert user.agent_breakdown == []
            assert sum(day.cost for day in user.trend_data) == 0
            assert seeded_store.get_sessions_by_user(user.id) == []

    def test_agent_breakdown_reconciles(self, seeded_store: MockDataStore) -> None:
        agent_ids = {a.id for a in seeded_store.get_agents()}
        for user in seeded_store.get_users():
            if user.weekly_spend == 0:
                continue
            breakdown = user.agent_breakdown
            assert 1 <= len(breakdown) <= 5
            assert user.agent_count == len(breakdown)
            assert sum(u.percentage for u in breakdown) == pytest.approx(100, abs=0.1)
            assert sum(u.cost for u in breakdown) == pytest.approx(user.weekly_spend, abs=0.01)
            assert {u.agent_id for u in breakdown} <= agent_ids
            assert len({u.agent_id for u in breakdown}) == len(breakdown)

    def test_trend_covers_last_seven_days(self, seeded_store: MockDataStore) -> None:
        today = FIXED_NOW.replace(hour=0, minute=0, second=0, microsecond=0)
        expected = [today - timedelta(days=n) for n in range(TREND_DAYS - 1, -1, -1)]
        for user in seeded_store.get_users():
            assert [day.date for day in user.trend_data] == expected
            total = sum(day.cost for day in user.trend_data)
            if user.weekly_spend > 0:
                assert 0.3 * user.weekly_spend < total < 2.0 * user.weekly_spend
                assert all(day.cost >= 0 for day in user.trend_data)
                assert sum(day.request_count for day in user.trend_data) == user.request_count

    def test_popularity_rank_follows_spend(self, seeded_store: MockDataStore) -> None:
        agents = seeded_store.get_agents()
        ranked = sorted(agents, key=lambda a: a.popularity_rank)
        assert [a.popularity_rank for a in ranked] == list(range(1, len(agents) + 1))
        spends = [a.weekly_spend for a in ranked]
        assert spends == sorted(spends, reverse=True)

    def test_agent_ids_are_unique_across_types(self, seeded_store: MockDataStore) -> None:
        agents = seeded_store.get_agents()
        assert len({a.id for a in agents}) == len(agents)
        foundation = [a for a in agents if a.type == AgentType.FOUNDATION]
        assert [a.id for a in foundation] == ["agent-foundation-1"]

    def test_models_sorted_by_spend(self, seeded_store: MockDataStore) -> None:
        models = seeded_store.get_models()
        assert len(models) == 4
        spends = [m.weekly_spend for m in models]
        assert spends == sorted(spends, reverse=True)
        for model in models:
            assert model.token_usage.total == model.token_usage.input + model.token_usage.output

    def test_sessions_belong_to_active_users(self, seeded_store: MockDataStore) -> None:
        users = {u.id: u for u in seeded_store.get_users()}
        agents = {a.id: a for a in seeded_store.get_agents()}
        sessions = seeded_store.get_sessions()
        assert sessions
        timestamps = [s.timestamp for s in sessions]
        assert timestamps == sorted(timestamps, reverse=True)
        start = FIXED_NOW - timedelta(days=TREND_DAYS)
        for session in sessions[:2000]:
            assert users[session.user_id].weekly_spend > 0
            assert agents[session.agent_id].name == session.agent_name
            assert start <= session.timestamp <= FIXED_NOW
            assert 100 <= session.token_count <= 5000

    def test_recent_sessions_are_newest_ten(self, seeded_store: MockDataStore) -> None:
        for user in seeded_store.get_users()[:40]:
            own = seeded_store.get_sessions_by_user(user.id)
            assert user.recent_sessions == own[:RECENT_SESSIONS]

    def test_time_series_sums_sessions(self, seeded_store: MockDataStore) -> None:
        points = seeded_store.get_time_series()
        sessions = seeded_store.get_sessions()
        assert sum(p.request_count for p in points) == len(sessions)
        assert sum(p.cost for p in points) == pytest.approx(sum(s.cost for s in sessions))
        assert [p.timestamp for p in points] == sorted(p.timestamp for p in points)


class TestAlerts:
    def _department(self, budget: float, spend: float) -> Department:
        return Department(
            id="dept-test-1",
            name="Test Engineering",
            weekly_budget=budget,
            current_spend=spend,
        )

    def test_budget_warning_at_ninety_percent(self) -> None:
        generator = MockDataGenerator(seeded(1), now=FIXED_NOW)
        alerts = generator.generate_alerts([self._department(500, 450)], [], now=FIXED_NOW)
        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.type == AlertType.BUDGET
        assert alert.severity == AlertSeverity.MEDIUM
        assert alert.message == "Test Engineering is at 90.0% of weekly budget"
        assert FIXED_NOW - timedelta(days=2) <= alert.timestamp <= FIXED_NOW

    def test_over_budget_is_high(self) -> None:
        generator = MockDataGenerator(seeded(1), now=FIXED_NOW)
        alerts = generator.generate_alerts([self._department(300, 350)], [], now=FIXED_NOW)
        assert [a.severity for a in alerts] == [AlertSeverity.HIGH]
        assert alerts[0].message == "Test Engineering has exceeded weekly budget by 16.7%"

    def test_no_alert_at_or_below_threshold(self) -> None:
        generator = MockDataGenerator(seeded(1), now=FIXED_NOW)
        alerts = generator.generate_alerts([self._department(500, 400)], [], now=FIXED_NOW)
        assert alerts == []

    def test_usage_alert_severity(self) -> None:
        def user(user_id: str, spend: float) -> User:
            return User(
                id=user_id,
                email=f"{user_id}@company.com",
                name=user_id,
                department_id="dept-test-1",
                department="Test Engineering",
                weekly_spend=spend,
            )

        generator = MockDataGenerator(random.Random(5), now=FIXED_NOW)
        users = [user("light", 150), user("heavy", 250), user("very-heavy", 450)]
        alerts = generator.generate_alerts([], users, now=FIXED_NOW)
        severities = {a.user_id: a.severity for a in alerts}
        assert severities == {"heavy": AlertSeverity.MEDIUM, "very-heavy": AlertSeverity.HIGH}
        assert all(a.type == AlertType.USAGE for a in alerts)

    def test_alerts_newest_first(self, seeded_store: MockDataStore) -> None:
        timestamps = [a.timestamp for a in seeded_store.get_alerts()]
        assert timestamps == sorted(timestamps, reverse=True)
        assert all(t <= datetime.now(UTC) for t in timestamps)


class TestDistributions:
    """Shape of a large seeded dataset, checked with tolerance bands."""

    @staticmethod
    def _profile(spend: float) -> int:
        for index, (_, (spend_lo, spend_hi), _) in enumerate(USAGE_PROFILES):
            if spend_lo <= spend < spend_hi or spend == spend_hi == 0:
                return index
        raise AssertionError(f"spend {spend} matches no usage profile")

    def test_usage_mixture(self, seeded_store: MockDataStore) -> None:
        users = seeded_store.get_users()
        assert len(users) >= 500
        counts = Counter(self._profile(u.weekly_spend) for u in users)
        shares = [counts[i] / len(users) for i in range(len(USAGE_PROFILES))]
        assert shares == [
            pytest.approx(0.1, abs=0.05),
            pytest.approx(0.2, abs=0.06),
            pytest.approx(0.5, abs=0.06),
            pytest.approx(0.2, abs=0.06),
        ]

    def test_requests_match_spend_profile(self, seeded_store: MockDataStore) -> None:
        for user in seeded_store.get_users():
            _, _, (req_lo, req_hi) = USAGE_PROFILES[self._profile(user.weekly_spend)]
            assert req_lo <= user.request_count <= req_hi

    def test_profile_ranges(self) -> None:
        uppers = [upper for upper, _, _ in USAGE_PROFILES]
        assert uppers == [0.1, 0.3, 0.8, 1.0]
        assert [spend for _, spend, _ in USAGE_PROFILES] == [
            (0.0, 0.0),
            (1.0, 20.0),
            (20.0, 100.0),
            (100.0, 500.0),
        ]
        assert [requests for _, _, requests in USAGE_PROFILES] == [
            (0, 0),
            (1, 50),
            (50, 300),
            (300, 1500),
        ]

    def test_session_status_split(self, seeded_store: MockDataStore) -> None:
        sessions = seeded_store.get_sessions()
        assert len(sessions) >= 10_000
        statuses = Counter(s.status for s in sessions)
        assert statuses[SessionStatus.ERROR] / len(sessions) == pytest.approx(0.05, abs=0.01)
        assert statuses[SessionStatus.TIMEOUT] / len(sessions) == pytest.approx(0.03, abs=0.01)

    def test_daily_share_of_remaining_spend(self, seeded_store: MockDataStore) -> None:
        for user in seeded_store.get_users():
            if user.weekly_spend == 0:
                continue
            remaining = user.weekly_spend
            for day in user.trend_data[:-1]:
                assert remaining * 0.05 - 1e-9 <= day.cost <= remaining * 0.4 + 1e-9
                remaining = max(0.0, remaining - day.cost)
            assert user.trend_data[-1].cost == pytest.approx(remaining)
