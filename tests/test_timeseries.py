"""Tests for time bucketing and trend summaries."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from orgspend.models import Granularity, Session, TimeRange, TimeSeriesPoint
from orgspend.services.timeseries import aggregate_sessions, bucket_start, filter_points, summarize


def _session(session_id: str, timestamp: datetime, user_id: str, cost: float) -> Session:
    return Session(
        id=session_id,
        timestamp=timestamp,
        user_id=user_id,
        agent_id="agent-1",
        agent_name="Agent",
        cost=cost,
        token_count=100,
        duration=5,
    )


class TestBucketStart:
    def test_hourly_and_daily(self) -> None:
        ts = datetime(2024, 1, 10, 13, 45, 12, tzinfo=UTC)
        assert bucket_start(ts, Granularity.HOURLY) == datetime(2024, 1, 10, 13, tzinfo=UTC)
        assert bucket_start(ts, Granularity.DAILY) == datetime(2024, 1, 10, tzinfo=UTC)

    def test_weekly_starts_monday(self) -> None:
        # 2024-01-14 is a Sunday.
        ts = datetime(2024, 1, 14, 23, 59, tzinfo=UTC)
        assert bucket_start(ts, Granularity.WEEKLY) == datetime(2024, 1, 8, tzinfo=UTC)


class TestAggregate:
    def test_groups_and_counts_distinct_users(self) -> None:
        sessions = [
            _session("s1", datetime(2024, 1, 2, 9, tzinfo=UTC), "u1", 1.0),
            _session("s2", datetime(2024, 1, 2, 17, tzinfo=UTC), "u1", 2.0),
            _session("s3", datetime(2024, 1, 1, 8, tzinfo=UTC), "u2", 0.5),
        ]
        points = aggregate_sessions(sessions)
        assert [p.timestamp.day for p in points] == [1, 2]
        assert points[1].cost == pytest.approx(3.0)
        assert points[1].request_count == 2
        assert points[1].user_count == 1

    def test_hourly_buckets(self) -> None:
        sessions = [
            _session("s1", datetime(2024, 1, 2, 9, 5, tzinfo=UTC), "u1", 1.0),
            _session("s2", datetime(2024, 1, 2, 9, 55, tzinfo=UTC), "u2", 1.0),
            _session("s3", datetime(2024, 1, 2, 10, 0, tzinfo=UTC), "u1", 1.0),
        ]
        points = aggregate_sessions(sessions, Granularity.HOURLY)
        assert [(p.timestamp.hour, p.request_count, p.user_count) for p in points] == [
            (9, 2, 2),
            (10, 1, 1),
        ]

    def test_no_sessions(self) -> None:
        assert aggregate_sessions([]) == []


class TestSummarize:
    def test_totals_and_peak(self) -> None:
        points = [
            TimeSeriesPoint(timestamp=datetime(2024, 1, 1, tzinfo=UTC), cost=2, request_count=4),
            TimeSeriesPoint(timestamp=datetime(2024, 1, 2, tzinfo=UTC), cost=6, request_count=4),
        ]
        summary = summarize(points)
        assert summary.total_cost == 8
        assert summary.total_requests == 8
        assert summary.average_cost_per_request == 1
        assert summary.peak_usage_date == datetime(2024, 1, 2, tzinfo=UTC)

    def test_empty(self) -> None:
        summary = summarize([])
        assert summary.total_cost == 0
        assert summary.average_cost_per_request == 0
        assert summary.peak_usage_date is None

    def test_zero_requests(self) -> None:
        point = TimeSeriesPoint(timestamp=datetime(2024, 1, 1, tzinfo=UTC), cost=3)
        assert summarize([point]).average_cost_per_request == 0


def test_filter_points_inclusive_bounds() -> None:
    points = [
        TimeSeriesPoint(timestamp=datetime(2024, 1, day, tzinfo=UTC), cost=day)
        for day in range(1, 6)
    ]
    window = TimeRange(
        start=datetime(2024, 1, 2, tzinfo=UTC), end=datetime(2024, 1, 4, tzinfo=UTC)
    )
    assert [p.cost for p in filter_points(points, window)] == [2, 3, 4]
