"""Time bucketing shared by dataset generation and trend queries."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from orgspend.models.analytics import TrendSummary
from orgspend.models.entities import Session, TimeSeriesPoint
from orgspend.models.filters import Granularity, TimeRange


def bucket_start(timestamp: datetime, granularity: Granularity = Granularity.DAILY) -> datetime:
    """Start of the UTC bucket containing ``timestamp``.

    Weekly buckets start on Monday.
    """
    ts = timestamp.astimezone(UTC)
    match granularity:
        case Granularity.HOURLY:
            return ts.replace(minute=0, second=0, microsecond=0)
        case Granularity.WEEKLY:
            day = ts.replace(hour=0, minute=0, second=0, microsecond=0)
            return day - timedelta(days=day.weekday())
        case _:
            return ts.replace(hour=0, minute=0, second=0, microsecond=0)


def aggregate_sessions(
    sessions: Iterable[Session],
    granularity: Granularity = Granularity.DAILY,
) -> list[TimeSeriesPoint]:
    """Sum cost, count requests and distinct users per bucket, oldest first."""
    costs: dict[datetime, float] = {}
    requests: dict[datetime, int] = {}
    users: dict[datetime, set[str]] = {}
    for session in sessions:
        key = bucket_start(session.timestamp, granularity)
        costs[key] = costs.get(key, 0.0) + session.cost
        requests[key] = requests.get(key, 0) + 1
        users.setdefault(key, set()).add(session.user_id)

    return [
        TimeSeriesPoint(
            timestamp=key,
            cost=costs[key],
            request_count=requests[key],
            user_count=len(users[key]),
        )
        for key in sorted(costs)
    ]


def filter_points(
    points: Iterable[TimeSeriesPoint], time_range: TimeRange
) -> list[TimeSeriesPoint]:
    return [p for p in points if time_range.contains(p.timestamp)]


def summarize(points: list[TimeSeriesPoint]) -> TrendSummary:
    """Totals over ``points``; the peak is the highest-cost bucket."""
    total_cost = sum(p.cost for p in points)
    total_requests = sum(p.request_count for p in points)
    peak = max(points, key=lambda p: p.cost) if points else None
    return TrendSummary(
        total_cost=total_cost,
        total_requests=total_requests,
        average_cost_per_request=total_cost / total_requests if total_requests > 0 else 0.0,
        peak_usage_date=peak.timestamp if peak else None,
    )
