"""Typer CLI for orgspend — query the mock usage dataset from a shell."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, Any, TypeAlias

import typer
from pydantic import BaseModel
from result import Err, Result

from orgspend.config import Config
from orgspend.models.errors import ApiError
from orgspend.models.exports import ExportFormat
from orgspend.models.filters import ExportFilters, Granularity, TimeRange, TrendFilters
from orgspend.services.container import ServiceContainer
from orgspend.services.data_service import DataService

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="orgspend",
    help="Organization AI usage and spend analytics over a generated dataset.",
    no_args_is_help=True,
)

SeedOption = Annotated[
    int | None, typer.Option("--seed", help="Seed for a reproducible dataset")
]
DaysOption = Annotated[int, typer.Option("--days", min=1, help="Size of the time window in days")]
LatencyOption = Annotated[
    bool, typer.Option("--latency/--no-latency", help="Simulate network latency")
]

Query: TypeAlias = Callable[[DataService], Awaitable[Result[Any, ApiError]]]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Organization AI usage and spend analytics."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _config(seed: int | None, latency: bool) -> Config:
    if latency:
        return Config(seed=seed)
    return Config(seed=seed, latency_min_ms=0, latency_max_ms=0)


async def _query(config: Config, query: Query) -> Result[Any, ApiError]:
    container = ServiceContainer.create(config)
    try:
        return await query(container.data_service)
    finally:
        await container.close()


def _unwrap(result: Result[Any, ApiError]) -> Any:
    if isinstance(result, Err):
        typer.echo(f"Error: {result.err_value}", err=True)
        raise typer.Exit(code=1)
    return result.ok_value


def _echo(value: BaseModel) -> None:
    typer.echo(value.model_dump_json(indent=2))


@app.command()
def summary(seed: SeedOption = None, days: DaysOption = 7, latency: LatencyOption = False) -> None:
    """Department spend against budget."""
    window = TimeRange.last_days(days)
    result = asyncio.run(
        _query(_config(seed, latency), lambda s: s.get_department_summary(window))
    )
    _echo(_unwrap(result))


@app.command()
def leaderboard(
    seed: SeedOption = None,
    days: DaysOption = 7,
    limit: Annotated[int, typer.Option("--limit", min=1, help="Number of agents")] = 10,
    models: Annotated[bool, typer.Option("--models", help="Rank LLM models instead")] = False,
    latency: LatencyOption = False,
) -> None:
    """Agents (or LLM models) ranked by weekly spend."""
    window = TimeRange.last_days(days)

    async def query(service: DataService) -> Result[Any, ApiError]:
        if models:
            return await service.get_model_leaderboard(window)
        return await service.get_agent_leaderboard(window, limit=limit)

    _echo(_unwrap(asyncio.run(_query(_config(seed, latency), query))))


@app.command()
def trends(
    seed: SeedOption = None,
    days: DaysOption = 7,
    granularity: Annotated[
        Granularity, typer.Option("--granularity", help="Bucket size")
    ] = Granularity.DAILY,
    department: Annotated[
        list[str] | None, typer.Option("--department", help="Department id (repeatable)")
    ] = None,
    user: Annotated[list[str] | None, typer.Option("--user", help="User id (repeatable)")] = None,
    agent: Annotated[
        list[str] | None, typer.Option("--agent", help="Agent id (repeatable)")
    ] = None,
    latency: LatencyOption = False,
) -> None:
    """Usage over time with totals and the peak bucket."""
    window = TimeRange.last_days(days, granularity=granularity)
    filters = TrendFilters(
        time_range=window,
        granularity=granularity,
        department_ids=department or [],
        user_ids=user or [],
        agent_ids=agent or [],
    )
    result = asyncio.run(_query(_config(seed, latency), lambda s: s.get_usage_trends(filters)))
    _echo(_unwrap(result))


@app.command()
def export(
    seed: SeedOption = None,
    days: DaysOption = 7,
    fmt: Annotated[
        ExportFormat, typer.Option("--format", help="Output format")
    ] = ExportFormat.CSV,
    department: Annotated[
        list[str] | None, typer.Option("--department", help="Department id (repeatable)")
    ] = None,
    user: Annotated[list[str] | None, typer.Option("--user", help="User id (repeatable)")] = None,
    agent: Annotated[
        list[str] | None, typer.Option("--agent", help="Agent id (repeatable)")
    ] = None,
    details: Annotated[bool, typer.Option("--details", help="Include nested user data")] = False,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to this file")
    ] = None,
    latency: LatencyOption = False,
) -> None:
    """Export departments, users and agents as CSV or JSON."""
    filters = ExportFilters(
        time_range=TimeRange.last_days(days),
        departments=department or [],
        users=user or [],
        agents=agent or [],
        include_details=details,
    )
    result = _unwrap(
        asyncio.run(_query(_config(seed, latency), lambda s: s.export_data(filters, fmt)))
    )
    if output is None:
        typer.echo(result.data)
        return
    output.write_text(result.data)
    logger.info("Wrote %s export (%d characters) to %s", result.format, result.size, output)
    typer.echo(f"Wrote {output}")


@app.command()
def health(seed: SeedOption = None, days: DaysOption = 7, latency: LatencyOption = False) -> None:
    """Service status and dataset statistics."""
    _echo(_unwrap(asyncio.run(_query(_config(seed, latency), lambda s: s.health_check()))))
