"""Export service — CSV/JSON serialization of dataset records."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TypeAlias

from orgspend.models.exports import ExportFormat, ExportResult

if TYPE_CHECKING:
    from orgspend.data.store import MockDataStore
    from orgspend.models.filters import ExportFilters

Record: TypeAlias = dict[str, Any]

_USER_DETAIL_FIELDS = ("trend_data", "agent_breakdown", "recent_sessions")


class ExportService:
    """Builds export records from the store and renders them."""

    def __init__(
        self,
        store: MockDataStore,
        *,
        prefix: str = "orgspend",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._prefix = prefix
        self._clock = clock or (lambda: datetime.now(UTC))

    def build_records(self, filters: ExportFilters) -> list[Record]:
        """Tagged records for the selected entities, or a single summary."""
        store = self._store
        records: list[Record] = []

        if filters.departments:
            wanted = set(filters.departments)
            for dept in store.get_departments():
                if dept.id in wanted:
                    records.append({"type": "department", **dept.model_dump(mode="json")})

        if filters.users:
            wanted = set(filters.users)
            for user in store.get_users():
                if user.id not in wanted:
                    continue
                row = user.model_dump(mode="json")
                for name in _USER_DETAIL_FIELDS:
                    row[name] = json.dumps(row[name]) if filters.include_details else None
                records.append({"type": "user", **row})

        if filters.agents:
            wanted = set(filters.agents)
            for agent in store.get_agents():
                if agent.id in wanted:
                    row = agent.model_dump(mode="json")
                    row["agent_type"] = row.pop("type")
                    records.append({"type": "agent", **row})

        if not filters.has_entities:
            records.append(
                {
                    "type": "summary",
                    "export_date": self._clock().isoformat(),
                    "time_range": {
                        "start": filters.time_range.start.isoformat(),
                        "end": filters.time_range.end.isoformat(),
                    },
                    "total_departments": len(store.get_departments()),
                    "total_users": len(store.get_users()),
                    "total_agents": len(store.get_agents()),
                    "total_sessions": len(store.get_sessions()),
                }
            )
        return records

    def render(self, records: list[Record], fmt: ExportFormat) -> ExportResult:
        match fmt:
            case ExportFormat.JSON:
                data = json.dumps(records, indent=2, default=str)
            case _:
                data = to_csv(records)
        stamp = int(self._clock().timestamp() * 1000)
        return ExportResult(
            data=data,
            format=fmt,
            filename=f"{self._prefix}-export-{stamp}.{fmt.value}",
            size=len(data),
        )

    def export(self, filters: ExportFilters, fmt: ExportFormat = ExportFormat.CSV) -> ExportResult:
        return self.render(self.build_records(filters), fmt)


def _cell(value: Any) -> str:
    match value:
        case None:
            return ""
        case bool():
            return "true" if value else "false"
        case dict() | list():
            return json.dumps(value)
        case datetime():
            return value.isoformat()
        case _:
            return str(value)


def to_csv(records: list[Record]) -> str:
    """Header is the union of record keys in first-seen order.

    Missing and ``None`` values become empty cells; nested values are JSON.
    """
    if not records:
        return ""
    headers: list[str] = []
    seen: set[str] = set()
    for record in records:
        for key in record:
            if key not in seen:
                seen.add(key)
                headers.append(key)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for record in records:
        writer.writerow([_cell(record.get(key)) for key in headers])
    return buffer.getvalue().rstrip("\n")
