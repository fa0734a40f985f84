"""The closure of entities built by one generation pass."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from orgspend.models.entities import (
    Agent,
    Alert,
    Department,
    LLMModel,
    Session,
    TimeSeriesPoint,
    User,
)


@dataclass(frozen=True, slots=True)
class Dataset:
    """Immutable snapshot; regeneration always builds a new one."""

    departments: tuple[Department, ...]
    agents: tuple[Agent, ...]
    models: tuple[LLMModel, ...]
    users: tuple[User, ...]
    sessions: tuple[Session, ...]
    time_series: tuple[TimeSeriesPoint, ...]
    alerts: tuple[Alert, ...]
    generated_at: datetime
