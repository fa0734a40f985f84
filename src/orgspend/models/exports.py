"""Export payload models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class ExportFormat(StrEnum):
    CSV = "csv"
    JSON = "json"


class ExportResult(BaseModel):
    """Rendered export; ``size`` is the length of ``data`` in characters."""

    data: str
    format: ExportFormat
    filename: str
    size: int
