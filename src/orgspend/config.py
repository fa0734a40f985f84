"""Configuration for orgspend."""

from dataclasses import dataclass

ENVIRONMENT_OPTIONS: tuple[str, ...] = ("Production", "UAT", "Evals", "All")


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    api_base_url: str = "http://localhost:8000/api/"
    default_environment: str = "UAT"
    default_limit: int = 100
    default_offset: int = 0
    default_days: int = 7
    request_timeout_s: float = 30.0
    latency_min_ms: int = 50
    latency_max_ms: int = 250
    rate_limit_requests: int = 100
    rate_limit_window_s: float = 60.0
    error_rate: float = 0.1
    error_simulation: bool = False
    seed: int | None = None
    export_prefix: str = "orgspend"

    @property
    def simulates_latency(self) -> bool:
        return self.latency_max_ms > 0
