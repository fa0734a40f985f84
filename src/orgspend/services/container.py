"""Service container with DI wiring."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from orgspend.api.client import ApiClient
from orgspend.api.service import AnalyticsApiService
from orgspend.data.generator import MockDataGenerator
from orgspend.data.random_source import seeded
from orgspend.data.store import MockDataStore
from orgspend.services.data_service import DataService
from orgspend.services.export_service import ExportService
from orgspend.services.resilience import RequestSimulator

if TYPE_CHECKING:
    import httpx

    from orgspend.config import Config


@dataclass
class ServiceContainer:
    """Holds all application services. Built once at startup, immutable."""

    store: MockDataStore
    simulator: RequestSimulator
    data_service: DataService
    api_client: ApiClient
    analytics_api: AnalyticsApiService

    @classmethod
    def create(
        cls,
        config: Config,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ServiceContainer:
        """Factory that wires all dependencies from ``config``."""
        store = MockDataStore(MockDataGenerator(seeded(config.seed)))
        simulator = RequestSimulator(
            latency_min_ms=config.latency_min_ms,
            latency_max_ms=config.latency_max_ms,
            rate_limit_requests=config.rate_limit_requests,
            rate_limit_window_s=config.rate_limit_window_s,
            error_rate=config.error_rate,
            error_simulation=config.error_simulation,
            rng=random.Random(config.seed),
        )
        data_service = DataService(
            store,
            simulator,
            exporter=ExportService(store, prefix=config.export_prefix),
        )
        api_client = ApiClient(
            config.api_base_url, timeout=config.request_timeout_s, transport=transport
        )
        analytics_api = AnalyticsApiService(
            api_client,
            default_environment=config.default_environment,
            default_days=config.default_days,
            default_limit=config.default_limit,
            default_offset=config.default_offset,
        )
        return cls(
            store=store,
            simulator=simulator,
            data_service=data_service,
            api_client=api_client,
            analytics_api=analytics_api,
        )

    async def close(self) -> None:
        """Shut down all services."""
        await self.api_client.aclose()
