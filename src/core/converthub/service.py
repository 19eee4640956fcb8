from __future__ import annotations

from dataclasses import dataclass

import httpx

from .artifacts import ArtifactResolver
from .config import AppConfig
from .converters import build_registry
from .dispatcher import ConverterDispatcher
from .jobs import JobManager
from .registry import ConverterRegistry
from .store import ConversionStore


@dataclass(slots=True)
class Services:
    config: AppConfig
    registry: ConverterRegistry
    dispatcher: ConverterDispatcher
    store: ConversionStore
    jobs: JobManager
    artifacts: ArtifactResolver

    def shutdown(self) -> None:
        self.jobs.shutdown()
        self.store.dispose()


def build_services(
    config: AppConfig,
    *,
    registry: ConverterRegistry | None = None,
    http_client: httpx.Client | None = None,
) -> Services:
    """Wire the registry, dispatcher, store and job manager for one process."""
    registry = registry if registry is not None else build_registry(config)
    dispatcher = ConverterDispatcher(registry, timeout_s=config.runtime.convert_timeout_s)
    store = ConversionStore(config.runtime.database_url)
    store.initialize()
    return Services(
        config=config,
        registry=registry,
        dispatcher=dispatcher,
        store=store,
        jobs=JobManager(config, dispatcher, store, http_client=http_client),
        artifacts=ArtifactResolver(config, store),
    )


__all__ = ["Services", "build_services"]
