from __future__ import annotations

from fastapi import FastAPI

from core.converthub.config import AppConfig, load_config
from core.converthub.service import Services, build_services
from core.settings import Settings, get_settings

from .routers import formats, health, jobs


def create_app(
    config: AppConfig | None = None,
    *,
    services: Services | None = None,
    require_enabled: bool = True,
) -> FastAPI:
    if services is not None:
        config = services.config
    elif config is None:
        config = _prepare_config(get_settings())
    if require_enabled and not config.runtime.enable_local_api:
        raise RuntimeError("Local API is disabled. Enable it via configuration or environment.")

    app = FastAPI(title="ConvertHub", version="0.1.0")
    app.state.config = config
    app.state.services = services if services is not None else build_services(config)

    app.include_router(health.router)
    app.include_router(formats.router)
    app.include_router(jobs.router)

    @app.on_event("shutdown")
    async def _shutdown() -> None:  # pragma: no cover - FastAPI lifecycle
        app.state.services.shutdown()

    return app


def _prepare_config(settings: Settings) -> AppConfig:
    config = load_config(settings.config_path)
    if settings.enable_local_api is not None:
        config.runtime.enable_local_api = settings.enable_local_api
    if settings.database_url:
        config.runtime.database_url = settings.database_url
    return config


__all__ = ["create_app"]
