"""FastAPI dependency providers for application services."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from core.converthub.artifacts import ArtifactResolver
from core.converthub.auth import authenticate
from core.converthub.config import AppConfig
from core.converthub.jobs import JobManager
from core.converthub.registry import ConverterRegistry
from core.converthub.service import Services
from core.converthub.store import StoreUnavailableError

_basic = HTTPBasic(auto_error=False)

UNAUTHORIZED_HEADERS = {"WWW-Authenticate": 'Basic realm="converthub"'}


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="SERVICES_UNAVAILABLE")
    return services


def get_config(services: Services = Depends(get_services)) -> AppConfig:
    return services.config


def get_registry(services: Services = Depends(get_services)) -> ConverterRegistry:
    return services.registry


def get_job_manager(services: Services = Depends(get_services)) -> JobManager:
    return services.jobs


def get_artifacts(services: Services = Depends(get_services)) -> ArtifactResolver:
    return services.artifacts


def get_owner(
    credentials: HTTPBasicCredentials | None = Depends(_basic),
    services: Services = Depends(get_services),
) -> str:
    """Resolve Basic credentials to the owner id every job is scoped by."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Authentication required", headers=UNAUTHORIZED_HEADERS)
    try:
        owner = authenticate(services.store, credentials.username, credentials.password)
    except StoreUnavailableError as exc:
        raise HTTPException(status_code=500, detail="Authentication service unavailable") from exc
    if owner is None:
        raise HTTPException(status_code=401, detail="Invalid credentials", headers=UNAUTHORIZED_HEADERS)
    return owner


__all__ = [
    "get_artifacts",
    "get_config",
    "get_job_manager",
    "get_owner",
    "get_registry",
    "get_services",
]
