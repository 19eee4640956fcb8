"""ASGI entry point: ``uvicorn main:app`` with ``src`` on the import path."""

from fastapi import FastAPI, HTTPException

from api.app import create_app
from core.settings import ENV_PREFIX

try:
    app = create_app()
except RuntimeError as exc:
    reason = str(exc)
    app = FastAPI(title="ConvertHub (disabled)", version="0.1.0")

    @app.get("/{path:path}")
    async def api_disabled(path: str) -> dict[str, str]:
        raise HTTPException(
            status_code=503,
            detail=f"{reason} Set runtime.enable_local_api = true or {ENV_PREFIX}ENABLE_LOCAL_API=1.",
        )
