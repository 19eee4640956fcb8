from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_owner, get_registry
from core.converthub.registry import ConverterRegistry, UnsupportedFormatError

router = APIRouter(prefix="/api", tags=["formats"], dependencies=[Depends(get_owner)])


@router.get("/formats", summary="List converters and the formats they handle")
def list_formats(registry: ConverterRegistry = Depends(get_registry)) -> dict[str, Any]:
    return registry.capability_matrix()


@router.get("/formats/{from_ext}", summary="List possible targets for a source format")
def formats_for(from_ext: str, registry: ConverterRegistry = Depends(get_registry)) -> dict[str, Any]:
    try:
        return registry.targets_for(from_ext)
    except UnsupportedFormatError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


__all__ = ["router"]
