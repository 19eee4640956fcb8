from __future__ import annotations

from types import ModuleType

from . import archive, ffmpeg, imagemagick, libreoffice, markitdown, pandoc
from ..config import AppConfig
from ..registry import ConverterDescriptor, ConverterRegistry, flatten_formats, order_descriptors
from .base import ToolError, run_tool

# Table order is the default selection priority.
_CONVERTER_MODULES: tuple[ModuleType, ...] = (
    libreoffice,
    pandoc,
    markitdown,
    imagemagick,
    ffmpeg,
    archive,
)


def _describe(module: ModuleType) -> ConverterDescriptor:
    return ConverterDescriptor(
        name=module.NAME,
        inputs=flatten_formats(module.PROPERTIES["from"]),
        outputs=flatten_formats(module.PROPERTIES["to"]),
        convert=module.convert,
        max_parallel=getattr(module, "MAX_PARALLEL", None),
        description=(module.__doc__ or "").strip(),
        is_available=module.is_available,
    )


def default_descriptors() -> list[ConverterDescriptor]:
    return [_describe(module) for module in _CONVERTER_MODULES]


def build_registry(config: AppConfig) -> ConverterRegistry:
    descriptors = order_descriptors(
        default_descriptors(),
        enabled=config.converters.enabled,
        priority=config.converters.priority,
    )
    if config.converters.require_available:
        descriptors = [descriptor for descriptor in descriptors if descriptor.is_available()]
    return ConverterRegistry(descriptors)


__all__ = [
    "ToolError",
    "build_registry",
    "default_descriptors",
    "run_tool",
]
