"""Raster image conversion through ImageMagick."""

from __future__ import annotations

from typing import Any, Mapping

from ..models import SUCCESS_MARKER
from .base import ToolError, find_executable, run_tool, timeout_from


NAME = "imagemagick"

PROPERTIES = {
    "from": {
        "image": ["png", "jpeg", "gif", "bmp", "tiff", "webp", "heic", "avif", "ico", "psd", "svg", "tga"],
        "document": ["pdf"],
    },
    "to": {
        "image": ["png", "jpeg", "gif", "bmp", "tiff", "webp", "avif", "ico"],
        "document": ["pdf"],
    },
}


def _executable() -> str | None:
    return find_executable("magick", "convert")


def is_available() -> bool:
    return _executable() is not None


def convert(
    input_path: str,
    input_format: str,
    output_format: str,
    output_path: str,
    options: Mapping[str, Any],
) -> str:
    executable = _executable()
    if executable is None:
        raise ToolError("ImageMagick is not installed")
    args = [executable, f"{input_format}:{input_path}"]
    quality = options.get("quality")
    if quality is not None:
        args.extend(["-quality", str(int(quality))])
    args.append(f"{output_format}:{output_path}")
    run_tool(args, timeout_s=timeout_from(options))
    return SUCCESS_MARKER
