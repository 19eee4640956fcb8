"""Audio and video transcoding through ffmpeg."""

from __future__ import annotations

from typing import Any, Mapping

from ..models import SUCCESS_MARKER
from .base import ToolError, find_executable, run_tool, timeout_from


NAME = "ffmpeg"

PROPERTIES = {
    "from": {
        "video": ["mp4", "mkv", "webm", "avi", "mov", "flv", "wmv", "mpeg", "3gp"],
        "audio": ["mp3", "wav", "flac", "aac", "ogg", "opus", "m4a", "wma"],
        "image": ["gif"],
    },
    "to": {
        "video": ["mp4", "mkv", "webm", "avi", "mov", "flv", "mpeg", "gif"],
        "audio": ["mp3", "wav", "flac", "aac", "ogg", "opus", "m4a"],
    },
}


def _executable() -> str | None:
    return find_executable("ffmpeg")


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
        raise ToolError("ffmpeg is not installed")
    args = [executable, "-y", "-hide_banner", "-loglevel", "error", "-i", input_path, output_path]
    run_tool(args, timeout_s=timeout_from(options))
    return SUCCESS_MARKER
