"""In-process conversion of office, PDF and data files to Markdown."""

from __future__ import annotations

import importlib.util
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

from ..models import SUCCESS_MARKER
from ..utils import atomic_write


NAME = "markitdown"

PROPERTIES = {
    "from": {
        "document": ["docx", "pdf", "html", "epub", "txt"],
        "spreadsheet": ["xlsx", "xls", "csv"],
        "presentation": ["pptx"],
        "data": ["json", "xml", "ipynb"],
        "email": ["msg"],
    },
    "to": {
        "markup": ["markdown"],
    },
}


def is_available() -> bool:
    return importlib.util.find_spec("markitdown") is not None


@lru_cache(maxsize=1)
def _converter():  # type: ignore[no-untyped-def]
    try:
        from markitdown import MarkItDown
    except ModuleNotFoundError as exc:  # pragma: no cover - import guard
        raise RuntimeError("markitdown dependency is required for the markitdown converter") from exc
    return MarkItDown()


def normalize_markdown(markdown: str) -> str:
    lines = [line.rstrip() for line in markdown.splitlines()]
    return "\n".join(lines) + ("\n" if lines else "")


def convert(
    input_path: str,
    input_format: str,
    output_format: str,
    output_path: str,
    options: Mapping[str, Any],
) -> str:
    result = _converter().convert(input_path)
    if isinstance(result, str):
        markdown = result
    elif hasattr(result, "text_content"):
        markdown = str(result.text_content)
    else:
        return "Unsupported markitdown return type"
    atomic_write(Path(output_path), normalize_markdown(markdown))
    return SUCCESS_MARKER
