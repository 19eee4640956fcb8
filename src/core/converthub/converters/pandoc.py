"""Markup and document conversion through pandoc."""

from __future__ import annotations

from typing import Any, Mapping

from ..models import SUCCESS_MARKER
from .base import ToolError, find_executable, run_tool, timeout_from


NAME = "pandoc"

PROPERTIES = {
    "from": {
        "markup": ["markdown", "html", "latex", "rst", "textile", "org", "mediawiki", "asciidoc"],
        "document": ["docx", "odt", "epub", "rtf"],
        "data": ["json", "csv", "ipynb"],
    },
    "to": {
        "markup": ["markdown", "html", "latex", "rst", "textile", "org", "mediawiki", "asciidoc"],
        "document": ["docx", "odt", "epub", "rtf", "pdf", "txt"],
        "data": ["json", "ipynb"],
    },
}

# canonical tokens that pandoc spells differently
READERS = {"txt": "plain"}
WRITERS = {"txt": "plain"}


def _executable() -> str | None:
    return find_executable("pandoc")


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
        raise ToolError("pandoc is not installed")
    args = [
        executable,
        "--from",
        READERS.get(input_format, input_format),
        input_path,
        "--output",
        output_path,
    ]
    if output_format != "pdf":
        args[4:4] = ["--to", WRITERS.get(output_format, output_format)]
    if options.get("standalone", True):
        args.append("--standalone")
    pdf_engine = options.get("pdf_engine")
    if output_format == "pdf" and pdf_engine:
        args.append(f"--pdf-engine={pdf_engine}")
    run_tool(args, timeout_s=timeout_from(options))
    return SUCCESS_MARKER
