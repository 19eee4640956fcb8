"""Office documents, spreadsheets and presentations through headless LibreOffice."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Mapping

from ..models import SUCCESS_MARKER
from .base import ToolError, find_executable, run_tool, timeout_from


NAME = "libreoffice"
MAX_PARALLEL = 1

PROPERTIES = {
    "from": {
        "document": ["doc", "docx", "odt", "rtf", "txt", "html", "xml"],
        "spreadsheet": ["xls", "xlsx", "ods", "csv", "tsv"],
        "presentation": ["ppt", "pptx", "odp"],
    },
    "to": {
        "document": ["pdf", "docx", "odt", "rtf", "txt", "html"],
        "spreadsheet": ["pdf", "xlsx", "ods", "csv", "html"],
        "presentation": ["pdf", "pptx", "odp", "html"],
    },
}


def _executable() -> str | None:
    return find_executable("soffice", "libreoffice")


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
        raise ToolError("LibreOffice (soffice) is not installed")
    target = Path(output_path)
    stem = Path(input_path).stem
    # soffice names its output after the input; convert into a scratch dir and move it.
    with tempfile.TemporaryDirectory(dir=target.parent, prefix=".soffice-") as scratch:
        profile = Path(scratch) / "profile"
        run_tool(
            [
                executable,
                f"-env:UserInstallation={profile.as_uri()}",
                "--headless",
                "--convert-to",
                output_format,
                "--outdir",
                scratch,
                input_path,
            ],
            timeout_s=timeout_from(options),
        )
        generated = Path(scratch) / f"{stem}.{output_format}"
        if not generated.exists():
            raise ToolError(f"LibreOffice did not generate expected output file: {generated.name}")
        os.replace(generated, target)
    return SUCCESS_MARKER
