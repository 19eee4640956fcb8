"""Repacking between zip, tar and gzipped tar archives."""

from __future__ import annotations

import os
import shutil
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Any, Mapping

from ..models import SUCCESS_MARKER


NAME = "archive"

PROPERTIES = {
    "from": {"archive": ["zip", "tar", "tgz"]},
    "to": {"archive": ["zip", "tar", "tgz"]},
}

# shutil.make_archive format names
ARCHIVE_FORMATS = {"zip": "zip", "tar": "tar", "tgz": "gztar"}


def is_available() -> bool:
    return True


def _extract(source: Path, fmt: str, destination: Path) -> None:
    if fmt == "zip":
        with zipfile.ZipFile(source) as archive:
            archive.extractall(destination)
        return
    mode = "r:gz" if fmt == "tgz" else "r:"
    with tarfile.open(source, mode) as archive:
        archive.extractall(destination, filter="data")


def convert(
    input_path: str,
    input_format: str,
    output_format: str,
    output_path: str,
    options: Mapping[str, Any],
) -> str:
    if input_format not in ARCHIVE_FORMATS or output_format not in ARCHIVE_FORMATS:
        return f"Unsupported archive conversion: {input_format} -> {output_format}"
    target = Path(output_path)
    with tempfile.TemporaryDirectory(dir=target.parent, prefix=".archive-") as scratch:
        contents = Path(scratch) / "contents"
        contents.mkdir()
        try:
            _extract(Path(input_path), input_format, contents)
        except (zipfile.BadZipFile, tarfile.TarError) as exc:
            return f"Invalid {input_format} archive: {exc}"
        built = shutil.make_archive(
            str(Path(scratch) / "repacked"),
            ARCHIVE_FORMATS[output_format],
            root_dir=contents,
        )
        os.replace(built, target)
    return SUCCESS_MARKER
