from __future__ import annotations

import os
import re
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path

from .config import AppConfig


ILLEGAL_RE = re.compile(r'[/?<>\\:*|"]')
CONTROL_RE = re.compile(r"[\x00-\x1f\x80-\x9f]")
RESERVED_RE = re.compile(r"^\.+$")
WINDOWS_RESERVED_RE = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE)
WINDOWS_TRAILING_RE = re.compile(r"[. ]+$")
MAX_NAME_BYTES = 255


@dataclass(slots=True)
class JobPaths:
    owner: str
    job_id: int
    uploads_dir: Path
    output_dir: Path
    log_file: Path


def sanitize_filename(value: str) -> str:
    """Strip characters that are unsafe in a file name; may return an empty string."""
    name = ILLEGAL_RE.sub("", value or "")
    name = CONTROL_RE.sub("", name)
    name = RESERVED_RE.sub("", name)
    name = WINDOWS_RESERVED_RE.sub("", name)
    name = WINDOWS_TRAILING_RE.sub("", name)
    encoded = name.encode("utf-8")
    if len(encoded) > MAX_NAME_BYTES:
        name = encoded[:MAX_NAME_BYTES].decode("utf-8", errors="ignore")
    return name


def replace_last(value: str, old: str, new: str) -> str:
    if not old:
        return f"{value}.{new}"
    head, found, tail = value.rpartition(old)
    if not found:
        return value
    return f"{head}{new}{tail}"


def output_file_name(file_name: str, original_extension: str, new_extension: str, *, unique: bool = True) -> str:
    base = replace_last(file_name, original_extension, new_extension)
    if not unique:
        return base
    return f"{uuid.uuid4().hex}_{base}"


def job_paths(config: AppConfig, owner: str, job_id: int) -> JobPaths:
    uploads = config.runtime.uploads_dir / owner / str(job_id)
    return JobPaths(
        owner=owner,
        job_id=job_id,
        uploads_dir=uploads,
        output_dir=config.runtime.output_dir / owner / str(job_id),
        log_file=uploads / config.runtime.log_file,
    )


def ensure_job_paths(config: AppConfig, owner: str, job_id: int) -> JobPaths:
    paths = job_paths(config, owner, job_id)
    paths.uploads_dir.mkdir(parents=True, exist_ok=True)
    paths.output_dir.mkdir(parents=True, exist_ok=True)
    return paths


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", delete=False, dir=path.parent, encoding=encoding) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("wb", delete=False, dir=path.parent) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
    os.replace(tmp.name, path)


def size_within_limit(size_bytes: int, max_mb: int) -> bool:
    return size_bytes <= max_mb * 1024 * 1024
