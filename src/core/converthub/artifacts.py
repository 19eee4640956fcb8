from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path

from .config import AppConfig
from .store import ConversionStore
from .utils import job_paths


class ArtifactNotFoundError(LookupError):
    """Raised for every artifact lookup that must not be served.

    Missing jobs and jobs owned by another user raise the same error so callers
    cannot probe for other users' data.
    """


@dataclass(slots=True, frozen=True)
class ResolvedArtifact:
    path: Path
    file_name: str
    media_type: str
    size_bytes: int


def _is_plain_name(name: str) -> bool:
    if not name or name in {".", ".."}:
        return False
    return "/" not in name and "\\" not in name and "\x00" not in name


class ArtifactResolver:
    def __init__(self, config: AppConfig, store: ConversionStore) -> None:
        self._config = config
        self._store = store

    def resolve(self, owner: str, job_id: int, output_file_name: str) -> ResolvedArtifact:
        job = self._store.get_job(job_id)
        if job is None or job.owner != owner:
            raise ArtifactNotFoundError("Job not found")
        if not _is_plain_name(output_file_name):
            raise ArtifactNotFoundError("File not found")
        record = self._store.find_file(job.id, output_file_name)
        if record is None or not record.succeeded:
            raise ArtifactNotFoundError("File not found")

        output_dir = job_paths(self._config, job.owner, job.id).output_dir.resolve()
        path = (output_dir / record.output_file_name).resolve()
        if path.parent != output_dir or not path.is_file():
            raise ArtifactNotFoundError("File not found")
        try:
            size_bytes = path.stat().st_size
        except OSError as exc:
            raise ArtifactNotFoundError("File not found") from exc
        media_type, _ = mimetypes.guess_type(path.name)
        return ResolvedArtifact(
            path=path,
            file_name=record.output_file_name,
            media_type=media_type or "application/octet-stream",
            size_bytes=size_bytes,
        )


__all__ = ["ArtifactNotFoundError", "ArtifactResolver", "ResolvedArtifact"]
