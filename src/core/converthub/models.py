"""Domain models for conversion jobs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal, Mapping


SUCCESS_MARKER = "Done"


class JobStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    PARTIAL = "partial"


@dataclass(slots=True)
class Job:
    id: int
    owner: str
    status: JobStatus
    num_files: int
    created_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.owner,
            "status": self.status.value,
            "num_files": self.num_files,
            "date_created": self.created_at.isoformat(),
        }


@dataclass(slots=True)
class FileRecord:
    id: int
    job_id: int
    input_file_name: str
    output_file_name: str
    status: str

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS_MARKER

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "job_id": self.job_id,
            "file_name": self.input_file_name,
            "output_file_name": self.output_file_name,
            "status": self.status,
        }


@dataclass(slots=True)
class ConversionRequest:
    """A single file conversion handed to the dispatcher."""

    input_path: str
    input_format: str
    output_format: str
    output_path: str
    options: Mapping[str, Any] = field(default_factory=dict)
    requested_backend: str | None = None


@dataclass(slots=True, frozen=True)
class Success:
    converter: str


@dataclass(slots=True, frozen=True)
class Failure:
    reason: str
    code: str = "CONVERSION_FAILED"
    converter: str | None = None


ConversionOutcome = Success | Failure


@dataclass(slots=True)
class FileSubmission:
    """One file of a job: inline base64 content or a source URL."""

    name: str
    content: str | None = None
    url: str | None = None


@dataclass(slots=True)
class FileResult:
    file_name: str
    status: Literal["completed", "error"]
    output_file_name: str | None = None
    error: str | None = None


@dataclass(slots=True)
class JobResult:
    job_id: int
    status: JobStatus
    total_files: int
    completed_files: int
    results: list[FileResult]


__all__ = [
    "SUCCESS_MARKER",
    "ConversionOutcome",
    "ConversionRequest",
    "Failure",
    "FileRecord",
    "FileResult",
    "FileSubmission",
    "Job",
    "JobResult",
    "JobStatus",
    "Success",
]
