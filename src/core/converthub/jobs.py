from __future__ import annotations

import base64
import binascii
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

import httpx

from .config import AppConfig
from .dispatcher import ConverterDispatcher
from .formats import extension_of, normalize_input, normalize_output
from .logging import RunLogEntry, RunLogger, StageTimings
from .models import (
    SUCCESS_MARKER,
    ConversionRequest,
    FileRecord,
    FileResult,
    FileSubmission,
    Job,
    JobResult,
    JobStatus,
    Success,
)
from .store import ConversionStore
from .utils import (
    JobPaths,
    atomic_write_bytes,
    ensure_job_paths,
    job_paths,
    output_file_name,
    sanitize_filename,
    size_within_limit,
)


INVALID_FILE_NAME = "Invalid file name"


class JobRequestError(ValueError):
    """Raised for requests rejected before a job is created."""


class JobInfrastructureError(RuntimeError):
    """Raised when a job cannot be set up; no file has been processed."""


class JobNotFoundError(LookupError):
    """Raised for missing jobs and jobs owned by someone else alike."""


class FetchError(RuntimeError):
    """Raised when a submitted file cannot be materialized."""


@dataclass(slots=True)
class _FileContext:
    job: Job
    paths: JobPaths
    logger: RunLogger
    target_format: str
    target_extension: str
    converter_name: str | None
    options: Mapping[str, Any]


def job_status_for(completed_files: int, num_files: int) -> JobStatus:
    if completed_files == num_files:
        return JobStatus.COMPLETED
    return JobStatus.PARTIAL


class JobManager:
    """Runs multi-file conversion jobs; files inside a job are processed in order."""

    def __init__(
        self,
        config: AppConfig,
        dispatcher: ConverterDispatcher,
        store: ConversionStore,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._config = config
        self._dispatcher = dispatcher
        self._store = store
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(
            timeout=float(config.runtime.fetch_timeout_s),
            follow_redirects=True,
        )

    def submit(
        self,
        owner: str,
        files: Sequence[FileSubmission],
        convert_to: str | None,
        converter_name: str | None = None,
        *,
        options: Mapping[str, Any] | None = None,
    ) -> JobResult:
        if not files:
            raise JobRequestError("No files provided")
        if not convert_to or not convert_to.strip():
            raise JobRequestError("No target format specified")

        job = self._store.create_job(owner, len(files))
        try:
            paths = ensure_job_paths(self._config, owner, job.id)
        except OSError as exc:
            raise JobInfrastructureError(f"Failed to create job directories for job {job.id}: {exc}") from exc

        target_format = normalize_input(convert_to)
        context = _FileContext(
            job=job,
            paths=paths,
            logger=RunLogger(paths.log_file),
            target_format=target_format,
            target_extension=normalize_output(target_format),
            converter_name=converter_name or None,
            options=dict(options or {}),
        )

        results = [self._process_file(submission, context) for submission in files]

        completed = sum(1 for result in results if result.status == "completed")
        status = job_status_for(completed, len(files))
        self._store.set_job_status(job.id, status)
        return JobResult(
            job_id=job.id,
            status=status,
            total_files=len(files),
            completed_files=completed,
            results=results,
        )

    def _process_file(self, submission: FileSubmission, context: _FileContext) -> FileResult:
        file_name = sanitize_filename(submission.name)
        if not file_name:
            self._record(context, submission.name, "", INVALID_FILE_NAME, error_code="INVALID_NAME")
            return FileResult(file_name=submission.name, status="error", error=INVALID_FILE_NAME)

        timings = StageTimings()
        size_bytes = 0
        original_extension = extension_of(file_name)
        input_format = normalize_input(original_extension)
        try:
            fetch_start = time.perf_counter()
            input_path = context.paths.uploads_dir / file_name
            size_bytes = self._materialize(submission, input_path)
            timings.fetch_ms = (time.perf_counter() - fetch_start) * 1000

            new_name = output_file_name(
                file_name,
                original_extension,
                context.target_extension,
                unique=self._config.runtime.unique_output_names,
            )
            request = ConversionRequest(
                input_path=str(input_path),
                input_format=input_format,
                output_format=context.target_format,
                output_path=str(context.paths.output_dir / new_name),
                options=context.options,
                requested_backend=context.converter_name,
            )
            convert_start = time.perf_counter()
            outcome = self._dispatcher.convert(request)
            timings.convert_ms = (time.perf_counter() - convert_start) * 1000
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            self._record(
                context,
                file_name,
                "",
                reason,
                input_format=input_format,
                error_code="FETCH_FAILED" if isinstance(exc, FetchError) else "UNEXPECTED",
                size_bytes=size_bytes,
                timings=timings,
            )
            return FileResult(file_name=file_name, status="error", error=reason)

        if isinstance(outcome, Success):
            self._record(
                context,
                file_name,
                new_name,
                SUCCESS_MARKER,
                input_format=input_format,
                converter=outcome.converter,
                size_bytes=size_bytes,
                timings=timings,
            )
            return FileResult(file_name=file_name, status="completed", output_file_name=new_name)

        self._record(
            context,
            file_name,
            new_name,
            outcome.reason,
            input_format=input_format,
            converter=outcome.converter,
            error_code=outcome.code,
            size_bytes=size_bytes,
            timings=timings,
        )
        return FileResult(file_name=file_name, status="error", error=outcome.reason)

    def _materialize(self, submission: FileSubmission, destination: Path) -> int:
        if submission.url:
            payload = self._download(submission.url)
        elif submission.content:
            try:
                payload = base64.b64decode("".join(submission.content.split()), validate=True)
            except (binascii.Error, ValueError) as exc:
                raise FetchError(f"Invalid base64 content: {exc}") from exc
        else:
            raise FetchError("No file content or URL provided")
        if not size_within_limit(len(payload), self._config.runtime.max_file_size_mb):
            raise FetchError(f"File exceeds the {self._config.runtime.max_file_size_mb} MB limit")
        atomic_write_bytes(destination, payload)
        return len(payload)

    def _download(self, url: str) -> bytes:
        max_bytes = self._config.runtime.max_file_size_mb * 1024 * 1024
        chunks: list[bytes] = []
        received = 0
        try:
            with self._http.stream("GET", url) as response:
                if not response.is_success:
                    raise FetchError(f"Failed to download file: {response.reason_phrase or response.status_code}")
                for chunk in response.iter_bytes():
                    received += len(chunk)
                    if received > max_bytes:
                        raise FetchError(
                            f"File exceeds the {self._config.runtime.max_file_size_mb} MB limit"
                        )
                    chunks.append(chunk)
        except httpx.HTTPError as exc:
            raise FetchError(f"Failed to download file: {exc}") from exc
        return b"".join(chunks)

    def _record(
        self,
        context: _FileContext,
        input_file_name: str,
        output_name: str,
        status: str,
        *,
        input_format: str = "",
        converter: str | None = None,
        error_code: str | None = None,
        size_bytes: int = 0,
        timings: StageTimings | None = None,
    ) -> FileRecord:
        record = self._store.add_file_record(context.job.id, input_file_name, output_name, status)
        context.logger.append(
            RunLogEntry(
                job_id=context.job.id,
                owner=context.job.owner,
                input_file_name=input_file_name,
                output_file_name=output_name,
                status="success" if status == SUCCESS_MARKER else "failure",
                input_format=input_format,
                output_format=context.target_format,
                converter=converter,
                error=None if status == SUCCESS_MARKER else status,
                error_code=error_code,
                size_bytes=size_bytes,
                timings=timings or StageTimings(),
            )
        )
        return record

    def get_job(self, owner: str, job_id: int) -> tuple[Job, list[FileRecord]]:
        job = self._store.get_owned_job(owner, job_id)
        if job is None:
            raise JobNotFoundError(f"Job {job_id} not found")
        return job, self._store.list_files(job.id)

    def list_jobs(self, owner: str) -> list[Job]:
        return self._store.list_jobs(owner)

    def run_log(self, owner: str, job_id: int) -> list[dict[str, Any]]:
        job, _ = self.get_job(owner, job_id)
        paths = job_paths(self._config, job.owner, job.id)
        return RunLogger(paths.log_file).read()

    def shutdown(self) -> None:
        if self._owns_client:
            self._http.close()


__all__ = [
    "FetchError",
    "JobInfrastructureError",
    "JobManager",
    "JobNotFoundError",
    "JobRequestError",
    "job_status_for",
]
