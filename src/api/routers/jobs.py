from __future__ import annotations

from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse

from api.dependencies import get_artifacts, get_config, get_job_manager, get_owner
from api.utils import run_sync
from core.converthub.artifacts import ArtifactNotFoundError, ArtifactResolver
from core.converthub.config import AppConfig
from core.converthub.jobs import JobInfrastructureError, JobManager, JobNotFoundError, JobRequestError
from core.converthub.models import FileSubmission, JobResult
from core.converthub.store import StoreUnavailableError
from models.schemas import ConvertRequest, ConvertResponse, FileResultPayload

router = APIRouter(prefix="/api", tags=["jobs"])


@router.post(
    "/convert",
    summary="Convert one or more files",
    response_model=ConvertResponse,
    response_model_exclude_none=True,
)
async def convert_files(
    payload: ConvertRequest,
    request: Request,
    owner: str = Depends(get_owner),
    manager: JobManager = Depends(get_job_manager),
    config: AppConfig = Depends(get_config),
) -> ConvertResponse:
    submissions = [FileSubmission(name=item.name, content=item.content, url=item.url) for item in payload.files]
    try:
        result = await run_sync(
            manager.submit,
            owner,
            submissions,
            payload.convert_to,
            payload.converter_name,
            options=payload.options.model_dump(exclude_none=True),
        )
    except JobRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (JobInfrastructureError, StoreUnavailableError) as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return _serialize_result(result, _base_url(request, config))


@router.get("/job/{job_id}", summary="Retrieve a job and its file records")
def get_job(
    job_id: str,
    owner: str = Depends(get_owner),
    manager: JobManager = Depends(get_job_manager),
) -> dict[str, Any]:
    try:
        job, files = manager.get_job(owner, _parse_job_id(job_id))
    except JobNotFoundError as exc:
        raise HTTPException(status_code=404, detail="JOB_NOT_FOUND") from exc
    return {"job": job.to_payload(), "files": [record.to_payload() for record in files]}


@router.get("/job/{job_id}/download/{file_name}", summary="Download a converted file")
def download(
    job_id: str,
    file_name: str,
    owner: str = Depends(get_owner),
    artifacts: ArtifactResolver = Depends(get_artifacts),
) -> FileResponse:
    return _artifact_response(artifacts, owner, job_id, file_name)


@router.get("/download/{user_id}/{job_id}/{file_name}", summary="Download a converted file (owner in path)")
def download_legacy(
    user_id: str,
    job_id: str,
    file_name: str,
    owner: str = Depends(get_owner),
    artifacts: ArtifactResolver = Depends(get_artifacts),
) -> FileResponse:
    if user_id != owner:
        raise HTTPException(status_code=404, detail="Job not found")
    return _artifact_response(artifacts, owner, job_id, file_name)


def _artifact_response(artifacts: ArtifactResolver, owner: str, job_id: str, file_name: str) -> FileResponse:
    try:
        artifact = artifacts.resolve(owner, _parse_job_id(job_id), file_name)
    except ArtifactNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return FileResponse(artifact.path, media_type=artifact.media_type, filename=artifact.file_name)


def _parse_job_id(raw: str) -> int:
    # Non-numeric ids are reported like any other unknown job.
    if not (raw.isascii() and raw.isdecimal()):
        raise HTTPException(status_code=404, detail="JOB_NOT_FOUND")
    return int(raw)


def _base_url(request: Request, config: AppConfig) -> str:
    if config.api.public_base_url:
        return config.api.public_base_url
    return str(request.base_url).rstrip("/")


def _serialize_result(result: JobResult, base_url: str) -> ConvertResponse:
    return ConvertResponse(
        job_id=result.job_id,
        status=result.status.value,
        total_files=result.total_files,
        completed_files=result.completed_files,
        results=[
            FileResultPayload(
                file_name=item.file_name,
                status=item.status,
                output_file_name=item.output_file_name,
                download_url=(
                    f"{base_url}/api/job/{result.job_id}/download/{quote(item.output_file_name)}"
                    if item.output_file_name
                    else None
                ),
                error=item.error,
            )
            for item in result.results
        ],
    )


__all__ = ["router"]
