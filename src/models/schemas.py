from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FilePayload(BaseModel):
    name: str
    content: str | None = None
    url: str | None = None


class ConvertOptions(BaseModel):
    """Backend options a caller may tune; anything else is rejected."""

    model_config = ConfigDict(extra="forbid")

    quality: int | None = Field(default=None, ge=1, le=100)
    timeout_s: float | None = Field(default=None, gt=0)
    standalone: bool | None = None


class ConvertRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    files: list[FilePayload] = Field(default_factory=list)
    convert_to: str | None = Field(default=None, alias="convertTo")
    converter_name: str | None = Field(default=None, alias="converterName")
    options: ConvertOptions = Field(default_factory=ConvertOptions)


class FileResultPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(alias="fileName")
    status: str
    output_file_name: str | None = Field(default=None, alias="outputFileName")
    download_url: str | None = Field(default=None, alias="downloadUrl")
    error: str | None = None


class ConvertResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: int = Field(alias="jobId")
    status: str
    total_files: int = Field(alias="totalFiles")
    completed_files: int = Field(alias="completedFiles")
    results: list[FileResultPayload]


class HealthStatus(BaseModel):
    status: str
