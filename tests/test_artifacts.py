from __future__ import annotations

import base64

import pytest

from core.converthub.artifacts import ArtifactNotFoundError, ArtifactResolver
from core.converthub.config import AppConfig
from core.converthub.dispatcher import ConverterDispatcher
from core.converthub.jobs import JobManager
from core.converthub.models import FileSubmission, JobResult
from core.converthub.registry import ConverterRegistry
from core.converthub.store import ConversionStore
from core.converthub.utils import job_paths


def run_job(config: AppConfig, registry: ConverterRegistry, owner: str = "1") -> tuple[ArtifactResolver, JobResult]:
    store = ConversionStore(config.runtime.database_url)
    store.initialize()
    manager = JobManager(config, ConverterDispatcher(registry), store)
    content = base64.b64encode(b"hello").decode("ascii")
    result = manager.submit(owner, [FileSubmission("a.txt", content), FileSubmission("b.csv", content)], "pdf")
    manager.shutdown()
    return ArtifactResolver(config, store), result


def test_resolves_completed_artifact(config: AppConfig, registry: ConverterRegistry) -> None:
    resolver, result = run_job(config, registry)
    name = result.results[0].output_file_name
    assert name is not None
    artifact = resolver.resolve("1", result.job_id, name)
    assert artifact.file_name == name
    assert artifact.media_type == "application/pdf"
    assert artifact.size_bytes == 5
    assert artifact.path.read_bytes() == b"hello"


def test_foreign_job_is_indistinguishable_from_missing(config: AppConfig, registry: ConverterRegistry) -> None:
    resolver, result = run_job(config, registry)
    name = result.results[0].output_file_name or ""
    with pytest.raises(ArtifactNotFoundError) as foreign:
        resolver.resolve("2", result.job_id, name)
    with pytest.raises(ArtifactNotFoundError) as missing:
        resolver.resolve("1", result.job_id + 50, name)
    assert str(foreign.value) == str(missing.value)


def test_failed_records_are_not_served(config: AppConfig, registry: ConverterRegistry) -> None:
    resolver, result = run_job(config, registry)
    assert result.results[1].status == "error"
    with pytest.raises(ArtifactNotFoundError):
        resolver.resolve("1", result.job_id, "b.pdf")


@pytest.mark.parametrize("name", ["", "..", "../a.pdf", "nested/a.pdf"])
def test_path_like_names_are_rejected(config: AppConfig, registry: ConverterRegistry, name: str) -> None:
    resolver, result = run_job(config, registry)
    with pytest.raises(ArtifactNotFoundError):
        resolver.resolve("1", result.job_id, name)


def test_pruned_artifact_is_not_found(config: AppConfig, registry: ConverterRegistry) -> None:
    resolver, result = run_job(config, registry)
    name = result.results[0].output_file_name or ""
    (job_paths(config, "1", result.job_id).output_dir / name).unlink()
    with pytest.raises(ArtifactNotFoundError):
        resolver.resolve("1", result.job_id, name)
