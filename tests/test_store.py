from __future__ import annotations

from pathlib import Path

import pytest

from core.converthub.models import JobStatus
from core.converthub.store import ConversionStore, DuplicateUserError


def make_store(tmp_path: Path) -> ConversionStore:
    store = ConversionStore(f"sqlite:///{tmp_path / 'nested' / 'store.db'}")
    store.initialize()
    return store


def test_sqlite_parent_directory_is_created(tmp_path: Path) -> None:
    make_store(tmp_path)
    assert (tmp_path / "nested" / "store.db").exists()


def test_job_lifecycle(tmp_path: Path) -> None:
    store = make_store(tmp_path)
    job = store.create_job("42", 2)
    assert job.status is JobStatus.PENDING
    assert job.created_at.tzinfo is not None

    store.add_file_record(job.id, "a.txt", "x_a.pdf", "Done")
    store.add_file_record(job.id, "b.txt", "", "Invalid file name")
    store.set_job_status(job.id, JobStatus.PARTIAL)

    reloaded = store.get_job(job.id)
    assert reloaded is not None
    assert reloaded.status is JobStatus.PARTIAL
    files = store.list_files(job.id)
    assert [record.input_file_name for record in files] == ["a.txt", "b.txt"]
    assert files[0].succeeded and not files[1].succeeded


def test_owned_job_lookup(tmp_path: Path) -> None:
    store = make_store(tmp_path)
    job = store.create_job("42", 1)
    assert store.get_owned_job("42", job.id) is not None
    assert store.get_owned_job("43", job.id) is None


def test_list_jobs_newest_first(tmp_path: Path) -> None:
    store = make_store(tmp_path)
    first = store.create_job("42", 1)
    second = store.create_job("42", 1)
    store.create_job("43", 1)
    assert [job.id for job in store.list_jobs("42")] == [second.id, first.id]


def test_find_file_matches_exact_output_name(tmp_path: Path) -> None:
    store = make_store(tmp_path)
    job = store.create_job("42", 1)
    store.add_file_record(job.id, "a.txt", "x_a.pdf", "Done")
    assert store.find_file(job.id, "x_a.pdf") is not None
    assert store.find_file(job.id, "X_A.PDF") is None
    assert store.find_file(job.id, "") is None


def test_duplicate_users_rejected(tmp_path: Path) -> None:
    store = make_store(tmp_path)
    user_id = store.add_user("a@example.com", "hash")
    assert store.get_user_by_email("a@example.com") == (user_id, "hash")
    with pytest.raises(DuplicateUserError):
        store.add_user("a@example.com", "other")
