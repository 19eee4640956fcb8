"""Relational persistence for users, jobs and per-file records.

Every public method opens a short-lived session and commits one row change, so
a job is never wrapped in a single transaction. A crash in the middle of a job
leaves its row ``pending`` with whatever file records were already written.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, create_engine, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .models import FileRecord, Job, JobStatus


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)


class JobRow(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    status = Column(String(16), nullable=False, default=JobStatus.PENDING.value)
    num_files = Column(Integer, nullable=False)
    date_created = Column(DateTime(timezone=True), nullable=False)


class FileRow(Base):
    __tablename__ = "file_names"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    file_name = Column(String(512), nullable=False)
    output_file_name = Column(String(512), nullable=False, default="")
    status = Column(String, nullable=False)


class StoreUnavailableError(RuntimeError):
    """Raised when the database cannot be reached or a write fails."""


class DuplicateUserError(ValueError):
    """Raised when registering an email that already exists."""


class ConversionStore:
    def __init__(self, database_url: str) -> None:
        url = make_url(database_url)
        connect_args: dict[str, object] = {}
        if url.get_backend_name() == "sqlite":
            # Sessions are opened from API worker threads.
            connect_args["check_same_thread"] = False
            if url.database and url.database != ":memory:":
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        self._engine = create_engine(database_url, connect_args=connect_args)
        self._sessions = sessionmaker(bind=self._engine, expire_on_commit=False)

    def initialize(self) -> None:
        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Failed to initialise database: {exc}") from exc

    def dispose(self) -> None:
        self._engine.dispose()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._sessions()
        try:
            yield session
            session.commit()
        except IntegrityError:
            session.rollback()
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            raise StoreUnavailableError(str(exc)) from exc
        finally:
            session.close()

    # users

    def add_user(self, email: str, password_hash: str) -> int:
        try:
            with self._session() as session:
                row = UserRow(email=email, password_hash=password_hash)
                session.add(row)
                session.flush()
                return int(row.id)
        except IntegrityError as exc:
            raise DuplicateUserError(f"User already exists: {email}") from exc

    def get_user_by_email(self, email: str) -> tuple[int, str] | None:
        with self._session() as session:
            row = session.execute(select(UserRow).where(UserRow.email == email)).scalar_one_or_none()
            if row is None:
                return None
            return int(row.id), str(row.password_hash)

    # jobs

    def create_job(self, owner: str, num_files: int) -> Job:
        with self._session() as session:
            row = JobRow(
                user_id=owner,
                status=JobStatus.PENDING.value,
                num_files=num_files,
                date_created=datetime.now(timezone.utc),
            )
            session.add(row)
            session.flush()
            return _job_from_row(row)

    def set_job_status(self, job_id: int, status: JobStatus) -> None:
        with self._session() as session:
            row = session.get(JobRow, job_id)
            if row is None:
                raise StoreUnavailableError(f"Job {job_id} disappeared from the store")
            row.status = status.value

    def get_job(self, job_id: int) -> Job | None:
        with self._session() as session:
            row = session.get(JobRow, job_id)
            return _job_from_row(row) if row is not None else None

    def get_owned_job(self, owner: str, job_id: int) -> Job | None:
        with self._session() as session:
            row = session.execute(
                select(JobRow).where(JobRow.id == job_id, JobRow.user_id == owner)
            ).scalar_one_or_none()
            return _job_from_row(row) if row is not None else None

    def list_jobs(self, owner: str) -> list[Job]:
        with self._session() as session:
            rows = session.execute(
                select(JobRow).where(JobRow.user_id == owner).order_by(JobRow.id.desc())
            ).scalars()
            return [_job_from_row(row) for row in rows]

    # file records

    def add_file_record(self, job_id: int, input_file_name: str, output_file_name: str, status: str) -> FileRecord:
        with self._session() as session:
            row = FileRow(
                job_id=job_id,
                file_name=input_file_name,
                output_file_name=output_file_name,
                status=status,
            )
            session.add(row)
            session.flush()
            return _file_from_row(row)

    def list_files(self, job_id: int) -> list[FileRecord]:
        with self._session() as session:
            rows = session.execute(
                select(FileRow).where(FileRow.job_id == job_id).order_by(FileRow.id)
            ).scalars()
            return [_file_from_row(row) for row in rows]

    def find_file(self, job_id: int, output_file_name: str) -> FileRecord | None:
        if not output_file_name:
            return None
        with self._session() as session:
            row = session.execute(
                select(FileRow)
                .where(FileRow.job_id == job_id, FileRow.output_file_name == output_file_name)
                .order_by(FileRow.id)
                .limit(1)
            ).scalar_one_or_none()
            return _file_from_row(row) if row is not None else None


def _job_from_row(row: JobRow) -> Job:
    created = row.date_created
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return Job(
        id=int(row.id),
        owner=str(row.user_id),
        status=JobStatus(row.status),
        num_files=int(row.num_files),
        created_at=created,
    )


def _file_from_row(row: FileRow) -> FileRecord:
    return FileRecord(
        id=int(row.id),
        job_id=int(row.job_id),
        input_file_name=str(row.file_name),
        output_file_name=str(row.output_file_name or ""),
        status=str(row.status),
    )


__all__ = [
    "ConversionStore",
    "DuplicateUserError",
    "StoreUnavailableError",
]
