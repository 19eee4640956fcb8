"""Multi-backend file conversion with per-file job tracking."""

from .config import AppConfig, load_config
from .dispatcher import ConverterDispatcher
from .jobs import JobManager
from .models import FileSubmission, JobResult, JobStatus
from .registry import ConverterDescriptor, ConverterRegistry
from .service import Services, build_services

__all__ = [
    "AppConfig",
    "ConverterDescriptor",
    "ConverterDispatcher",
    "ConverterRegistry",
    "FileSubmission",
    "JobManager",
    "JobResult",
    "JobStatus",
    "Services",
    "build_services",
    "load_config",
]
