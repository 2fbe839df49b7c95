"""admin_jobs - async client for marketplace admin background jobs."""

from .category_import import CategoryImporter, ImportReport
from .client import JobApiClient
from .common.errors import ApiError, JobClientError, JobStateError, TransportError
from .common.job_kind import BaseJobParams, JobKind, RestJobKind
from .common.schema_job import Job, JobLogEntry, JobProgress, JobStatus, JobTiming
from .config import ClientSettings
from .kinds import (
    AutoMapKind,
    BackfillSizeKind,
    VendorSyncKind,
    get_kind,
    get_kind_registry,
)
from .poller import JobPoller
from .presentation import JobView, build_view, progress_percent
from .session import JobSession
from .state import JobState

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "AutoMapKind",
    "BackfillSizeKind",
    "BaseJobParams",
    "CategoryImporter",
    "ClientSettings",
    "ImportReport",
    "Job",
    "JobApiClient",
    "JobClientError",
    "JobKind",
    "JobLogEntry",
    "JobPoller",
    "JobProgress",
    "JobSession",
    "JobState",
    "JobStateError",
    "JobStatus",
    "JobTiming",
    "JobView",
    "RestJobKind",
    "TransportError",
    "VendorSyncKind",
    "__version__",
    "build_view",
    "get_kind",
    "get_kind_registry",
    "progress_percent",
]
