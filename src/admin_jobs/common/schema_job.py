from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator
from pydantic.alias_generators import to_camel

from ..utils.timestamp import fromTimeStamp


class JobStatus(str, Enum):
    pending = "pending"
    running = "running"
    cancelling = "cancelling"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"
    stopped = "stopped"


TERMINAL_STATUSES: frozenset[JobStatus] = frozenset(
    {JobStatus.completed, JobStatus.failed, JobStatus.cancelled, JobStatus.stopped}
)
ACTIVE_STATUSES: frozenset[JobStatus] = frozenset(
    {JobStatus.pending, JobStatus.running, JobStatus.cancelling}
)

_STATUS_RANK: dict[JobStatus, int] = {
    JobStatus.pending: 0,
    JobStatus.running: 1,
    JobStatus.cancelling: 2,
}


def status_rank(status: JobStatus) -> int:
    """Position of a status on the way to a terminal state.

    All terminal statuses share the highest rank.
    """
    return _STATUS_RANK.get(status, 3)


class WireModel(BaseModel):
    """Base for backend payloads: camelCase on the wire, snake_case in Python."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


# ---------------------------
# Job snapshot
# ---------------------------


class JobProgress(WireModel):
    processed: int = Field(0, ge=0)
    total: int = Field(0, ge=0)
    successful: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)

    # Reported by some job kinds only
    percent: float | None = None
    current_page: int | None = None
    updated: int | None = None

    @field_validator("processed", "total", "successful", "failed", mode="before")
    @classmethod
    def unknown_counter(cls, v: object) -> object:
        # null while the backend is still counting
        return 0 if v is None else v


class JobTiming(WireModel):
    started_at: datetime | None = None
    completed_at: datetime | None = None
    elapsed_formatted: str | None = None

    @field_validator("started_at", "completed_at", mode="before")
    @classmethod
    def epoch_millis(cls, v: object) -> object:
        # Some endpoints report Date.now() style millisecond timestamps
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return fromTimeStamp(int(v))
        return v


class JobLogEntry(WireModel):
    time: str | None = None
    status: str | None = None
    message: str | None = None

    product_name: str | None = None
    category_path: str | None = None


class JobError(WireModel):
    message: str = "Unknown error"


class Job(WireModel):
    """Read-only client copy of a server-side job."""

    id: str
    status: JobStatus = JobStatus.pending
    progress: JobProgress = Field(default_factory=JobProgress)
    timing: JobTiming = Field(default_factory=JobTiming)
    logs: list[JobLogEntry] = Field(default_factory=list)
    error: JobError | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> object:
        # Some endpoints hand out numeric ids
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("logs", mode="before")
    @classmethod
    def coerce_logs(cls, v: object) -> object:
        return [] if v is None else v

    @field_validator("error", mode="before")
    @classmethod
    def coerce_error(cls, v: object) -> object:
        if isinstance(v, str):
            return {"message": v} if v else None
        return v

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


# ---------------------------
# Transport
# ---------------------------


class ApiResponse(BaseModel):
    """Uniform backend envelope: ``{success, data, message}``."""

    success: bool = False
    data: JsonValue = None
    message: str | None = None
    error: JsonValue = None

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="allow")

    @property
    def ok(self) -> bool:
        return self.success and not self.error

    def error_message(self, default: str) -> str:
        if self.message:
            return self.message
        if isinstance(self.error, str) and self.error:
            return self.error
        if isinstance(self.error, dict):
            message = self.error.get("message")
            if isinstance(message, str) and message:
                return message
        return default


class JobRequest(BaseModel):
    """One HTTP call against the admin backend."""

    method: str = "GET"
    path: str
    params: dict[str, str] | None = None
    json_body: dict[str, Any] | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)
