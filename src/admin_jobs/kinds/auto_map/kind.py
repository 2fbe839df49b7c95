"""Bulk AI auto-mapping of unmapped products into the taxonomy."""

from collections.abc import Mapping
from typing import Any, ClassVar, override

from ...common.job_kind import RestJobKind
from ...common.schema_job import Job

_PROGRESS_FIELDS = ("processed", "total", "successful", "failed")
_TIMING_FIELDS = ("startedAt", "completedAt", "started_at", "completed_at")


class AutoMapKind(RestJobKind):
    """Maps products in batches of 100 using category suggestions."""

    poll_interval: ClassVar[float] = 2.0

    start_path: ClassVar[str] = "/admin/auto-map/start"
    status_path: ClassVar[str] = "/admin/auto-map/status"
    active_path: ClassVar[str] = "/admin/auto-map/active"
    cancel_path: ClassVar[str] = "/admin/auto-map/stop"

    job_key: ClassVar[str | None] = "job"
    active_key: ClassVar[str | None] = "job"

    @property
    @override
    def name(self) -> str:
        return "auto_map"

    @override
    def build_job(self, raw: Mapping[str, Any]) -> Job:
        # The auto-map backend reports counters and timestamps flat on the job
        data = dict(raw)
        if not isinstance(data.get("progress"), dict):
            data["progress"] = {k: data.pop(k) for k in _PROGRESS_FIELDS if k in data}
        if not isinstance(data.get("timing"), dict):
            data["timing"] = {k: data.pop(k) for k in _TIMING_FIELDS if k in data}
        return Job.model_validate(data)
