"""Vendor product synchronisation (Luxury Distribution feed)."""

from typing import ClassVar, override
from urllib.parse import quote

from pydantic import JsonValue

from ...common.job_kind import BaseJobParams, RestJobKind
from ...common.schema_job import Job, JobRequest
from .schema import LUXURY_VENDOR_ID, VendorSyncParams


class VendorSyncKind(RestJobKind):
    """Fetches every product of a vendor and syncs it into the catalogue.

    Job ids travel in the path rather than the query string, and the active
    job of a vendor is reported under ``data.activeJob``.
    """

    poll_interval: ClassVar[float] = 3.0
    params_schema: ClassVar[type[BaseJobParams]] = VendorSyncParams

    start_path: ClassVar[str] = "/admin/get-products-from-luxury"
    status_path: ClassVar[str] = "/admin/vendor-sync-status"
    active_path: ClassVar[str] = "/admin/vendor-sync-active"
    cancel_path: ClassVar[str] = "/admin/vendor-sync-cancel"

    job_key: ClassVar[str | None] = None
    active_key: ClassVar[str | None] = "activeJob"

    def __init__(self, vendor_id: str = LUXURY_VENDOR_ID):
        self.vendor_id: str = vendor_id

    @property
    @override
    def name(self) -> str:
        return "vendor_sync"

    @override
    def status_request(self, job_id: str) -> JobRequest:
        return JobRequest(method="GET", path=f"{self.status_path}/{quote(job_id, safe='')}")

    @override
    def active_request(self) -> JobRequest:
        return JobRequest(method="GET", path=f"{self.active_path}/{quote(self.vendor_id, safe='')}")

    @override
    def cancel_request(self, job_id: str) -> JobRequest:
        return JobRequest(
            method="POST",
            path=f"{self.cancel_path}/{quote(job_id, safe='')}",
            json_body={},
        )

    @override
    def parse_active(self, data: JsonValue) -> Job | None:
        if isinstance(data, dict) and "activeJob" not in data and "job" in data:
            return self.parse_job(data["job"])
        return super().parse_active(data)
