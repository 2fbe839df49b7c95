"""Test configuration and fixtures for admin_jobs.

This module provides:
- A scripted in-memory admin backend served by FastAPI
- An `api` fixture talking to it through `httpx.ASGITransport`
- Helpers building job payloads the way the backend reports them
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from admin_jobs.client import JobApiClient

BASE_URL = "http://admin.test"
STARTED_AT = "2026-01-01T10:00:00Z"
COMPLETED_AT = "2026-01-01T10:02:05Z"


# ============================================================================
# Payload helpers
# ============================================================================


def job_payload(
    job_id: str,
    status: str = "running",
    processed: int = 0,
    total: int = 0,
    **extra: Any,
) -> dict[str, Any]:
    """Job as the admin backend serialises it (camelCase, nested progress)."""
    payload: dict[str, Any] = {
        "id": job_id,
        "status": status,
        "progress": {
            "processed": processed,
            "total": total,
            "successful": extra.pop("successful", processed),
            "failed": extra.pop("failed", 0),
        },
        "timing": {"startedAt": STARTED_AT},
        "logs": extra.pop("logs", []),
    }
    if status in ("completed", "failed", "cancelled", "stopped"):
        payload["timing"]["completedAt"] = COMPLETED_AT
    payload.update(extra)
    return payload


def backfill_doc(
    running: bool = False,
    processed: int = 0,
    total: int = 0,
    updated: int = 0,
    **extra: Any,
) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "running": running,
        "processed": processed,
        "total": total,
        "updated": updated,
        "startedAt": STARTED_AT if running or processed else None,
        "completedAt": None,
        "error": None,
    }
    doc.update(extra)
    return doc


def ok(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def fail(message: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


# ============================================================================
# Fake backend
# ============================================================================


class FakeBackend:
    """In-memory admin backend whose job progressions are scripted by tests.

    Every status read pops the next snapshot of the job's script; the last
    snapshot is repeated once the script runs out.
    """

    def __init__(self):
        self.scripts: dict[str, list[dict[str, Any]]] = {}
        self.cancel_scripts: dict[str, list[dict[str, Any]]] = {}
        self.active: dict[str, str | None] = {"auto_map": None, "vendor_sync": None}
        self.next_start: dict[str, str] = {}

        self.calls: list[tuple[str, str]] = []
        self.start_bodies: list[dict[str, Any]] = []

        # Failure injection
        self.status_failures: int = 0
        self.status_delay: float = 0.0
        self.cancel_fails: bool = False

        # Status documents the next backfill run goes through
        self.next_backfill: list[dict[str, Any]] = []

        # Concurrency probe
        self.in_flight: int = 0
        self.max_in_flight: int = 0

        # Categories
        self.categories: list[dict[str, Any]] = []
        self.created: list[dict[str, Any]] = []
        self.updated: list[dict[str, Any]] = []
        self.fail_names: set[str] = set()
        self.categories_fail: bool = False
        self._next_category_id: int = 100

    def script(
        self,
        job_id: str,
        *snapshots: dict[str, Any],
        cancel: list[dict[str, Any]] | None = None,
    ) -> None:
        self.scripts[job_id] = list(snapshots)
        if cancel is not None:
            self.cancel_scripts[job_id] = list(cancel)

    def peek(self, job_id: str) -> dict[str, Any] | None:
        script = self.scripts.get(job_id)
        return script[0] if script else None

    def advance(self, job_id: str) -> dict[str, Any] | None:
        script = self.scripts.get(job_id)
        if not script:
            return None
        return script.pop(0) if len(script) > 1 else script[0]

    def count(self, method: str, path: str) -> int:
        return sum(1 for call in self.calls if call == (method, path))

    def active_snapshot(self, kind: str) -> dict[str, Any] | None:
        job_id = self.active.get(kind)
        if job_id is None:
            return None
        snapshot = self.peek(job_id)
        if snapshot is None or snapshot["status"] not in ("pending", "running", "cancelling"):
            return None
        return snapshot

    def start(self, kind: str) -> dict[str, Any]:
        job_id = self.next_start.pop(kind, f"{kind}-job")
        if job_id not in self.scripts:
            self.script(job_id, job_payload(job_id, "pending"))
        self.active[kind] = job_id
        snapshot = self.advance(job_id)
        assert snapshot is not None
        return snapshot

    def cancel(self, job_id: str) -> dict[str, Any] | None:
        if job_id in self.cancel_scripts:
            self.scripts[job_id] = self.cancel_scripts.pop(job_id)
        return self.advance(job_id)

    async def status(self, job_id: str) -> dict[str, Any] | JSONResponse:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.status_delay:
                await asyncio.sleep(self.status_delay)
            if self.status_failures > 0:
                self.status_failures -= 1
                return fail("Database unavailable")
            snapshot = self.advance(job_id)
            if snapshot is None:
                return fail("Job not found", status_code=404)
            return snapshot
        finally:
            self.in_flight -= 1

    def create_category(self, body: dict[str, Any]) -> dict[str, Any]:
        category = {
            "id": str(self._next_category_id),
            "name": body["name"],
            "slug": body["slug"],
            "parent_id": body.get("parent_id"),
            "priority": body.get("priority"),
        }
        self._next_category_id += 1
        self.categories.append(category)
        self.created.append(body)
        return category


def create_app(backend: FakeBackend) -> FastAPI:
    app = FastAPI()

    @app.middleware("http")
    async def record_calls(request: Request, call_next):  # pyright: ignore[reportUnusedFunction]
        backend.calls.append((request.method, request.url.path))
        return await call_next(request)

    # ------------------------------------------------------------------
    # Auto-map
    # ------------------------------------------------------------------

    @app.post("/admin/auto-map/start")
    async def auto_map_start(request: Request):  # pyright: ignore[reportUnusedFunction]
        backend.start_bodies.append(await request.json())
        return ok({"job": backend.start("auto_map")})

    @app.get("/admin/auto-map/status")
    async def auto_map_status(request: Request):  # pyright: ignore[reportUnusedFunction]
        result = await backend.status(request.query_params.get("jobId", ""))
        if isinstance(result, JSONResponse):
            return result
        return ok({"job": result})

    @app.get("/admin/auto-map/active")
    async def auto_map_active():  # pyright: ignore[reportUnusedFunction]
        return ok({"job": backend.active_snapshot("auto_map")})

    @app.post("/admin/auto-map/stop")
    async def auto_map_stop(request: Request):  # pyright: ignore[reportUnusedFunction]
        if backend.cancel_fails:
            return fail("Cancel rejected", status_code=500)
        body = await request.json()
        return ok({"job": backend.cancel(body["jobId"])})

    # ------------------------------------------------------------------
    # Vendor sync
    # ------------------------------------------------------------------

    @app.post("/admin/get-products-from-luxury")
    async def vendor_sync_start(request: Request):  # pyright: ignore[reportUnusedFunction]
        backend.start_bodies.append(await request.json())
        return ok(backend.start("vendor_sync"))

    @app.get("/admin/vendor-sync-status/{job_id}")
    async def vendor_sync_status(job_id: str):  # pyright: ignore[reportUnusedFunction]
        result = await backend.status(job_id)
        if isinstance(result, JSONResponse):
            return result
        return ok(result)

    @app.get("/admin/vendor-sync-active/{vendor_id}")
    async def vendor_sync_active(vendor_id: str):  # pyright: ignore[reportUnusedFunction]
        return ok({"activeJob": backend.active_snapshot("vendor_sync")})

    @app.post("/admin/vendor-sync-cancel/{job_id}")
    async def vendor_sync_cancel(job_id: str):  # pyright: ignore[reportUnusedFunction]
        if backend.cancel_fails:
            return fail("Cancel rejected")
        _ = backend.cancel(job_id)
        return ok({"status": "cancelling", "message": "Cancellation requested"})

    # ------------------------------------------------------------------
    # Size backfill
    # ------------------------------------------------------------------

    @app.post("/admin/backfill-size")
    async def backfill_start():  # pyright: ignore[reportUnusedFunction]
        current = backend.peek("backfill-size")
        if current is not None and current["running"]:
            return ok({"started": False, "message": "Backfill already running"})
        run = backend.next_backfill or [backfill_doc(running=True)]
        backend.script("backfill-size", *run)
        return ok({"started": True, "message": "Backfill started"})

    @app.get("/admin/backfill-size/status")
    async def backfill_status():  # pyright: ignore[reportUnusedFunction]
        return ok(backend.advance("backfill-size") or backfill_doc())

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    @app.get("/admin/get-categories")
    async def get_categories():  # pyright: ignore[reportUnusedFunction]
        if backend.categories_fail:
            return fail("Categories unavailable", status_code=500)
        return ok(backend.categories)

    @app.post("/admin/create-category")
    async def create_category(request: Request):  # pyright: ignore[reportUnusedFunction]
        body = await request.json()
        if body["name"] in backend.fail_names:
            return fail("Duplicate slug")
        return ok(backend.create_category(body))

    @app.put("/admin/update-category")
    async def update_category(request: Request):  # pyright: ignore[reportUnusedFunction]
        body = await request.json()
        backend.updated.append(body)
        for category in backend.categories:
            if str(category["id"]) == body["category_id"]:
                category["priority"] = body["priority"]
        return ok(body)

    return app


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def backend() -> FakeBackend:
    """Provide a fresh scripted admin backend."""
    return FakeBackend()


@pytest_asyncio.fixture
async def api(backend: FakeBackend) -> AsyncIterator[JobApiClient]:
    """Provide a JobApiClient wired to the fake backend."""
    transport = httpx.ASGITransport(app=create_app(backend))
    async with JobApiClient(BASE_URL, token="test-token", transport=transport) as client:
        yield client
