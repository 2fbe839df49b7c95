"""Bulk taxonomy import.

Walks a nested category mapping (root -> section -> item -> sub-item) and
brings the backend in line with it, one request at a time:

- missing categories are created
- existing ones whose priority differs from their position are updated
- everything else is skipped

Requests are spaced by a small per-depth delay so the admin API is not
flooded. A failing category is counted and its subtree skipped; the import
carries on with the next sibling.
"""

import asyncio
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any, ClassVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .client import JobApiClient
from .common.errors import ApiError, JobClientError
from .common.schema_job import JobLogEntry, JobRequest

DEFAULT_DELAYS: tuple[float, ...] = (0.1, 0.1, 0.05, 0.03)

Taxonomy = Mapping[str, Any] | Sequence[str]


def generate_slug(name: str) -> str:
    slug = name.lower().strip().replace("&", "and")
    slug = re.sub(r"\s+", "-", slug)
    return re.sub(r"[^a-z0-9\-]", "", slug)


class ExistingCategory(BaseModel):
    id: str
    name: str
    slug: str | None = None
    parent_id: str | None = None
    priority: int = 0

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore")

    @field_validator("id", "parent_id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> object:
        return str(v) if isinstance(v, int) else v

    @field_validator("priority", mode="before")
    @classmethod
    def default_priority(cls, v: object) -> object:
        return 0 if v is None else v


def flatten_categories(
    categories: Iterable[Mapping[str, Any]],
    result: list[ExistingCategory] | None = None,
) -> list[ExistingCategory]:
    """Depth-first flat list of a category tree (``children`` nesting)."""
    if result is None:
        result = []
    for cat in categories:
        result.append(
            ExistingCategory.model_validate({**cat, "name": str(cat.get("name", "")).lower()})
        )
        children = cat.get("children")
        if children:
            _ = flatten_categories(children, result)
    return result


def find_existing(
    name: str, parent_id: str | None, flat: Iterable[ExistingCategory]
) -> ExistingCategory | None:
    slug = generate_slug(name)
    for cat in flat:
        if cat.slug == slug and cat.parent_id == parent_id:
            return cat
    return None


def count_items(taxonomy: Taxonomy) -> int:
    """Number of categories described by ``taxonomy`` (every key and list item)."""
    if not isinstance(taxonomy, Mapping):
        return len(taxonomy)

    count = 0
    for value in taxonomy.values():
        count += 1
        if isinstance(value, Mapping):
            count += count_items(value)
        elif isinstance(value, Sequence) and not isinstance(value, str):
            count += len(value)
    return count


class ImportReport(BaseModel):
    total: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    logs: list[JobLogEntry] = Field(default_factory=list)


class CategoryImporter:
    """Sequential, rate-limited taxonomy import against the admin API."""

    categories_path: ClassVar[str] = "/admin/get-categories"
    create_path: ClassVar[str] = "/admin/create-category"
    update_path: ClassVar[str] = "/admin/update-category"

    def __init__(
        self,
        api: JobApiClient,
        *,
        delays: Sequence[float] = DEFAULT_DELAYS,
        on_log: Callable[[JobLogEntry], None] | None = None,
    ):
        self.api: JobApiClient = api
        self.delays: tuple[float, ...] = tuple(delays)
        self.on_log: Callable[[JobLogEntry], None] | None = on_log

    async def fetch_existing(self) -> list[ExistingCategory]:
        data = await self.api.request(
            JobRequest(method="GET", path=self.categories_path),
            "Failed to fetch existing categories",
        )
        if not isinstance(data, list):
            return []
        return flatten_categories(item for item in data if isinstance(item, dict))

    async def run(self, taxonomy: Mapping[str, Any]) -> ImportReport:
        flat = await self.fetch_existing()

        report = ImportReport(total=count_items(taxonomy))
        self._log(report, f"Starting import of approximately {report.total} categories...", "info")

        await self._walk(taxonomy, None, (), 0, flat, report)

        self._log(
            report,
            f"Import completed! Created: {report.created}, Updated: {report.updated}, "
            + f"Skipped: {report.skipped}, Failed: {report.failed}",
            "info",
        )
        return report

    # ---------------------------
    # Walk
    # ---------------------------

    async def _walk(
        self,
        node: Taxonomy,
        parent_id: str | None,
        path: tuple[str, ...],
        depth: int,
        flat: list[ExistingCategory],
        report: ImportReport,
    ) -> None:
        if isinstance(node, Mapping):
            items: list[tuple[str, Any]] = list(node.items())
        else:
            items = [(name, None) for name in node]

        for priority, (name, children) in enumerate(items, start=1):
            label = " > ".join((*path, name))
            try:
                category = await self._sync_one(name, parent_id, priority, label, flat, report)
            except JobClientError as e:
                report.failed += 1
                self._log(report, f"Failed: {label} - {e.message}", "error")
                continue

            await asyncio.sleep(self._delay(depth))

            if children and not isinstance(children, str):
                await self._walk(children, category.id, (*path, name), depth + 1, flat, report)

    async def _sync_one(
        self,
        name: str,
        parent_id: str | None,
        priority: int,
        label: str,
        flat: list[ExistingCategory],
        report: ImportReport,
    ) -> ExistingCategory:
        existing = find_existing(name, parent_id, flat)

        if existing is None:
            self._log(report, f"Creating: {label} (priority: {priority})", "pending")
            created = await self._create(name, parent_id, priority)
            flat.append(created)
            report.created += 1
            self._log(report, f"Created: {label} (priority: {priority})", "success")
            return created

        if existing.priority != priority:
            self._log(
                report,
                f"Updating priority: {label} ({existing.priority} -> {priority})",
                "pending",
            )
            await self._update_priority(existing, name, priority)
            existing.priority = priority
            report.updated += 1
            self._log(report, f"Updated: {label} priority to {priority}", "updated")
            return existing

        report.skipped += 1
        self._log(report, f"Skipped (exists, priority OK): {label}", "skipped")
        return existing

    async def _create(self, name: str, parent_id: str | None, priority: int) -> ExistingCategory:
        slug = generate_slug(name)
        data = await self.api.request(
            JobRequest(
                method="POST",
                path=self.create_path,
                json_body={
                    "name": name,
                    "slug": slug,
                    "metadata": {"icon": slug},
                    "priority": priority,
                    "parent_id": parent_id,
                },
            ),
            "Failed to create category",
        )
        if not isinstance(data, dict) or data.get("id") is None:
            raise ApiError("Failed to create category: response carries no id")

        return ExistingCategory(
            id=data["id"],
            name=name.lower(),
            slug=data.get("slug") or slug,
            parent_id=parent_id,
            priority=priority,
        )

    async def _update_priority(self, category: ExistingCategory, name: str, priority: int) -> None:
        _ = await self.api.request(
            JobRequest(
                method="PUT",
                path=self.update_path,
                json_body={
                    "category_id": category.id,
                    "name": name,
                    "slug": category.slug,
                    "priority": priority,
                    "parent_id": category.parent_id,
                },
            ),
            "Failed to update category",
        )

    def _delay(self, depth: int) -> float:
        if not self.delays:
            return 0.0
        return self.delays[min(depth, len(self.delays) - 1)]

    def _log(self, report: ImportReport, message: str, status: str) -> None:
        entry = JobLogEntry(time=datetime.now().strftime("%H:%M:%S"), status=status, message=message)
        report.logs.append(entry)
        if status == "error":
            logger.error(message)
        else:
            logger.info(message)
        if self.on_log is not None:
            self.on_log(entry)
