"""Built-in job kinds and entry-point discovery."""

from importlib.metadata import entry_points
from typing import cast

from ..common.job_kind import JobKind
from .auto_map import AutoMapKind
from .backfill_size import BackfillSizeKind
from .vendor_sync import VendorSyncKind

ENTRY_POINT_GROUP = "admin_jobs.kinds"


def get_kind_registry() -> dict[str, JobKind]:
    """Dynamically load all job kinds from entry points.

    Discovers kinds from [project.entry-points."admin_jobs.kinds"]
    in pyproject.toml. The built-in kinds are always present, so the
    registry also works from a source checkout that was never installed.

    Returns:
        Dict mapping kind name -> JobKind instance

    Raises:
        RuntimeError: If a registered kind fails to load
    """
    registry: dict[str, JobKind] = {
        kind.name: kind for kind in (AutoMapKind(), VendorSyncKind(), BackfillSizeKind())
    }

    for ep in entry_points(group=ENTRY_POINT_GROUP):
        try:
            kind_class = cast(type[JobKind], ep.load())
            kind = kind_class()
            registry[kind.name] = kind
        except Exception as e:
            raise RuntimeError(f"Failed to load job kind '{ep.name}': {e}") from e

    return registry


def get_kind(name: str) -> JobKind:
    registry = get_kind_registry()
    if name not in registry:
        raise KeyError(f"Unknown job kind '{name}'. Available: {sorted(registry)}")
    return registry[name]


__all__ = [
    "AutoMapKind",
    "BackfillSizeKind",
    "ENTRY_POINT_GROUP",
    "VendorSyncKind",
    "get_kind",
    "get_kind_registry",
]
