from .kind import BACKFILL_JOB_ID, BackfillSizeKind
from .schema import BackfillStatus

__all__ = ["BACKFILL_JOB_ID", "BackfillSizeKind", "BackfillStatus"]
