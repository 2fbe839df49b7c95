from .kind import VendorSyncKind
from .schema import LUXURY_VENDOR_ID, VendorSyncParams

__all__ = ["LUXURY_VENDOR_ID", "VendorSyncKind", "VendorSyncParams"]
