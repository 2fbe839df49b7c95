from .kind import AutoMapKind

__all__ = ["AutoMapKind"]
