from .timestamp import elapsed_seconds, format_elapsed, fromTimeStamp, toTimeStamp

__all__ = ["elapsed_seconds", "format_elapsed", "fromTimeStamp", "toTimeStamp"]
