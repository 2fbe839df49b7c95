"""Error hierarchy for admin backend calls and job control."""


class JobClientError(Exception):
    """Base class for every error surfaced by the job client."""

    def __init__(self, message: str):
        self.message: str = message
        super().__init__(message)


class TransportError(JobClientError):
    """No response was received (connection refused, timeout, ...)."""

    def __init__(self, detail: str):
        self.detail: str = detail
        super().__init__(f"Network error: {detail}")


class ApiError(JobClientError):
    """A response arrived but reports failure in its body."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code: int | None = status_code
        super().__init__(message)


class JobStateError(JobClientError):
    """The requested action does not fit the current job state."""
