from __future__ import annotations


class RunnerError(Exception):
    pass


class RequestParseError(RunnerError):
    """Raised when the stdin payload is not a valid request."""


class BackendExecutionError(RunnerError):
    """A backend failed after being started.

    Carries the session id observed before the failure, if any, so the
    error response can still hand it back to the host.
    """

    def __init__(self, message: str, *, new_session_id: str | None = None):
        super().__init__(message)
        self.new_session_id = new_session_id
