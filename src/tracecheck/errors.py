"""Exceptions raised by the harness."""


class DecodeError(ValueError):
    """The payload is not a well-formed JSON array of export requests."""

    def __init__(self, message: str, payload: bytes | str | None = None):
        super().__init__(message)
        self.payload = payload


class ResetFailure(RuntimeError):
    """The backend did not acknowledge a clear request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConcurrentPollError(RuntimeError):
    """A second poll was started against an environment that is already polling."""


class TeardownError(RuntimeError):
    """One or more managed resources failed to stop."""

    def __init__(self, errors: list[BaseException]):
        self.errors = list(errors)
        details = "; ".join(f"{type(e).__name__}: {e}" for e in self.errors)
        super().__init__(f"{len(self.errors)} resource(s) failed to stop: {details}")
