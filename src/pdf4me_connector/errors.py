from __future__ import annotations


class Pdf4meError(RuntimeError):
    pass


class ConfigurationError(Pdf4meError):
    pass


class ValidationError(Pdf4meError):
    """Caller-supplied input is missing or malformed; raised before any request."""


class ProtocolError(Pdf4meError):
    pass


class NetworkError(Pdf4meError):
    pass


class UploadError(Pdf4meError):
    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"blob upload failed: HTTP {status_code} ({body})")


class RequestError(Pdf4meError):
    def __init__(self, status_code: int, body: str, detail: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        self.detail = detail
        message = f"request failed: HTTP {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(f"{message} ({body})")


class PollTimeoutError(Pdf4meError, TimeoutError):
    def __init__(self, attempts: int, elapsed_seconds: float) -> None:
        self.attempts = attempts
        self.elapsed_seconds = elapsed_seconds
        super().__init__(
            f"job still processing after {attempts} poll attempts "
            f"({elapsed_seconds:.1f}s); it may still complete on the server"
        )


class JobCancelledError(Pdf4meError):
    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"job polling canceled after {attempts} poll attempts")
