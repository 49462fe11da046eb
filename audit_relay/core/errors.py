from __future__ import annotations

from typing import Any, Dict


class RelayError(RuntimeError):
    """Error that is rendered as a ``{"success": false, ...}`` JSON response."""

    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Dict[str, Any] | None = None,
        debug: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}
        self.debug = debug

    def to_response(self, *, expose_details: bool) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "message": self.message}
        body.update({key: value for key, value in self.payload.items() if value is not None})
        if expose_details and self.debug is not None:
            body.setdefault("error", self.debug)
        return body


class InputValidationError(RelayError):
    status_code = 400


class ConfigurationError(RelayError):
    status_code = 500


class QuotaExceededError(RelayError):
    status_code = 429

    def __init__(self, *, client_id: str, current: int, limit: int, window_hours: float) -> None:
        window = f"{window_hours:g}"
        super().__init__(
            f"Audit limit exceeded. Max {limit} per {window} hours.",
            payload={"limit": limit, "current": current},
        )
        self.client_id = client_id
        self.current = current
        self.limit = limit


class UpstreamTerminalError(RelayError):
    """Upstream answered in a way that must not be retried."""


class UpstreamRetryableError(RuntimeError):
    """Transient upstream failure; absorbed by the retry loop."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RetryAbortedError(RuntimeError):
    def __init__(self, operation: str, attempt: int, cause: BaseException) -> None:
        super().__init__(f"{operation} aborted on attempt {attempt}: {cause}")
        self.operation = operation
        self.attempt = attempt
        self.cause = cause


class RetriesExhaustedError(RuntimeError):
    def __init__(self, operation: str, attempts: int, last_error: BaseException | None) -> None:
        super().__init__(f"{operation} failed after {attempts} attempts: {last_error}")
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error


class DeliveryError(RuntimeError):
    """A single recipient could not be reached; never fails the whole request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
