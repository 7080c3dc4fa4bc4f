from datetime import datetime, timezone
from typing import Any, Dict, Optional


class OperationalError(Exception):
    """An expected failure that can be reported to the caller as-is."""

    default_status_code = 500
    default_error_code = "E_UNEXPECTED_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code or self.default_status_code
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        self.is_operational = True
        self.timestamp = datetime.now(timezone.utc).isoformat()

    @property
    def status(self) -> str:
        return "fail" if str(self.status_code).startswith("4") else "error"

    def to_response(self, debug: bool = False) -> Dict[str, Any]:
        body: Dict[str, Any] = {"status": self.status, "message": self.message}
        if debug:
            body["code"] = self.status_code
            body["errorCode"] = self.error_code
            body["timestamp"] = self.timestamp
            body["details"] = self.details
        return body


class InputValidationError(OperationalError):
    default_status_code = 400
    default_error_code = "E_INPUT_INVALID"


class UpstreamMalformedOutput(OperationalError):
    default_error_code = "E_AI_MALFORMED_OUTPUT"

    def __init__(self, message: str = "The AI response could not be processed. Its JSON structure is invalid.", **kwargs):
        super().__init__(message, **kwargs)


class UpstreamSchemaViolation(OperationalError):
    default_error_code = "E_AI_SCHEMA_VIOLATION"


class UpstreamServiceError(OperationalError):
    """The generation service failed or could not be reached.

    ``upstream_status`` is the status the service answered with, or None
    when no response arrived at all.
    """

    default_status_code = 503
    default_error_code = "E_AI_SERVICE"

    def __init__(self, message: str, status_code: Optional[int] = None, upstream_status: Optional[int] = None, **kwargs):
        super().__init__(message, status_code=status_code, **kwargs)
        self.upstream_status = upstream_status

    @classmethod
    def from_response(cls, upstream_status: Optional[int], payload: Any) -> "UpstreamServiceError":
        return cls(
            f"AI service error: {upstream_status} - {payload}",
            status_code=500,
            upstream_status=upstream_status,
        )

    @classmethod
    def unreachable(cls, reason: str) -> "UpstreamServiceError":
        return cls(f"Could not reach the AI service: {reason}", status_code=503)
