"""
Custom exception hierarchy for centralized error handling.
All exceptions map to appropriate HTTP status codes and render as a flat
``{"error": <code>, "details": <text>}`` body.
"""
from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "internal_server_error",
        details: Optional[str] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response format."""
        body: Dict[str, Any] = {"error": self.error_code}
        if self.details:
            body["details"] = self.details
        return body


class InternalError(AppException):
    """Unexpected failure that escaped every other handler."""

    def __init__(self, details: Optional[str] = None) -> None:
        super().__init__(
            message="An unexpected error occurred",
            status_code=500,
            error_code="internal_server_error",
            details=details,
        )


class UnauthorizedError(AppException):
    """Missing or invalid bearer token."""

    def __init__(self, reason: str = "Missing or invalid credentials") -> None:
        super().__init__(
            message=reason,
            status_code=401,
            error_code="unauthorized",
        )


class MissingConfigError(AppException):
    """Third-party strategy selected without a usable endpoint."""

    def __init__(self, endpoint: Optional[str] = None) -> None:
        if endpoint:
            super().__init__(
                message=f"Third-party endpoint is not a valid URL: {endpoint}",
                status_code=400,
                error_code="invalid_third_party_endpoint",
                details=f"not an absolute http(s) URL: {endpoint}",
            )
        else:
            super().__init__(
                message="Third-party endpoint is not configured",
                status_code=400,
                error_code="missing_third_party_endpoint",
            )


class UpstreamFailureError(AppException):
    """Base class for failures of the third-party ranking delegate."""


class UpstreamStatusError(UpstreamFailureError):
    """Third-party endpoint answered with a non-success status."""

    def __init__(self, upstream_status: int) -> None:
        self.upstream_status = upstream_status
        super().__init__(
            message=f"Third-party endpoint returned status {upstream_status}",
            status_code=502,
            error_code="third_party_failed",
            details=f"upstream status {upstream_status}",
        )


class UpstreamTransportError(UpstreamFailureError):
    """Third-party call failed in transport, timed out or returned garbage."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            message=f"Third-party call failed: {reason}",
            status_code=500,
            error_code="third_party_exception",
            details=reason,
        )


class RankingFailureError(AppException):
    """The ranking computation could not read or score the record store."""

    def __init__(self, reason: str, error_code: str = "ranking_failed") -> None:
        super().__init__(
            message=f"Ranking failed: {reason}",
            status_code=500,
            error_code=error_code,
            details=reason,
        )


class PreferenceReadError(AppException):
    """Preference record could not be read. Handled by falling back to defaults."""

    def __init__(self, user_id: str, reason: str) -> None:
        super().__init__(
            message=f"Could not read preferences for {user_id}: {reason}",
            status_code=500,
            error_code="preference_read_failed",
            details=reason,
        )


class InvalidPreferenceError(AppException):
    """A preference field is malformed and strict parsing is enabled."""

    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        super().__init__(
            message=f"Malformed preference field '{field}': {value!r}",
            status_code=400,
            error_code="invalid_preferences",
            details=f"malformed value for {field}",
        )


class InvalidRequestError(AppException):
    """Query parameters or headers failed request validation."""

    def __init__(self, details: Optional[str] = None) -> None:
        super().__init__(
            message="Request validation failed",
            status_code=422,
            error_code="invalid_request",
            details=details,
        )
