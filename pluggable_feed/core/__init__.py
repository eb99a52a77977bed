"""Core infrastructure components."""
from .exceptions import (
    AppException,
    InternalError,
    InvalidPreferenceError,
    InvalidRequestError,
    MissingConfigError,
    PreferenceReadError,
    RankingFailureError,
    UnauthorizedError,
    UpstreamFailureError,
    UpstreamStatusError,
    UpstreamTransportError,
)

__all__ = [
    "AppException",
    "InternalError",
    "InvalidPreferenceError",
    "InvalidRequestError",
    "MissingConfigError",
    "PreferenceReadError",
    "RankingFailureError",
    "UnauthorizedError",
    "UpstreamFailureError",
    "UpstreamStatusError",
    "UpstreamTransportError",
]
