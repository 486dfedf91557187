"""
Error types for the client adapter and the heuristic classification used for display.

Classification matches status codes and substrings of the upstream message. It is
a best-effort mapping, not a protocol: anything unrecognized becomes UNKNOWN.
"""
from enum import Enum
from typing import Optional

import httpx
from pydantic import BaseModel


class ApiError(Exception):
    """A proxy call failed; status_code is None for network-level failures"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ErrorKind(str, Enum):
    INVALID_API_KEY = "invalid_api_key"
    QUOTA_EXCEEDED = "quota_exceeded"
    NETWORK_ERROR = "network_error"
    INVALID_REQUEST = "invalid_request"
    UNKNOWN = "unknown"


class ClassifiedError(BaseModel):
    kind: ErrorKind
    message: str
    user_message: str


USER_MESSAGES = {
    ErrorKind.INVALID_API_KEY: "Your API key is invalid or missing. Check it in Settings.",
    ErrorKind.QUOTA_EXCEEDED: "API quota exceeded. Please wait a moment or check your plan limits.",
    ErrorKind.NETWORK_ERROR: "Network error. Check your connection and try again.",
    ErrorKind.INVALID_REQUEST: "The request was rejected. Try a different prompt or image.",
    ErrorKind.UNKNOWN: "An unexpected error occurred. Please try again.",
}

# Checked in order; the first matching kind wins
MESSAGE_PATTERNS = (
    (ErrorKind.INVALID_API_KEY, ("api key", "api_key", "apikey", "permission denied",
                                 "permission_denied", "unauthenticated", "unauthorized")),
    (ErrorKind.QUOTA_EXCEEDED, ("quota", "rate limit", "resource_exhausted", "resource exhausted",
                                "too many requests")),
    (ErrorKind.NETWORK_ERROR, ("network", "fetch failed", "failed to fetch", "timeout", "timed out",
                               "connection", "econnrefused", "enotfound")),
    (ErrorKind.INVALID_REQUEST, ("invalid_argument", "invalid argument", "bad request", "invalid request",
                                 "blocked", "safety")),
)

STATUS_KINDS = {
    401: ErrorKind.INVALID_API_KEY,
    403: ErrorKind.INVALID_API_KEY,
    429: ErrorKind.QUOTA_EXCEEDED,
    400: ErrorKind.INVALID_REQUEST,
    422: ErrorKind.INVALID_REQUEST,
}


def classify_error(error: BaseException) -> ClassifiedError:
    """
    Map an exception onto an ErrorKind for display.

    Message patterns are checked before the status code because the proxy reports
    every upstream failure as 500 with the upstream message in the body.
    """
    message = str(error) or error.__class__.__name__
    lowered = message.lower()

    kind = ErrorKind.UNKNOWN
    if isinstance(error, httpx.TransportError):
        kind = ErrorKind.NETWORK_ERROR
    else:
        for candidate, patterns in MESSAGE_PATTERNS:
            if any(pattern in lowered for pattern in patterns):
                kind = candidate
                break

    if kind is ErrorKind.UNKNOWN and isinstance(error, ApiError):
        if error.status_code is None:
            kind = ErrorKind.NETWORK_ERROR
        else:
            kind = STATUS_KINDS.get(error.status_code, ErrorKind.UNKNOWN)

    return ClassifiedError(kind=kind, message=message, user_message=USER_MESSAGES[kind])
