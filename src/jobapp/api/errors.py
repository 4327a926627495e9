"""Normalized errors raised at the HTTP boundary."""

from enum import Enum
from typing import Any, Optional

GENERIC_ERROR_MESSAGE = "Request failed, please try again."

# Keys checked, in order, for a displayable message in an error payload
MESSAGE_KEYS = ("error", "detail", "non_field_errors", "message")


class ErrorKind(str, Enum):
    NETWORK = "network"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    SERVER = "server"
    PRECONDITION = "precondition"
    BUSY = "busy"


class ApiError(Exception):
    """Base exception for every failure a lifecycle operation can report.

    Built once from whatever the transport returned, so callers only ever see
    a kind and a displayable message.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str = GENERIC_ERROR_MESSAGE,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"ApiError(kind={self.kind.value!r}, status_code={self.status_code}, message={self.message!r})"

    @classmethod
    def network(cls, exc: BaseException) -> "ApiError":
        return cls(ErrorKind.NETWORK, f"Network error: {exc}")

    @classmethod
    def precondition(cls, message: str) -> "ApiError":
        return cls(ErrorKind.PRECONDITION, message)

    @classmethod
    def busy(cls, message: str = "This action is already in progress.") -> "ApiError":
        return cls(ErrorKind.BUSY, message)

    @classmethod
    def from_response(cls, status_code: int, payload: Any) -> "ApiError":
        """Build an error from an HTTP status and a decoded (or raw text) body."""
        return cls(kind_for_status(status_code), extract_message(payload), status_code)


def kind_for_status(status_code: int) -> ErrorKind:
    if status_code == 401:
        return ErrorKind.UNAUTHORIZED
    if status_code == 403:
        return ErrorKind.FORBIDDEN
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code >= 500:
        return ErrorKind.SERVER
    return ErrorKind.VALIDATION


def _first_text(value: Any) -> Optional[str]:
    """Reduce a payload value (string, list of strings, nested dict) to one line."""
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (list, tuple)):
        for item in value:
            text = _first_text(item)
            if text:
                return text
        return None
    if isinstance(value, dict):
        return extract_message(value, default=None)
    if value is None:
        return None
    return str(value)


def extract_message(payload: Any, default: Optional[str] = GENERIC_ERROR_MESSAGE) -> Optional[str]:
    """Pull a user-facing message out of the shapes the API is known to return.

    Tries ``error``, ``detail``, ``non_field_errors`` and ``message`` first,
    then the first field error (prefixed with the field name), then a plain
    string body.
    """
    if isinstance(payload, str):
        return payload.strip() or default

    if isinstance(payload, (list, tuple)):
        return _first_text(payload) or default

    if not isinstance(payload, dict) or not payload:
        return default

    for key in MESSAGE_KEYS:
        if key in payload:
            text = _first_text(payload[key])
            if text:
                return text

    for key, value in payload.items():
        text = _first_text(value)
        if text:
            return f"{key}: {text}"

    return default
