"""Error types raised by the connection pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of failure kinds, for callers that branch on ``err.kind``."""

    not_found = "not_found"
    api = "api"
    decode = "decode"
    caller_input = "caller_input"


class PagerDutyError(Exception):
    kind: ErrorKind


class NotFoundError(PagerDutyError):
    """The API answered 404 for ``url``."""

    kind = ErrorKind.not_found

    def __init__(self, url: str) -> None:
        super().__init__(url)
        self.url = url


class ApiError(PagerDutyError):
    """Any status outside 200/201/204 other than 404."""

    kind = ErrorKind.api

    def __init__(self, url: str, status: int, payload: Any = None) -> None:
        message = f"Got HTTP {status} back for {url}"
        if payload is not None:
            message += f"\n{payload}"
        super().__init__(message)
        self.url = url
        self.status = status
        self.payload = payload


class DecodeError(PagerDutyError):
    """A successful response carried a body that could not be decoded."""

    kind = ErrorKind.decode

    def __init__(self, url: str | None, body: str, reason: str = "invalid JSON") -> None:
        source = f" in response from {url}" if url else ""
        super().__init__(f"{reason}{source}: {body[:200]!r}")
        self.url = url
        self.body = body
        self.reason = reason


class CallerInputError(PagerDutyError, ValueError):
    """Bad input from the caller: pagination values, paths, or documents."""

    kind = ErrorKind.caller_input

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(message)
        self.value = value
