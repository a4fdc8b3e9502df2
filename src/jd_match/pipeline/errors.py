"""Error taxonomy for the analysis pipeline."""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from typing import Any


class InputError(ValueError):
    """Raised when a caller omits required input text."""


class ErrorKind(str, enum.Enum):
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    PROVIDER = "provider_error"
    NOT_CONFIGURED = "not_configured"
    EMPTY_OUTPUT = "empty_output"
    MALFORMED_OUTPUT = "malformed_output"
    INTERNAL = "internal"


@dataclass(frozen=True)
class PipelineError:
    kind: ErrorKind
    message: str = ""

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}" if self.message else self.kind.value


@dataclass(frozen=True)
class TaskOutcome:
    """Either a validated payload or the error that prevented one."""

    value: Any = None
    error: PipelineError | None = None
    raw_text: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any, raw_text: str = "") -> TaskOutcome:
        return cls(value=value, raw_text=raw_text)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str = "", raw_text: str = "") -> TaskOutcome:
        return cls(error=PipelineError(kind, message), raw_text=raw_text)


def classify_exception(exc: BaseException) -> ErrorKind:
    """Map an SDK or network exception to an ErrorKind using its HTTP status."""
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return ErrorKind.TIMEOUT
    status = getattr(exc, "status_code", None)
    if status in (401, 403):
        return ErrorKind.AUTH
    if status == 429:
        return ErrorKind.RATE_LIMIT
    name = type(exc).__name__
    if "Timeout" in name:
        return ErrorKind.TIMEOUT
    if "Connection" in name or isinstance(exc, (ConnectionError, OSError)):
        return ErrorKind.TRANSPORT
    if "Authentication" in name or "PermissionDenied" in name:
        return ErrorKind.AUTH
    if "RateLimit" in name:
        return ErrorKind.RATE_LIMIT
    return ErrorKind.PROVIDER
