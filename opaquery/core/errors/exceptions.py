# opaquery/core/errors/exceptions.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from . import codes


def _safe_str(x: Any) -> str:
    try:
        return str(x)
    except Exception:
        return "<unstringifiable>"


def _normalize_error_code(code: Any) -> str:
    """
    Keep error_code stable and finite.
    Unknown codes are downgraded instead of leaking into logs and exit reports.
    """
    c = _safe_str(code or codes.UNKNOWN).strip() or codes.UNKNOWN
    if c in codes.KNOWN_CODES:
        return c
    return codes.UNKNOWN


@dataclass
class OpaqueryError(Exception):
    """
    Base exception for every failure of the query pipeline.

    The first OpaqueryError raised aborts the run and is reported verbatim
    at the process boundary. ``details`` holds the diagnostic context
    (offending path, flag, status code, raw body).
    """
    message: str
    error_code: str = codes.UNKNOWN
    error_type: str = "OPAQUERY_ERROR"
    phase: str = "unknown"              # validate / io / query
    details: Dict[str, Any] = field(default_factory=dict)
    cause: Optional[BaseException] = None

    def __post_init__(self) -> None:
        self.error_code = _normalize_error_code(self.error_code)
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.error_type,
            "error_code": self.error_code,
            "message": self.message,
            "phase": self.phase,
            "details": self.details,
        }


@dataclass
class InvalidConfigurationError(OpaqueryError):
    """Bad URL, format, header or metadata shape. Raised before any I/O."""
    error_code: str = codes.INVALID_CONFIGURATION
    error_type: str = "CONFIG_ERROR"
    phase: str = "validate"


@dataclass
class InvalidInputError(OpaqueryError):
    """The composed payload cannot be serialized into a request body."""
    error_code: str = codes.INVALID_INPUT
    error_type: str = "INPUT_ERROR"
    phase: str = "query"


@dataclass
class RequestFailedError(OpaqueryError):
    """Network failure, cancellation, deadline, or a non-200 status."""
    error_code: str = codes.REQUEST_FAILED
    error_type: str = "REQUEST_ERROR"
    phase: str = "query"


@dataclass
class UnexpectedResponseError(OpaqueryError):
    """Unreadable or malformed response envelope, or a result of the wrong shape."""
    error_code: str = codes.UNEXPECTED_RESPONSE
    error_type: str = "RESPONSE_ERROR"
    phase: str = "query"


@dataclass
class InputOutputError(OpaqueryError):
    """File open/read/write failure."""
    error_code: str = codes.IO_ERROR
    error_type: str = "IO_ERROR"
    phase: str = "io"


@dataclass
class DecodeError(InputOutputError):
    """Input stream is not valid JSON/YAML (or not UTF-8)."""
    error_code: str = codes.DECODE_FAILED
    error_type: str = "DECODE_ERROR"
