# opaquery/core/errors/codes.py
from __future__ import annotations

from typing import Final


# ---- canonical error codes (stable public contract) ----
# generic
UNKNOWN: Final[str] = "UNKNOWN"

# configuration
INVALID_CONFIGURATION: Final[str] = "INVALID_CONFIGURATION"

# query envelope / transport
INVALID_INPUT: Final[str] = "INVALID_INPUT"
REQUEST_FAILED: Final[str] = "REQUEST_FAILED"
UNEXPECTED_RESPONSE: Final[str] = "UNEXPECTED_RESPONSE"

# files / streams
IO_ERROR: Final[str] = "IO_ERROR"
DECODE_FAILED: Final[str] = "DECODE_FAILED"


# ---- semantic groups (internal helpers) ----

QUERY_CODES: Final[set[str]] = {
    INVALID_INPUT,
    REQUEST_FAILED,
    UNEXPECTED_RESPONSE,
}

IO_CODES: Final[set[str]] = {
    IO_ERROR,
    DECODE_FAILED,
}

# Every code an OpaqueryError may carry.
KNOWN_CODES: Final[set[str]] = {
    UNKNOWN,
    INVALID_CONFIGURATION,
} | QUERY_CODES | IO_CODES
