# opaquery/core/errors/__init__.py
"""
Error types for the query pipeline.

This package defines the components responsible for:
- Representing errors
- Categorizing errors (stable error codes)

No side effects on import.
"""

from . import codes
from .exceptions import (
    OpaqueryError,
    InvalidConfigurationError,
    InvalidInputError,
    RequestFailedError,
    UnexpectedResponseError,
    InputOutputError,
    DecodeError,
)

__all__ = [
    "codes",
    "OpaqueryError",
    "InvalidConfigurationError",
    "InvalidInputError",
    "RequestFailedError",
    "UnexpectedResponseError",
    "InputOutputError",
    "DecodeError",
]
