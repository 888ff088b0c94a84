# opaquery/config/__init__.py
"""
Query configuration and its validation.

Values come from the command line (and OPAQ_* environment variables);
validation happens here, before any file or network I/O.
"""

from .query import QueryConfig, STDIO_PATH, DEFAULT_METADATA_FIELD
from .validator import validate_config, ConfigIssue, SUPPORTED_FORMATS

__all__ = [
    "QueryConfig",
    "STDIO_PATH",
    "DEFAULT_METADATA_FIELD",
    "validate_config",
    "ConfigIssue",
    "SUPPORTED_FORMATS",
]
