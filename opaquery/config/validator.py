# opaquery/config/validator.py
"""
Configuration Validator

Checks a QueryConfig before any file or network I/O happens.
Returns structured issues with level (warn/error), target flag, message, hint.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Literal
from urllib.parse import urlsplit

if TYPE_CHECKING:
    from .query import QueryConfig


SUPPORTED_FORMATS = ("json", "yaml")

# ASCII word characters; matched with fullmatch so a trailing newline is rejected
HEADER_PATTERN = re.compile(r"[\w-]+:.+", re.ASCII)
METADATA_PATTERN = re.compile(r"[\w-]+=.+", re.ASCII)


@dataclass(frozen=True)
class ConfigIssue:
    """
    Configuration validation issue

    Structured output for CLI/logging.
    """
    level: Literal["warn", "error"]
    target: str  # e.g., "--url"
    message: str
    hint: str = ""

    def __str__(self) -> str:
        hint_str = f" (expected format: {self.hint})" if self.hint else ""
        return f"[{self.target}] {self.message}{hint_str}"


def _is_absolute_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)


def validate_config(cfg: "QueryConfig") -> List[ConfigIssue]:
    """
    Validate configuration values.

    Returns:
        List of issues (warn/error level), in flag order
    """
    issues: List[ConfigIssue] = []

    if not cfg.url:
        issues.append(ConfigIssue(
            level="error",
            target="--url",
            message="URL is required",
        ))
    elif not _is_absolute_url(cfg.url):
        issues.append(ConfigIssue(
            level="error",
            target="--url",
            message=f"must be an absolute http(s) URL: '{cfg.url}'",
        ))

    if cfg.format not in SUPPORTED_FORMATS:
        issues.append(ConfigIssue(
            level="error",
            target="--format",
            message=f"invalid format: '{cfg.format}' (must be 'json' or 'yaml')",
        ))

    for hdr in cfg.headers:
        if not HEADER_PATTERN.fullmatch(hdr):
            issues.append(ConfigIssue(
                level="error",
                target="--http-header",
                message=f"invalid header: '{hdr}'",
                hint="HeaderName: Value",
            ))

    if cfg.metadata:
        if not cfg.metadata_field:
            issues.append(ConfigIssue(
                level="error",
                target="--metadata-field",
                message="metadata field name is required when metadata is given",
            ))

        for meta in cfg.metadata:
            if not METADATA_PATTERN.fullmatch(meta):
                issues.append(ConfigIssue(
                    level="error",
                    target="--metadata",
                    message=f"invalid metadata: '{meta}'",
                    hint="Key=Value",
                ))

    if cfg.timeout is not None and cfg.timeout <= 0:
        issues.append(ConfigIssue(
            level="error",
            target="--timeout",
            message=f"timeout must be positive, got {cfg.timeout}",
        ))

    if cfg.fail_defined and cfg.fail_undefined:
        issues.append(ConfigIssue(
            level="warn",
            target="--fail-defined",
            message="--fail-defined together with --fail-undefined exits non-zero for every result",
        ))

    return issues


__all__ = [
    "ConfigIssue",
    "SUPPORTED_FORMATS",
    "validate_config",
]
