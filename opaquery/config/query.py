# opaquery/config/query.py
"""
Query Configuration

One immutable record per invocation. Code holds every default; the CLI only
overrides what the user passed.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, Optional, Tuple

from opaquery.core.errors import InvalidConfigurationError
from .validator import ConfigIssue, validate_config


STDIO_PATH = "-"
DEFAULT_METADATA_FIELD = "metadata"


@dataclass(frozen=True)
class QueryConfig:
    """
    url: Query URL of the decision service, e.g. https://opa.example.com/v1/data/foo
    format: Input format, "json" or "yaml"
    input: Input file path, "-" is stdin
    output: Output file path, "-" is stdout
    headers: Raw "Name: value" header strings, in flag order
    metadata: Raw "key=value" metadata strings, in flag order
    metadata_field: Payload field that receives the metadata mapping
    data_field: Payload field that wraps the input data ("" = no wrapping)
    fail_defined: Request a non-zero exit when the result is defined
    fail_undefined: Request a non-zero exit when the result is undefined
    timeout: Request deadline in seconds (None = no deadline)
    """

    url: str = ""
    format: str = "json"
    input: str = STDIO_PATH
    output: str = STDIO_PATH
    headers: Tuple[str, ...] = ()
    metadata: Tuple[str, ...] = ()
    metadata_field: str = DEFAULT_METADATA_FIELD
    data_field: str = ""
    fail_defined: bool = False
    fail_undefined: bool = False
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        # frozen dataclass requires object.__setattr__
        object.__setattr__(self, "headers", tuple(self.headers))
        object.__setattr__(self, "metadata", tuple(self.metadata))

    @classmethod
    def from_args(cls, args: Any) -> "QueryConfig":
        """Build from an argparse namespace (see opaquery.cli.main)."""
        return cls(
            url=args.url or "",
            format=args.format,
            input=args.input,
            output=args.output,
            headers=_as_tuple(args.http_header),
            metadata=_as_tuple(args.metadata),
            metadata_field=args.metadata_field,
            data_field=args.data_field,
            fail_defined=args.fail_defined,
            fail_undefined=args.fail_undefined,
            timeout=args.timeout,
        )

    def issues(self) -> list[ConfigIssue]:
        return validate_config(self)

    def validate(self) -> None:
        """
        Raise InvalidConfigurationError for the first error-level issue.

        Warnings are not raised; callers may log them via issues().
        """
        errors = [issue for issue in self.issues() if issue.level == "error"]
        if not errors:
            return

        first = errors[0]
        details: Dict[str, Any] = {"target": first.target}
        if first.hint:
            details["expected_format"] = first.hint
        if len(errors) > 1:
            details["other_issues"] = [str(issue) for issue in errors[1:]]

        raise InvalidConfigurationError(
            f"invalid configuration: {first.message}",
            details=details,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for debug logging"""
        return asdict(self)


def _as_tuple(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    return tuple(values) if values else ()


__all__ = [
    "DEFAULT_METADATA_FIELD",
    "QueryConfig",
    "STDIO_PATH",
]
