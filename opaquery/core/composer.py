# opaquery/core/composer.py
"""
Data Composer

Builds the payload sent as the query "input" from the decoded documents,
the optional metadata mapping and the optional data field:

    data_field | metadata | payload
    -----------+----------+------------------------------------------------
    no         | no       | decoded, unchanged
    no         | yes      | copy of decoded (must be a mapping) + {metadata_field: metadata}
    yes        | no       | {data_field: decoded}
    yes        | yes      | {data_field: decoded, metadata_field: metadata}
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from .errors import InvalidConfigurationError
from .value import Value, is_mapping


def parse_metadata(entries: Iterable[str]) -> Dict[str, str]:
    """
    Split each "key=value" entry on its first "=". Last duplicate key wins.

    Entries are expected to be validated already (see QueryConfig.validate).
    """
    metadata: Dict[str, str] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep:
            raise InvalidConfigurationError(
                f"invalid metadata: '{entry}'",
                details={"target": "--metadata", "expected_format": "Key=Value"},
            )
        metadata[key] = value
    return metadata


def compose(
    decoded: Value,
    metadata_entries: Iterable[str] = (),
    metadata_field: str = "metadata",
    data_field: str = "",
) -> Value:
    """
    Compose the query payload.

    Raises:
        InvalidConfigurationError: metadata is given without a data field and
            the decoded input is not an object
    """
    entries = list(metadata_entries)
    metadata: Optional[Dict[str, str]] = parse_metadata(entries) if entries else None

    if not data_field:
        if metadata is None:
            return decoded

        if not is_mapping(decoded):
            raise InvalidConfigurationError(
                "metadata can be injected only into object-type data",
                details={
                    "target": "--metadata",
                    "data_type": type(decoded).__name__,
                },
            )
        payload = dict(decoded)
        payload[metadata_field] = metadata
        return payload

    root: Dict[str, Value] = {data_field: decoded}
    if metadata is not None:
        root[metadata_field] = metadata
    return root


__all__ = [
    "compose",
    "parse_metadata",
]
