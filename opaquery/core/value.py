# opaquery/core/value.py
"""
Value tree

Decoded JSON/YAML documents, composed payloads and query results are all
represented as the same closed set of Python types:

    None | bool | int | float | str | list[Value] | dict[str, Value]

Everything in the pipeline that walks a document (YAML key normalization,
emptiness checks) is a structural match over these cases.
"""

from __future__ import annotations

import datetime
from typing import Any, Dict, List, Union

Value = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


def key_to_str(key: Any) -> str:
    """
    String form of a mapping key, spelled the way it appears in YAML/JSON text.

    >>> key_to_str(True), key_to_str(None), key_to_str(3)
    ('true', 'null', '3')
    """
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    if isinstance(key, (datetime.date, datetime.datetime)):
        return key.isoformat()
    if isinstance(key, tuple):
        # PyYAML builds tuple keys from sequence keys ("? [a, b]")
        return "[" + ", ".join(key_to_str(k) for k in key) + "]"
    return str(key)


def normalize(value: Any) -> Value:
    """
    Recursively convert a YAML-decoded document into a JSON-shaped value.

    - mapping keys become strings (see key_to_str)
    - date/datetime scalars become ISO-8601 strings
    - binary scalars are decoded as UTF-8 text
    - tuples become lists, sets become mappings of their members to None

    The result is structurally interchangeable with a JSON decode of the
    same data.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, dict):
        return {key_to_str(k): normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize(v) for v in value]
    if isinstance(value, (set, frozenset)):
        # !!set is a mapping whose values are all null
        return {k: None for k in sorted(key_to_str(m) for m in value)}
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def is_empty(value: Any) -> bool:
    """
    Definedness check.

    A value is empty (undefined) iff it is None or a mapping/sequence of
    length zero. Scalars, including False, 0 and "", are defined.
    """
    if value is None:
        return True
    if isinstance(value, (dict, list, tuple)):
        return len(value) == 0
    return False


def is_mapping(value: Any) -> bool:
    return isinstance(value, dict)
