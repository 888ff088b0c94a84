# opaquery/core/decoder.py
"""
Input Decoder

Reads the raw input (a file or the injected stdin stream) and decodes it
into one or more documents:

- json: consecutive top-level JSON values, any whitespace in between
- yaml: "---"-separated YAML documents, keys normalized to strings

Exactly one document is returned as-is; zero or several are returned as a
list in stream order.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any, List, Union

import yaml

from .errors import DecodeError, InputOutputError, InvalidConfigurationError
from .value import Value, normalize

STDIN_PATH = "-"


class _NonStandardConstant(ValueError):
    pass


def _reject_constant(name: str) -> Any:
    # NaN, Infinity and -Infinity are accepted by json but are not JSON
    raise _NonStandardConstant(name)


_json_decoder = json.JSONDecoder(parse_constant=_reject_constant)

Stream = Union[IO[str], IO[bytes]]


def read_input(path: str, fmt: str, stdin: Stream) -> Value:
    """
    Read and decode the query input.

    Args:
        path: File path, or "-" for the stdin collaborator
        fmt: "json" or "yaml"
        stdin: Stream used when path is "-" (text or binary)

    Returns:
        Single document, or list of documents (see module docstring)

    Raises:
        InputOutputError: File cannot be opened or read
        DecodeError: Input is not UTF-8, or not valid JSON/YAML
    """
    if path == STDIN_PATH:
        raw = _read_stream(stdin, source=path)
    else:
        try:
            with open(Path(path), "rb") as f:
                raw = f.read()
        except OSError as e:
            raise InputOutputError(
                f"failed to read input file: {e.strerror or e}",
                details={"path": path},
                cause=e,
            ) from e

    return decode_documents(_to_text(raw, source=path), fmt, source=path)


def decode_documents(text: str, fmt: str, source: str = STDIN_PATH) -> Value:
    """Decode every document in text and apply the collapse rule."""
    if fmt == "json":
        docs = _decode_json_stream(text, source)
    elif fmt == "yaml":
        docs = _decode_yaml_stream(text, source)
    else:
        raise InvalidConfigurationError(
            f"unsupported input format: '{fmt}'",
            details={"target": "--format"},
        )

    if len(docs) == 1:
        return docs[0]
    return docs


def _read_stream(stream: Stream, source: str) -> Union[str, bytes]:
    try:
        return stream.read()
    except OSError as e:
        raise InputOutputError(
            f"failed to read input stream: {e}",
            details={"path": source},
            cause=e,
        ) from e


def _to_text(raw: Union[str, bytes], source: str) -> str:
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(
            "input is not valid UTF-8",
            details={"path": source, "offset": e.start},
            cause=e,
        ) from e


def _skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in " \t\r\n":
        pos += 1
    return pos


def _decode_json_stream(text: str, source: str) -> List[Any]:
    docs: List[Any] = []
    pos = _skip_whitespace(text, 0)
    while pos < len(text):
        try:
            doc, pos = _json_decoder.raw_decode(text, pos)
        except json.JSONDecodeError as e:
            raise DecodeError(
                f"invalid JSON input: {e.msg}",
                details={"path": source, "line": e.lineno, "column": e.colno},
                cause=e,
            ) from e
        except _NonStandardConstant as e:
            line = text.count("\n", 0, pos) + 1
            raise DecodeError(
                f"invalid JSON input: {e} is not a valid JSON value",
                details={"path": source, "line": line, "column": pos - text.rfind("\n", 0, pos)},
                cause=e,
            ) from e
        docs.append(doc)
        pos = _skip_whitespace(text, pos)
    return docs


def _decode_yaml_stream(text: str, source: str) -> List[Any]:
    try:
        return [normalize(doc) for doc in yaml.safe_load_all(text)]
    except yaml.YAMLError as e:
        details = {"path": source}
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            details["line"] = mark.line + 1
            details["column"] = mark.column + 1
        raise DecodeError(
            f"invalid YAML input: {e}",
            details=details,
            cause=e,
        ) from e


__all__ = [
    "STDIN_PATH",
    "decode_documents",
    "read_input",
]
