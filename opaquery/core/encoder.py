# opaquery/core/encoder.py
"""
Output Encoder

Writes the query result as a single JSON document, two-space indented and
newline-terminated, to a file or the injected stdout stream.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any

from .errors import InputOutputError

STDOUT_PATH = "-"


def encode_result(result: Any) -> str:
    try:
        return json.dumps(result, indent=2, ensure_ascii=False, allow_nan=False) + "\n"
    except (TypeError, ValueError) as e:
        raise InputOutputError(
            f"result is not JSON-serializable: {e}",
            details={"result": repr(result)},
            cause=e,
        ) from e


def write_output(result: Any, path: str, stdout: IO[str]) -> None:
    """
    Serialize result and write it to path ("-" = stdout collaborator).

    Raises:
        InputOutputError: Output file cannot be created or written
    """
    text = encode_result(result)

    if path == STDOUT_PATH:
        try:
            stdout.write(text)
            stdout.flush()
        except OSError as e:
            raise InputOutputError(
                f"failed to write output: {e}",
                details={"path": path},
                cause=e,
            ) from e
        return

    try:
        with open(Path(path), "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise InputOutputError(
            f"failed to write output file: {e.strerror or e}",
            details={"path": path},
            cause=e,
        ) from e


__all__ = [
    "STDOUT_PATH",
    "encode_result",
    "write_output",
]
