# opaquery/core/exit.py
"""
Exit Decider

Maps the query result and the --fail-defined / --fail-undefined flags to an
ExitSignal. NON_ZERO_EXIT is an outcome, not a failure: it is returned, never
raised, and never logged at error level.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .value import is_empty


class ExitSignal(str, Enum):
    """
    Outcome of a successful pipeline run.

    - PROCEED: Exit with status 0
    - NON_ZERO_EXIT: Exit with a non-zero status requested by the fail flags
    """
    PROCEED = "proceed"
    NON_ZERO_EXIT = "non_zero_exit"

    @property
    def exit_code(self) -> int:
        return 0 if self is ExitSignal.PROCEED else 1


def decide_exit(result: Any, fail_defined: bool, fail_undefined: bool) -> ExitSignal:
    empty = is_empty(result)
    if fail_defined and not empty:
        return ExitSignal.NON_ZERO_EXIT
    if fail_undefined and empty:
        return ExitSignal.NON_ZERO_EXIT
    return ExitSignal.PROCEED


__all__ = [
    "ExitSignal",
    "decide_exit",
]
