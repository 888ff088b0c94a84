# opaquery/__init__.py
"""
opaquery - query a remote policy decision service from CI

Sends structured input to a decision service (e.g. an OPA server) as
{"input": ...}, writes the {"result": ...} it answers with, and turns the
result into an exit code:

    $ opaquery -u https://opa.example.com/v1/data/ci/deny -i plan.json --fail-defined

Library usage:

    >>> import asyncio
    >>> from opaquery import QueryConfig, run_query
    >>> cfg = QueryConfig(url="https://opa.example.com/v1/data/ci/deny", input="plan.json")
    >>> signal = asyncio.run(run_query(cfg, stdin=sys.stdin, stdout=sys.stdout))
"""

__version__ = "0.1.0"

from .config import QueryConfig
from .core.client import QueryClient, QueryContext, QueryInput
from .core.errors import (
    OpaqueryError,
    InvalidConfigurationError,
    InvalidInputError,
    RequestFailedError,
    UnexpectedResponseError,
    InputOutputError,
    DecodeError,
)
from .core.exit import ExitSignal, decide_exit
from .core.pipeline import finish_query, prepare_query, run_query

__all__ = [
    "__version__",
    "QueryConfig",
    "QueryClient",
    "QueryContext",
    "QueryInput",
    "OpaqueryError",
    "InvalidConfigurationError",
    "InvalidInputError",
    "RequestFailedError",
    "UnexpectedResponseError",
    "InputOutputError",
    "DecodeError",
    "ExitSignal",
    "decide_exit",
    "finish_query",
    "prepare_query",
    "run_query",
]
