# opaquery/core/pipeline.py
"""
Query pipeline

    validate config -> read input -> compose payload -> query -> write output -> decide exit

Stages run strictly in order; the first OpaqueryError aborts the run and
propagates unchanged. A successful run returns an ExitSignal.

The stages around the network exchange are plain blocking calls and are
exposed on their own (prepare_query / finish_query) so a caller can keep
them outside its event loop.
"""

from __future__ import annotations

import logging
from typing import IO, Any, Optional

from opaquery.config import QueryConfig
from .client import QueryClient, QueryContext, QueryInput, parse_header
from .composer import compose
from .decoder import read_input
from .encoder import write_output
from .exit import ExitSignal, decide_exit


def prepare_query(
    cfg: QueryConfig,
    *,
    stdin: IO[Any],
    logger: Optional[logging.Logger] = None,
) -> QueryInput:
    """
    Validate the config, read the input and compose the request payload.

    Raises:
        InvalidConfigurationError: Config rejected, or metadata into non-object data
        InputOutputError: Input cannot be read or decoded
    """
    log = logger or logging.getLogger(__name__)
    log.debug(f"starting inquiry: {cfg.to_dict()}")

    cfg.validate()
    for issue in cfg.issues():
        if issue.level == "warn":
            log.warning(str(issue))

    decoded = read_input(cfg.input, cfg.format, stdin)

    payload = compose(
        decoded,
        metadata_entries=cfg.metadata,
        metadata_field=cfg.metadata_field,
        data_field=cfg.data_field,
    )

    return QueryInput(
        url=cfg.url,
        data=payload,
        headers=[parse_header(hdr) for hdr in cfg.headers],
    )


def finish_query(
    result: Any,
    cfg: QueryConfig,
    *,
    stdout: IO[str],
    logger: Optional[logging.Logger] = None,
) -> ExitSignal:
    """Write the result and turn it into an ExitSignal."""
    log = logger or logging.getLogger(__name__)
    write_output(result, cfg.output, stdout)

    log.debug("exiting inquiry")
    return decide_exit(result, cfg.fail_defined, cfg.fail_undefined)


async def run_query(
    cfg: QueryConfig,
    *,
    stdin: IO[Any],
    stdout: IO[str],
    client: Optional[QueryClient] = None,
    ctx: Optional[QueryContext] = None,
    logger: Optional[logging.Logger] = None,
) -> ExitSignal:
    """
    Run one inquiry against the decision service.

    Args:
        cfg: Configuration for this invocation (validated here)
        stdin: Stream read when cfg.input is "-"
        stdout: Stream written when cfg.output is "-"
        client: QueryClient to use (default: one owning its own HTTP client)
        ctx: Cancellation/deadline handle (default: cfg.timeout, never canceled)
        logger: Logger handle for this run

    Returns:
        ExitSignal.PROCEED or ExitSignal.NON_ZERO_EXIT

    Raises:
        OpaqueryError: Any stage failed
    """
    log = logger or logging.getLogger(__name__)
    query_input = prepare_query(cfg, stdin=stdin, logger=log)

    client = client or QueryClient(log=log)
    ctx = ctx or QueryContext(timeout=cfg.timeout)
    result = await client.query(query_input, ctx=ctx)

    return finish_query(result, cfg, stdout=stdout, logger=log)


__all__ = [
    "finish_query",
    "prepare_query",
    "run_query",
]
