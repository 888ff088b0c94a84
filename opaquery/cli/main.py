# opaquery/cli/main.py
import argparse
import asyncio
import os
import signal
import sys
from typing import Any, Dict, IO, List, Mapping, Optional

import httpx

from opaquery import __version__
from opaquery.config import QueryConfig, DEFAULT_METADATA_FIELD, STDIO_PATH, SUPPORTED_FORMATS
from opaquery.core.client import QueryClient, QueryContext, QueryInput
from opaquery.core.errors import OpaqueryError
from opaquery.core.pipeline import finish_query, prepare_query
from opaquery.utils.log import setup_logger

ENV_URL = "OPAQ_URL"
ENV_HEADER = "OPAQ_HEADER"


def build_parser(environ: Mapping[str, str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        "opaquery",
        description="Query a policy decision server and exit according to its result",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    parser.add_argument(
        "--fail-defined", action="store_true",
        help="exit with non-zero exit code on defined/non-empty result",
    )
    parser.add_argument(
        "--fail-undefined", action="store_true",
        help="exit with non-zero exit code on undefined/empty result",
    )

    parser.add_argument(
        "--url", "-u", default=environ.get(ENV_URL),
        help=f"query URL of the decision server, e.g. https://opa.example.com/v1/data/foo (env: {ENV_URL})",
    )
    parser.add_argument(
        "--input", "-i", default=STDIO_PATH,
        help="input file, '-' is stdin (default: -)",
    )
    parser.add_argument(
        "--output", "-o", default=STDIO_PATH,
        help="output file, '-' is stdout (default: -)",
    )
    parser.add_argument(
        "--format", "-f", default="json",
        help=f"input data format [{','.join(SUPPORTED_FORMATS)}] (default: json)",
    )

    parser.add_argument(
        "--http-header", "-H", action="append", default=None,
        help=f"custom header of the HTTP request, 'Name: value' (repeatable, env: {ENV_HEADER})",
    )
    parser.add_argument(
        "--metadata", "-m", action="append", default=None,
        help="metadata injected into the input, 'key=value' (repeatable)",
    )
    parser.add_argument(
        "--metadata-field", default=DEFAULT_METADATA_FIELD,
        help=f"field name that receives the metadata (default: {DEFAULT_METADATA_FIELD})",
    )
    parser.add_argument(
        "--data-field", default="",
        help="field name that wraps the input data (default: no wrapping)",
    )

    parser.add_argument(
        "--timeout", type=float, default=None,
        help="request deadline in seconds (default: none)",
    )
    parser.add_argument(
        "--log-level", "-l", default="info",
        help="logging level [debug,info,warn,error] (default: info)",
    )
    return parser


def _env_headers(environ: Mapping[str, str]) -> Optional[List[str]]:
    raw = environ.get(ENV_HEADER)
    if not raw:
        return None
    return [h.strip() for h in raw.split(",") if h.strip()]


def _format_error(err: OpaqueryError) -> str:
    parts = [str(err)]
    for key, value in err.details.items():
        parts.append(f"{key}={value!r}")
    return " ".join(parts)


async def _exchange(client: QueryClient, query_input: QueryInput, timeout: Optional[float]) -> Any:
    ctx = QueryContext(timeout=timeout)

    # Ctrl-C aborts the in-flight request instead of waiting for the server.
    # Only installed here: the blocking input read runs outside the loop and
    # gets the default KeyboardInterrupt.
    loop = asyncio.get_running_loop()
    installed = False
    try:
        loop.add_signal_handler(signal.SIGINT, ctx.cancel)
        installed = True
    except (NotImplementedError, RuntimeError, ValueError):
        # Windows event loops, or not running in the main thread
        pass

    try:
        return await client.query(query_input, ctx=ctx)
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


def main(
    argv: Optional[List[str]] = None,
    *,
    stdin: Optional[IO[Any]] = None,
    stdout: Optional[IO[str]] = None,
    stderr: Optional[IO[str]] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Command line entry point.

    Returns:
        0 when the result passes the fail flags, 1 on a requested non-zero
        exit or on any error
    """
    environ = os.environ if environ is None else environ
    parser = build_parser(environ)
    args = parser.parse_args(argv)

    if args.http_header is None:
        args.http_header = _env_headers(environ)

    try:
        log = setup_logger(args.log_level, stream=stderr)
    except ValueError as e:
        print(f"[ERROR] {e}", file=stderr or sys.stderr)
        return 1

    cfg = QueryConfig.from_args(args)
    log.debug(f"starting opaquery {__version__}")

    client = QueryClient(http_client, log=log)
    try:
        query_input = prepare_query(
            cfg,
            stdin=stdin if stdin is not None else sys.stdin.buffer,
            logger=log,
        )
        result = asyncio.run(_exchange(client, query_input, cfg.timeout))
        outcome = finish_query(
            result,
            cfg,
            stdout=stdout if stdout is not None else sys.stdout,
            logger=log,
        )
    except OpaqueryError as err:
        log.error(_format_error(err))
        details: Dict[str, Any] = {"config": cfg.to_dict(), **err.to_dict()}
        log.debug(f"error detail: {details}", exc_info=err)
        return 1
    except KeyboardInterrupt:
        log.error("interrupted")
        return 1

    log.debug(f"exiting: {outcome.value}")
    return outcome.exit_code



if __name__ == "__main__":
    sys.exit(main())
