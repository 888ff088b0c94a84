# opaquery/core/client.py
"""
Query Client

Speaks the decision service's HTTP envelope protocol:

    POST <url>
    Content-Type: application/json

    {"input": <payload>}

    200 OK
    {"result": <any>}

Any other status, an unreadable body or a malformed envelope is a failure.
The exchange runs under a QueryContext: setting its cancel event or hitting
its deadline aborts the in-flight request and raises RequestFailedError.
No retries are performed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

import httpx
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from .errors import (
    InvalidInputError,
    RequestFailedError,
    UnexpectedResponseError,
)
from .value import Value

logger = logging.getLogger(__name__)

Header = Tuple[str, str]


class QueryResponse(BaseModel):
    """
    Response envelope.

    A missing "result" key means the decision is undefined.
    """
    model_config = ConfigDict(extra="ignore")

    result: Any = None


@dataclass
class QueryInput:
    url: str
    data: Value = None
    headers: List[Header] = field(default_factory=list)


@dataclass
class QueryContext:
    """
    Cancellation handle for one query.

    timeout:
        Deadline for the whole exchange, in seconds. None = wait forever.
    cancelled:
        Set it (or call cancel()) to abort the in-flight request.
    """
    timeout: Optional[float] = None
    cancelled: asyncio.Event = field(default_factory=asyncio.Event)

    def cancel(self) -> None:
        self.cancelled.set()


def parse_header(raw: str) -> Header:
    """
    Split a "Name: value" header on its first colon, trimming both parts.

    >>> parse_header("X-Token:  ABC123 ")
    ('X-Token', 'ABC123')
    """
    name, _, value = raw.partition(":")
    return name.strip(), value.strip()


class QueryClient:
    """
    HTTP client for the decision service.

    http_client:
        Optional caller-owned httpx.AsyncClient (e.g. with a MockTransport).
        When omitted, a client without its own timeout is created per query;
        the QueryContext deadline applies instead.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        *,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self._http_client = http_client
        self._log = log or logger

    async def query(
        self,
        query_input: QueryInput,
        *,
        result_type: Any = Any,
        ctx: Optional[QueryContext] = None,
    ) -> Any:
        """
        Send the query and return its result, validated into result_type.

        Raises:
            InvalidInputError: payload cannot be serialized, or the request cannot be built
            RequestFailedError: transport failure, cancellation, deadline, or non-200 status
            UnexpectedResponseError: unreadable body, malformed envelope, or result type mismatch
        """
        ctx = ctx or QueryContext()
        self._log.debug(f"sending query to {query_input.url}")

        body = _encode_request(query_input)

        if ctx.cancelled.is_set():
            raise RequestFailedError(
                "request canceled before it was sent",
                details={"url": query_input.url, "reason": "canceled"},
            )

        raw = await self._run_with_context(self._exchange(query_input, body), ctx, query_input.url)
        self._log.debug(f"received {len(raw)} bytes from {query_input.url}")

        return _decode_result(raw, result_type)

    # =========================================================
    # Cancellation
    # =========================================================

    async def _run_with_context(self, coro, ctx: QueryContext, url: str) -> bytes:
        task = asyncio.ensure_future(coro)
        cancel_waiter = asyncio.ensure_future(ctx.cancelled.wait())
        try:
            done, _ = await asyncio.wait(
                {task, cancel_waiter},
                timeout=ctx.timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            cancel_waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        # Reap the request task; its outcome is superseded by the cancellation.
        await asyncio.gather(task, return_exceptions=True)

        if ctx.cancelled.is_set():
            reason = "canceled"
            message = "request canceled"
        else:
            reason = "deadline exceeded"
            message = f"request deadline exceeded after {ctx.timeout}s"
        raise RequestFailedError(message, details={"url": url, "reason": reason})

    # =========================================================
    # HTTP exchange
    # =========================================================

    async def _exchange(self, query_input: QueryInput, body: bytes) -> bytes:
        if self._http_client is not None:
            return await self._send(self._http_client, query_input, body)

        async with httpx.AsyncClient(timeout=None) as client:
            return await self._send(client, query_input, body)

    async def _send(self, client: httpx.AsyncClient, query_input: QueryInput, body: bytes) -> bytes:
        # Custom headers first; Content-Type is always appended, even when a
        # custom header with the same name exists.
        headers = [*query_input.headers, ("Content-Type", "application/json")]

        try:
            request = client.build_request("POST", query_input.url, headers=headers, content=body)
        except (httpx.InvalidURL, ValueError) as e:
            raise InvalidInputError(
                f"failed to build request: {e}",
                details={"url": query_input.url},
                cause=e,
            ) from e

        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise RequestFailedError(
                f"request to decision service failed: {e}",
                details={"url": query_input.url},
                cause=e,
            ) from e

        try:
            if response.status_code != httpx.codes.OK:
                raw = await _read_best_effort(response)
                raise RequestFailedError(
                    "status code is not OK",
                    details={
                        "url": query_input.url,
                        "code": response.status_code,
                        "body": raw.decode("utf-8", errors="replace"),
                    },
                )
            return await _read_body(response)
        finally:
            await response.aclose()


def _encode_request(query_input: QueryInput) -> bytes:
    try:
        text = json.dumps({"input": query_input.data}, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(
            f"failed to serialize query input: {e}",
            details={"input": repr(query_input.data)},
            cause=e,
        ) from e
    return text.encode("utf-8")


async def _read_best_effort(response: httpx.Response) -> bytes:
    chunks = bytearray()
    try:
        async for chunk in response.aiter_bytes():
            chunks.extend(chunk)
    except httpx.HTTPError:
        # The status code failure is reported either way.
        pass
    return bytes(chunks)


async def _read_body(response: httpx.Response) -> bytes:
    chunks = bytearray()
    try:
        async for chunk in response.aiter_bytes():
            chunks.extend(chunk)
    except httpx.HTTPError as e:
        raise UnexpectedResponseError(
            f"failed to read response body: {e}",
            details={"body": bytes(chunks).decode("utf-8", errors="replace")},
            cause=e,
        ) from e
    return bytes(chunks)


def _decode_result(raw: bytes, result_type: Any) -> Any:
    body = raw.decode("utf-8", errors="replace")

    try:
        if raw.strip() == b"null":
            # A bare null decodes into an empty envelope: undefined result.
            envelope = QueryResponse()
        else:
            envelope = QueryResponse.model_validate_json(raw)
    except ValidationError as e:
        raise UnexpectedResponseError(
            "response is not a {\"result\": ...} envelope",
            details={"body": body},
            cause=e,
        ) from e

    # Round-trip the result through JSON so its shape is validated against
    # result_type independently of the envelope decode.
    try:
        encoded = json.dumps(envelope.result)
    except (TypeError, ValueError) as e:
        raise UnexpectedResponseError(
            f"failed to re-encode result: {e}",
            details={"body": body},
            cause=e,
        ) from e

    try:
        return TypeAdapter(result_type).validate_json(encoded)
    except ValidationError as e:
        raise UnexpectedResponseError(
            "result does not match the expected type",
            details={"result": encoded, "errors": e.errors(include_url=False)},
            cause=e,
        ) from e


__all__ = [
    "Header",
    "QueryClient",
    "QueryContext",
    "QueryInput",
    "QueryResponse",
    "parse_header",
]
