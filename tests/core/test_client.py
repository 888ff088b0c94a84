# tests/core/test_client.py
"""
Query client tests

Uses httpx.MockTransport for in-process testing (no port binding).

Covers:
1) Request envelope, custom headers and Content-Type
2) Status / body / envelope failures and their error kinds
3) Result type validation
4) Cancellation and deadline
"""

import asyncio
import json
from typing import Any, Dict, List

import httpx
import pytest
from pydantic import BaseModel

from opaquery.core.client import QueryClient, QueryContext, QueryInput, parse_header
from opaquery.core.errors import (
    InvalidInputError,
    RequestFailedError,
    UnexpectedResponseError,
    codes,
)

pytestmark = pytest.mark.anyio

URL = "https://opa.example.com/v1/data/xxx"


class BrokenStream(httpx.AsyncByteStream):
    """Response body that fails after the first chunk"""
    async def __aiter__(self):
        yield b'{"result": {"al'
        raise httpx.ReadError("connection reset (simulated)")


class Decision(BaseModel):
    allow: bool


def result_response(result: Any) -> httpx.Response:
    return httpx.Response(200, json={"result": result})


async def run_query(handler, data: Any = None, **kwargs) -> Any:
    headers = kwargs.pop("headers", [])
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = QueryClient(http_client)
        return await client.query(QueryInput(url=URL, data=data, headers=headers), **kwargs)


class TestEnvelope:
    async def test_basic_query(self):
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return result_response({"allow": True})

        result = await run_query(
            handler,
            data={"user": "blue"},
            headers=[("X-Token", "ABC123"), ("X-Sign", "Five")],
        )

        assert result == {"allow": True}
        assert len(requests) == 1

        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == URL
        assert request.headers["X-Token"] == "ABC123"
        assert request.headers["X-Sign"] == "Five"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"input": {"user": "blue"}}

    async def test_content_type_is_always_appended(self):
        seen: Dict[str, List[str]] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["content-type"] = request.headers.get_list("content-type")
            return result_response(True)

        await run_query(handler, data=1, headers=[("Content-Type", "text/plain")])
        assert seen["content-type"] == ["text/plain", "application/json"]

    async def test_null_input_is_sent(self):
        bodies: List[bytes] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.content)
            return result_response(None)

        assert await run_query(handler, data=None) is None
        assert json.loads(bodies[0]) == {"input": None}

    async def test_missing_result_is_undefined(self):
        result = await run_query(lambda request: httpx.Response(200, json={}))
        assert result is None

    async def test_null_body_is_undefined(self):
        result = await run_query(lambda request: httpx.Response(200, content=b" null\n"))
        assert result is None


    async def test_extra_envelope_fields_are_ignored(self):
        body = {"result": [1, 2], "decision_id": "abc"}
        result = await run_query(lambda request: httpx.Response(200, json=body))
        assert result == [1, 2]


class TestFailures:
    async def test_non_200_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="internal error")

        with pytest.raises(RequestFailedError) as exc_info:
            await run_query(handler, data={"user": "blue"})

        error = exc_info.value
        assert error.error_code == codes.REQUEST_FAILED
        assert error.details["code"] == 500
        assert error.details["body"] == "internal error"

    async def test_non_200_status_with_unreadable_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, stream=BrokenStream())

        with pytest.raises(RequestFailedError) as exc_info:
            await run_query(handler)

        assert exc_info.value.details["code"] == 503

    async def test_unreadable_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=BrokenStream())

        with pytest.raises(UnexpectedResponseError) as exc_info:
            await run_query(handler)

        assert exc_info.value.details["body"] == '{"result": {"al'

    @pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b'"result"', b""])
    async def test_malformed_envelope(self, body):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body)

        with pytest.raises(UnexpectedResponseError) as exc_info:
            await run_query(handler)

        assert exc_info.value.error_code == codes.UNEXPECTED_RESPONSE
        assert exc_info.value.details["body"] == body.decode()

    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused (simulated)")

        with pytest.raises(RequestFailedError) as exc_info:
            await run_query(handler)

        assert exc_info.value.details["url"] == URL
        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    @pytest.mark.parametrize("data", [{"s": {1, 2}}, float("nan"), object()])
    async def test_unserializable_input(self, data):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("request must not be sent")

        with pytest.raises(InvalidInputError) as exc_info:
            await run_query(handler, data=data)

        assert exc_info.value.error_code == codes.INVALID_INPUT
        assert "input" in exc_info.value.details


class TestResultType:
    async def test_result_into_model(self):
        result = await run_query(lambda request: result_response({"allow": True}), result_type=Decision)
        assert result == Decision(allow=True)

    async def test_result_shape_mismatch(self):
        with pytest.raises(UnexpectedResponseError) as exc_info:
            await run_query(lambda request: result_response(["unexpected"]), result_type=Decision)

        assert exc_info.value.details["result"] == '["unexpected"]'

    async def test_result_into_builtin_type(self):
        result = await run_query(lambda request: result_response([1, 2, 3]), result_type=List[int])
        assert result == [1, 2, 3]


class TestCancellation:
    async def test_canceled_before_send(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return result_response(True)

        ctx = QueryContext()
        ctx.cancel()

        with pytest.raises(RequestFailedError) as exc_info:
            await run_query(handler, ctx=ctx)

        assert exc_info.value.details["reason"] == "canceled"
        assert calls == []

    async def test_canceled_during_exchange(self):
        started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            await asyncio.sleep(30)
            return result_response(True)

        ctx = QueryContext()

        async def cancel_when_started():
            await started.wait()
            ctx.cancel()

        canceler = asyncio.ensure_future(cancel_when_started())
        loop = asyncio.get_running_loop()
        begin = loop.time()
        with pytest.raises(RequestFailedError) as exc_info:
            await run_query(handler, ctx=ctx)
        await canceler

        assert exc_info.value.details["reason"] == "canceled"
        assert loop.time() - begin < 5

    async def test_deadline_exceeded(self):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(30)
            return result_response(True)

        with pytest.raises(RequestFailedError) as exc_info:
            await run_query(handler, ctx=QueryContext(timeout=0.05))

        assert exc_info.value.details["reason"] == "deadline exceeded"

    async def test_fast_response_within_deadline(self):
        result = await run_query(lambda request: result_response({"allow": True}), ctx=QueryContext(timeout=5))
        assert result == {"allow": True}


def test_parse_header():
    assert parse_header("X-Token: ABC123") == ("X-Token", "ABC123")
    assert parse_header("Authorization:  Bearer a:b ") == ("Authorization", "Bearer a:b")
