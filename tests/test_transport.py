import asyncio
from unittest.mock import MagicMock

import pytest

from authfabric import (
    AiohttpTransport,
    HttpxAsyncTransport,
    HttpxTransport,
    NetworkError,
    RequestsTransport,
    SerializationError,
    TransportResponse,
    coerce_transport,
)


def test_transport_response_json():
    assert TransportResponse(200, {}, b'{"a":1}').json() == {"a": 1}
    with pytest.raises(SerializationError):
        TransportResponse(200, {}, b"not json").json()
    assert TransportResponse(204).ok
    assert not TransportResponse(404).ok


# ---------- requests ----------
def test_requests_transport_success():
    sess = MagicMock()
    resp = MagicMock()
    resp.status_code = 200
    resp.headers = {"Content-Type": "application/json"}
    resp.content = b"{}"
    sess.request.return_value = resp

    t = RequestsTransport(session=sess, timeout=5.0, connect_timeout=1.0)
    out = t.send("POST", "https://example.com/x", {"X-A": "1"}, b"body")
    assert out == TransportResponse(200, {"Content-Type": "application/json"}, b"{}")
    args, kwargs = sess.request.call_args
    assert args == ("POST", "https://example.com/x")
    assert kwargs["data"] == b"body"
    assert kwargs["timeout"] == (1.0, 5.0)


@pytest.mark.parametrize(
    "exc_name,message",
    [
        ("Timeout", "Request timeout"),
        ("ConnectionError", "Connection failed"),
        ("RequestException", "Network error"),
    ],
)
def test_requests_transport_maps_errors(exc_name, message):
    import requests  # noqa: PLC0415

    sess = MagicMock()
    sess.request.side_effect = getattr(requests, exc_name)("internal host db-7.corp:5432")
    t = RequestsTransport(session=sess)
    with pytest.raises(NetworkError) as info:
        t.send("GET", "https://example.com", {}, b"")
    assert info.value.reason == message
    assert "db-7" not in str(info.value)
    assert info.value.__cause__ is None


def test_requests_transport_does_not_close_foreign_session():
    sess = MagicMock()
    RequestsTransport(session=sess).close()
    sess.close.assert_not_called()


# ---------- httpx ----------
def test_httpx_transport_success():
    import httpx  # noqa: PLC0415

    def handler(request):
        assert request.headers["X-A"] == "1"
        assert request.content == b"payload"
        return httpx.Response(201, content=b"done")

    client = httpx.Client(transport=httpx.MockTransport(handler))
    t = HttpxTransport(client=client)
    out = t.send("PUT", "https://example.com/x", {"X-A": "1"}, b"payload")
    assert out.status == 201  # noqa: PLR2004
    assert out.body == b"done"


@pytest.mark.parametrize(
    "exc_factory,message",
    [
        (lambda httpx, req: httpx.ReadTimeout("slow", request=req), "Request timeout"),
        (lambda httpx, req: httpx.ConnectError("refused", request=req), "Connection failed"),
        (lambda httpx, req: httpx.RemoteProtocolError("bad", request=req), "Network error"),
    ],
)
def test_httpx_transport_maps_errors(exc_factory, message):
    import httpx  # noqa: PLC0415

    def handler(request):
        raise exc_factory(httpx, request)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with pytest.raises(NetworkError) as info:
        HttpxTransport(client=client).send("GET", "https://example.com", {}, b"")
    assert info.value.reason == message


@pytest.mark.asyncio
async def test_httpx_async_transport():
    import httpx  # noqa: PLC0415

    def handler(request):
        if request.url.path == "/fail":
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json={"ok": True})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        t = HttpxAsyncTransport(client=client)
        out = await t.send("GET", "https://example.com/ok", {}, b"")
        assert out.json() == {"ok": True}
        with pytest.raises(NetworkError):
            await t.send("GET", "https://example.com/fail", {}, b"")


# ---------- aiohttp ----------
class _FakeAiohttpResponse:
    def __init__(self, status=200, headers=None, body=b""):
        self.status = status
        self.headers = headers or {}
        self._body = body

    async def read(self):
        return self._body


class _FakeRequestCtx:
    def __init__(self, resp):
        self.resp = resp

    async def __aenter__(self):
        return self.resp

    async def __aexit__(self, exc_type, exc, tb):
        return False


@pytest.mark.asyncio
async def test_aiohttp_transport_success():
    session = MagicMock()
    session.request.return_value = _FakeRequestCtx(
        _FakeAiohttpResponse(200, {"X-R": "1"}, b"hello")
    )
    t = AiohttpTransport(session=session, proxy="http://proxy:3128")
    out = await t.send("GET", "https://example.com", {"X-A": "1"}, b"")
    assert out == TransportResponse(200, {"X-R": "1"}, b"hello")
    args, kwargs = session.request.call_args
    assert kwargs["headers"] == {"X-A": "1"}
    assert kwargs["proxy"] == "http://proxy:3128"
    await t.aclose()
    session.close.assert_not_called()


@pytest.mark.asyncio
async def test_aiohttp_transport_maps_errors():
    import aiohttp  # noqa: PLC0415

    session = MagicMock()
    t = AiohttpTransport(session=session)

    session.request.side_effect = asyncio.TimeoutError()
    with pytest.raises(NetworkError) as info:
        await t.send("GET", "https://example.com", {}, b"")
    assert info.value.reason == "Request timeout"

    session.request.side_effect = aiohttp.ServerDisconnectedError()
    with pytest.raises(NetworkError) as info:
        await t.send("GET", "https://example.com", {}, b"")
    assert info.value.reason == "Connection failed"

    session.request.side_effect = aiohttp.ClientPayloadError("truncated")
    with pytest.raises(NetworkError) as info:
        await t.send("GET", "https://example.com", {}, b"")
    assert info.value.reason == "Network error"


# ---------- coerce ----------
def test_coerce_transport_names():
    assert isinstance(coerce_transport(None, asynchronous=False), RequestsTransport)
    assert isinstance(coerce_transport("httpx", asynchronous=False), HttpxTransport)
    assert isinstance(coerce_transport("aiohttp", asynchronous=True), AiohttpTransport)
    with pytest.raises(ValueError):
        coerce_transport("aiohttp", asynchronous=False)
    with pytest.raises(TypeError):
        coerce_transport(42, asynchronous=False)


@pytest.mark.asyncio
async def test_coerce_transport_async_default():
    t = coerce_transport(None, asynchronous=True)
    assert isinstance(t, HttpxAsyncTransport)
    await t.aclose()


def test_coerce_transport_passthrough():
    custom = MagicMock()
    assert coerce_transport(custom, asynchronous=False) is custom
