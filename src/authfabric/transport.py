"""Thin adapters over requests, httpx and aiohttp.

Each adapter sends one request and returns a TransportResponse. Library
exceptions are converted to NetworkError with a generic message; the
original exception text is not kept.
"""

import asyncio
import contextlib
import json
from dataclasses import dataclass, field

from .errors import NetworkError, SerializationError

MSG_TIMEOUT = "Request timeout"
MSG_CONNECT = "Connection failed"
MSG_GENERIC = "Network error"


@dataclass
class TransportResponse:
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300  # noqa: PLR2004

    def json(self):
        try:
            return json.loads(self.body)
        except ValueError:
            raise SerializationError() from None


# ---------- requests (sync) ----------
class RequestsTransport:
    def __init__(
        self,
        session=None,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        proxy: str | None = None,
    ):
        if session is None:
            import requests  # noqa: PLC0415

            session = requests.Session()
            self._own_session = True
        else:
            self._own_session = False
        if proxy:
            session.proxies = {"http": proxy, "https": proxy}
        self.session = session
        self.timeout = (connect_timeout, timeout)

    def send(self, method: str, url: str, headers: dict[str, str], body: bytes):
        import requests  # noqa: PLC0415

        try:
            resp = self.session.request(
                method, url, headers=headers, data=body or None, timeout=self.timeout
            )
        except requests.Timeout:
            raise NetworkError(MSG_TIMEOUT) from None
        except requests.ConnectionError:
            raise NetworkError(MSG_CONNECT) from None
        except requests.RequestException:
            raise NetworkError(MSG_GENERIC) from None
        return TransportResponse(resp.status_code, dict(resp.headers), resp.content or b"")

    def close(self):
        if self._own_session:
            with contextlib.suppress(Exception):
                self.session.close()


# ---------- httpx (sync) ----------
def _httpx_timeout(timeout: float, connect_timeout: float):
    import httpx  # noqa: PLC0415

    return httpx.Timeout(timeout, connect=connect_timeout)


def _raise_for_httpx(exc) -> None:
    import httpx  # noqa: PLC0415

    if isinstance(exc, httpx.TimeoutException):
        raise NetworkError(MSG_TIMEOUT) from None
    if isinstance(exc, httpx.ConnectError):
        raise NetworkError(MSG_CONNECT) from None
    raise NetworkError(MSG_GENERIC) from None


class HttpxTransport:
    def __init__(
        self,
        client=None,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        proxy: str | None = None,
    ):
        if client is None:
            import httpx  # noqa: PLC0415

            client = httpx.Client(timeout=_httpx_timeout(timeout, connect_timeout), proxy=proxy)
            self._own_client = True
        else:
            self._own_client = False
        self.client = client

    def send(self, method: str, url: str, headers: dict[str, str], body: bytes):
        import httpx  # noqa: PLC0415

        try:
            resp = self.client.request(method, url, headers=headers, content=body or None)
        except httpx.HTTPError as e:
            _raise_for_httpx(e)
        return TransportResponse(resp.status_code, dict(resp.headers), resp.content)

    def close(self):
        if self._own_client:
            with contextlib.suppress(Exception):
                self.client.close()


# ---------- httpx (async) ----------
class HttpxAsyncTransport:
    def __init__(
        self,
        client=None,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        proxy: str | None = None,
    ):
        if client is None:
            import httpx  # noqa: PLC0415

            client = httpx.AsyncClient(
                timeout=_httpx_timeout(timeout, connect_timeout), proxy=proxy
            )
            self._own_client = True
        else:
            self._own_client = False
        self.client = client

    async def send(self, method: str, url: str, headers: dict[str, str], body: bytes):
        import httpx  # noqa: PLC0415

        try:
            resp = await self.client.request(method, url, headers=headers, content=body or None)
        except httpx.HTTPError as e:
            _raise_for_httpx(e)
        return TransportResponse(resp.status_code, dict(resp.headers), resp.content)

    async def aclose(self):
        if self._own_client:
            with contextlib.suppress(Exception):
                await self.client.aclose()


# ---------- aiohttp (async) ----------
class AiohttpTransport:
    """aiohttp adapter. The session is created lazily inside the running loop."""

    def __init__(
        self,
        session=None,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        proxy: str | None = None,
    ):
        self.session = session
        self._own_session = session is None
        self._timeout = timeout
        self._connect_timeout = connect_timeout
        self.proxy = proxy

    def _ensure_session(self):
        if self.session is None:
            import aiohttp  # noqa: PLC0415

            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(
                    total=self._timeout, connect=self._connect_timeout
                )
            )
        return self.session

    async def send(self, method: str, url: str, headers: dict[str, str], body: bytes):
        import aiohttp  # noqa: PLC0415

        session = self._ensure_session()
        try:
            async with session.request(
                method, url, headers=headers, data=body or None, proxy=self.proxy
            ) as resp:
                payload = await resp.read()
                return TransportResponse(resp.status, dict(resp.headers), payload)
        except asyncio.TimeoutError:
            raise NetworkError(MSG_TIMEOUT) from None
        except aiohttp.ClientConnectionError:
            raise NetworkError(MSG_CONNECT) from None
        except aiohttp.ClientError:
            raise NetworkError(MSG_GENERIC) from None

    async def aclose(self):
        if self._own_session and self.session is not None:
            with contextlib.suppress(Exception):
                await self.session.close()
            self.session = None


SYNC_TRANSPORTS = {"requests": RequestsTransport, "httpx": HttpxTransport}
ASYNC_TRANSPORTS = {"httpx": HttpxAsyncTransport, "aiohttp": AiohttpTransport}


def coerce_transport(
    transport: object | None,
    *,
    asynchronous: bool,
    timeout: float = 30.0,
    connect_timeout: float = 10.0,
    proxy: str | None = None,
):
    """Turn None | str | transport instance into a transport.

    Accepted inputs:
      - None       -> "requests" for sync clients, "httpx" for async clients
      - "requests" -> RequestsTransport (sync only)
      - "httpx"    -> HttpxTransport or HttpxAsyncTransport
      - "aiohttp"  -> AiohttpTransport (async only)
      - any object with a send(method, url, headers, body) method (returned as-is)
    """
    registry = ASYNC_TRANSPORTS if asynchronous else SYNC_TRANSPORTS
    if transport is None:
        transport = "httpx" if asynchronous else "requests"
    if isinstance(transport, str):
        cls = registry.get(transport.lower())
        if cls is None:
            raise ValueError(
                f"Unknown transport {transport!r}. Use one of: {', '.join(sorted(registry))}."
            )
        return cls(timeout=timeout, connect_timeout=connect_timeout, proxy=proxy)
    if callable(getattr(transport, "send", None)):
        return transport
    raise TypeError("transport must be None, a transport name, or an object with send()")
