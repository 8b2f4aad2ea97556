import contextlib
import dataclasses
import json as jsonlib
import logging
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar
from urllib.parse import urlsplit

from .errors import InvalidRequestError, InvalidResponseError, NetworkError, error_for_status
from .request_logger import RequestLogger, RequestTimer
from .retry import RetryExecutor
from .secret import SecretContainer
from .signing import RequestSigner
from .transport import TransportResponse, coerce_transport
from .types import ClientConfig, HealthResponse

T = TypeVar("T")

DEFAULT_USER_AGENT = "authfabric-python/0.1.0"

# RFC 7230 token / visible ASCII plus tab
_HEADER_NAME_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_HEADER_VALUE_RE = re.compile(r"^[\t\x20-\x7e]*$")

_CONFIG_FIELDS = {f.name for f in dataclasses.fields(ClientConfig)}


def _validate_headers(headers: Mapping[str, str] | Iterable[tuple[str, str]]) -> None:
    pairs = headers.items() if isinstance(headers, Mapping) else headers
    for name, value in pairs:
        if not _HEADER_NAME_RE.match(name):
            raise InvalidRequestError("Invalid header name")
        if not isinstance(value, str) or not _HEADER_VALUE_RE.match(value):
            raise InvalidRequestError("Invalid header value")


def _encode_body(json=None, data=None) -> tuple[bytes, str | None]:
    if json is not None:
        return jsonlib.dumps(json, separators=(",", ":")).encode("utf-8"), "application/json"
    if data is None:
        return b"", None
    if isinstance(data, str):
        return data.encode("utf-8"), None
    if isinstance(data, (bytes, bytearray)):
        return bytes(data), None
    return str(data).encode("utf-8"), None


def _normalize_path(path: str) -> str:
    return path if path.startswith("/") else f"/{path}"


# ---------- Shared client core (I/O handled by subclasses) ----------


class _ClientCore:
    def __init__(
        self,
        base_url: str,
        license_key: str | SecretContainer,
        config: ClientConfig | None = None,
        log_level: int | None = None,
        **kwargs,
    ):
        """Validate configuration and build the signing/retry/logging pieces.

        Args:
            base_url (str): API root, must be https:// unless allow_http is set
            license_key (str | SecretContainer): long-lived credential
            config (ClientConfig | None): defaults to ClientConfig.production()
            log_level (int | None): level applied to the "authfabric" logger
            kwargs:
            - any ClientConfig field (timeout, retry_config, headers, ...)
            - retries: int, shortcut for retry_config.max_attempts
            - transport: transport name or instance

        Raises:
            InvalidRequestError: insecure base URL or malformed extra headers
        """
        cfg = config or ClientConfig.production()
        overrides = {k: kwargs.pop(k) for k in list(kwargs) if k in _CONFIG_FIELDS}
        if overrides:
            cfg = dataclasses.replace(cfg, **overrides)
        retries = kwargs.pop("retries", None)
        if retries is not None:
            cfg = dataclasses.replace(
                cfg, retry_config=dataclasses.replace(cfg.retry_config, max_attempts=retries)
            )
        self._transport_arg = kwargs.pop("transport", None)
        if kwargs:
            raise TypeError(f"unexpected keyword arguments: {', '.join(sorted(kwargs))}")

        if not cfg.allow_http and urlsplit(base_url).scheme.lower() != "https":
            raise InvalidRequestError("Base URL must use HTTPS")
        _validate_headers(cfg.headers)

        self.config = cfg
        self.base_url = base_url.rstrip("/")
        # caller-supplied containers are left to their owner on close
        self._own_secret = not isinstance(license_key, SecretContainer)
        self._secret = license_key if not self._own_secret else SecretContainer(license_key)
        self._signer = RequestSigner(self._secret)
        self._retry = RetryExecutor(cfg.retry_config)
        self._http_log = RequestLogger(cfg.logging_config)
        self._logger = logging.getLogger("authfabric.client")
        self._closed = False
        if log_level is not None:
            with contextlib.suppress(Exception):
                logging.getLogger("authfabric").setLevel(log_level)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(base_url={self.base_url!r}, "
            f"license_key={self._secret.redacted()!r})"
        )

    @property
    def license_key(self) -> SecretContainer:
        return self._secret

    def _check_open(self):
        if self._closed:
            raise RuntimeError("authfabric: client is closed")

    def _prepare_headers(
        self,
        method: str,
        path: str,
        body: bytes,
        content_type: str | None,
        extra: dict[str, str] | None,
    ) -> dict[str, str]:
        # computed per attempt so every retry carries a fresh timestamp
        headers = {"User-Agent": self.config.user_agent or DEFAULT_USER_AGENT}
        headers.update(self.config.headers)
        if extra:
            _validate_headers(extra)
            headers.update(extra)
        if content_type:
            headers["Content-Type"] = content_type
        headers["Authorization"] = f"Bearer {self._secret.peek()}"
        headers.update(self._signer.signature_headers(method, path, body))
        return headers

    def _handle_response(self, resp: TransportResponse, timer: RequestTimer) -> TransportResponse:
        self._http_log.log_response(resp.status, resp.headers, resp.body, timer.elapsed())
        err = error_for_status(resp.status)
        if err is not None:
            raise err
        return resp

    @staticmethod
    def _decode(resp: TransportResponse, model: Callable[[Any], T] | None):
        data = resp.json()
        if model is None:
            return data
        try:
            return model(data)
        except (TypeError, KeyError, ValueError):
            raise InvalidResponseError() from None


# ---------- Sync client ----------


class Client(_ClientCore):
    """Blocking client. Safe to share between threads."""

    def __init__(self, base_url: str, license_key, config: ClientConfig | None = None, **kwargs):
        super().__init__(base_url, license_key, config, **kwargs)
        self._own_transport = not hasattr(self._transport_arg, "send")
        self._transport = coerce_transport(
            self._transport_arg,
            asynchronous=False,
            timeout=self.config.timeout,
            connect_timeout=self.config.connect_timeout,
            proxy=self.config.proxy,
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        json=None,
        data=None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        """Send one signed request under the retry policy.

        Raises the AuthFabricError subclass matching the failure.
        """
        self._check_open()
        method = method.upper()
        path = _normalize_path(path)
        url = self.base_url + path
        body, content_type = _encode_body(json, data)

        def attempt() -> TransportResponse:
            timer = RequestTimer()
            req_headers = self._prepare_headers(method, path, body, content_type, headers)
            self._http_log.log_request(method, url, req_headers, body)
            try:
                resp = self._transport.send(method, url, req_headers, body)
            except NetworkError as e:
                self._http_log.log_error(method, url, e.message, timer.elapsed())
                raise
            return self._handle_response(resp, timer)

        return self._retry.execute(attempt)

    def request_json(self, method: str, path: str, model: Callable[[Any], T] | None = None, **kw):
        return self._decode(self.request(method, path, **kw), model)

    def get(self, path: str, **kw) -> TransportResponse:
        return self.request("GET", path, **kw)

    def post(self, path: str, **kw) -> TransportResponse:
        return self.request("POST", path, **kw)

    def put(self, path: str, **kw) -> TransportResponse:
        return self.request("PUT", path, **kw)

    def delete(self, path: str, **kw) -> TransportResponse:
        return self.request("DELETE", path, **kw)

    def health(self) -> HealthResponse:
        return self.request_json("GET", "/health", model=HealthResponse.from_dict)

    def close(self):
        if self._closed:
            return
        self._closed = True
        if self._own_transport:
            with contextlib.suppress(Exception):
                self._transport.close()
        if self._own_secret:
            self._secret.wipe()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


# ---------- Async client ----------


class AsyncClient(_ClientCore):
    """asyncio client. Safe to share between tasks on one event loop."""

    def __init__(self, base_url: str, license_key, config: ClientConfig | None = None, **kwargs):
        super().__init__(base_url, license_key, config, **kwargs)
        self._own_transport = not hasattr(self._transport_arg, "send")
        self._transport = coerce_transport(
            self._transport_arg,
            asynchronous=True,
            timeout=self.config.timeout,
            connect_timeout=self.config.connect_timeout,
            proxy=self.config.proxy,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        json=None,
        data=None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        self._check_open()
        method = method.upper()
        path = _normalize_path(path)
        url = self.base_url + path
        body, content_type = _encode_body(json, data)

        async def attempt() -> TransportResponse:
            timer = RequestTimer()
            req_headers = self._prepare_headers(method, path, body, content_type, headers)
            self._http_log.log_request(method, url, req_headers, body)
            try:
                resp = await self._transport.send(method, url, req_headers, body)
            except NetworkError as e:
                self._http_log.log_error(method, url, e.message, timer.elapsed())
                raise
            return self._handle_response(resp, timer)

        return await self._retry.aexecute(attempt)

    async def request_json(
        self, method: str, path: str, model: Callable[[Any], T] | None = None, **kw
    ):
        return self._decode(await self.request(method, path, **kw), model)

    async def get(self, path: str, **kw) -> TransportResponse:
        return await self.request("GET", path, **kw)

    async def post(self, path: str, **kw) -> TransportResponse:
        return await self.request("POST", path, **kw)

    async def put(self, path: str, **kw) -> TransportResponse:
        return await self.request("PUT", path, **kw)

    async def delete(self, path: str, **kw) -> TransportResponse:
        return await self.request("DELETE", path, **kw)

    async def health(self) -> HealthResponse:
        return await self.request_json("GET", "/health", model=HealthResponse.from_dict)

    async def aclose(self):
        if self._closed:
            return
        self._closed = True
        if self._own_transport:
            with contextlib.suppress(Exception):
                await self._transport.aclose()
        if self._own_secret:
            self._secret.wipe()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
        return False
