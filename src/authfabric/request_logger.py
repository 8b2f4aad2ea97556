import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any

from .redaction import redact_body, redact_headers
from .types import LoggingConfig, LogLevel

HeadersLike = Mapping[str, str] | Iterable[tuple[str, str]] | None


class RequestTimer:
    def __init__(self):
        self._start = time.perf_counter()

    def elapsed(self) -> float:
        """Seconds since the timer was created."""
        return time.perf_counter() - self._start


class RequestLogger:
    """Logs outbound requests and inbound responses with secrets masked.

    Each entry point is gated by its LoggingConfig flag. Records go to the
    ``authfabric.http`` logger; the field map is attached as
    ``record.authfabric`` for structured handlers. Headers and bodies are
    only included when the record is emitted at DEBUG.
    """

    def __init__(
        self, config: LoggingConfig | None = None, logger: logging.Logger | None = None
    ):
        self.config = config or LoggingConfig()
        self._logger = logger or logging.getLogger("authfabric.http")

    # -------- redaction helpers (bound to this config) --------
    def redact_headers(self, headers: HeadersLike) -> list[tuple[str, str]]:
        return redact_headers(headers)

    def redact_body(self, body: bytes | str | None) -> str:
        return redact_body(body, self.config.max_body_size)

    def level_for_status(self, status: int) -> LogLevel:
        if status >= 400:  # noqa: PLR2004, http status code can be constant
            return self.config.error_level
        return self.config.success_level

    # -------- entry points --------
    def log_request(self, method: str, url: str, headers: HeadersLike, body: bytes | str | None):
        if not self.config.log_requests:
            return
        level = self.config.success_level
        fields: dict[str, Any] = {"method": method, "url": url}
        if level is LogLevel.DEBUG:
            fields["headers"] = self.redact_headers(headers)
            fields["body"] = self.redact_body(body)
        self._emit(level, "Sending request", fields)

    def log_response(
        self,
        status: int,
        headers: HeadersLike,
        body: bytes | str | None,
        duration: float,
    ):
        if not self.config.log_responses:
            return
        level = self.level_for_status(status)
        fields: dict[str, Any] = {"status": status}
        if self.config.log_timing:
            fields["duration_ms"] = int(duration * 1000)
        if level is LogLevel.DEBUG:
            fields["headers"] = self.redact_headers(headers)
            fields["body"] = self.redact_body(body)
        self._emit(level, "Received response", fields)

    def log_error(self, method: str, url: str, error: str, duration: float):
        """Log a failed call. `error` must already be a safe, generic message."""
        if not self.config.log_errors:
            return
        fields: dict[str, Any] = {"method": method, "url": url, "error": error}
        if self.config.log_timing:
            fields["duration_ms"] = int(duration * 1000)
        self._emit(self.config.error_level, "Request failed", fields)

    def _emit(self, level: LogLevel, message: str, fields: dict[str, Any]):
        if not self._logger.isEnabledFor(level.value):
            return
        rendered = " ".join(
            f"{k}={v!r}" if k in ("headers", "body") else f"{k}={v}" for k, v in fields.items()
        )
        self._logger.log(level.value, f"{message} {rendered}", extra={"authfabric": fields})
