import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field


class LogLevel(enum.Enum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR


@dataclass(frozen=True)
class RetryConfig:
    # Attempts include the first call; 0 means "never call".
    max_attempts: int = 3

    # Backoff, in seconds
    initial_delay: float = 1.0
    max_delay: float = 30.0
    backoff_multiplier: float = 2.0
    # Fraction of the computed delay used as +/- random spread
    jitter_factor: float = 0.1

    def __post_init__(self):
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be >= 0")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")
        if not 0.0 <= self.jitter_factor <= 1.0:
            raise ValueError("jitter_factor must be within [0, 1]")

    @classmethod
    def production(cls) -> "RetryConfig":
        return cls(
            max_attempts=3,
            initial_delay=0.5,
            max_delay=10.0,
            backoff_multiplier=2.0,
            jitter_factor=0.1,
        )

    @classmethod
    def aggressive(cls) -> "RetryConfig":
        return cls(
            max_attempts=5,
            initial_delay=0.1,
            max_delay=5.0,
            backoff_multiplier=1.5,
            jitter_factor=0.2,
        )

    @classmethod
    def none(cls) -> "RetryConfig":
        """Single attempt, no backoff."""
        return cls(
            max_attempts=1,
            initial_delay=0.0,
            max_delay=0.0,
            backoff_multiplier=1.0,
            jitter_factor=0.0,
        )


@dataclass(frozen=True)
class LoggingConfig:
    log_requests: bool = True
    log_responses: bool = True
    log_errors: bool = True
    log_timing: bool = True
    # Bodies larger than this are replaced by a size placeholder
    max_body_size: int = 1024
    success_level: LogLevel = LogLevel.DEBUG
    error_level: LogLevel = LogLevel.ERROR

    @classmethod
    def production(cls) -> "LoggingConfig":
        return cls(
            log_requests=False,
            log_responses=False,
            log_errors=True,
            log_timing=True,
            max_body_size=0,
        )

    @classmethod
    def development(cls) -> "LoggingConfig":
        return cls(max_body_size=4096, success_level=LogLevel.INFO)

    @classmethod
    def none(cls) -> "LoggingConfig":
        return cls(
            log_requests=False,
            log_responses=False,
            log_errors=False,
            log_timing=False,
            max_body_size=0,
        )


@dataclass(frozen=True)
class ClientConfig:
    # Seconds
    timeout: float = 30.0
    connect_timeout: float = 10.0

    retry_config: RetryConfig = field(default_factory=RetryConfig.production)
    logging_config: LoggingConfig = field(default_factory=LoggingConfig.production)

    # Extra headers sent with every request; a mapping is stored as pairs
    headers: tuple[tuple[str, str], ...] = ()
    user_agent: str | None = None
    proxy: str | None = None

    # Plain-HTTP endpoints are only accepted for local testing
    allow_http: bool = False

    def __post_init__(self):
        if isinstance(self.headers, Mapping):
            object.__setattr__(self, "headers", tuple(self.headers.items()))
        else:
            object.__setattr__(self, "headers", tuple(tuple(p) for p in self.headers))

    @classmethod
    def production(cls) -> "ClientConfig":
        return cls()

    @classmethod
    def development(cls) -> "ClientConfig":
        return cls(
            timeout=60.0,
            connect_timeout=5.0,
            retry_config=RetryConfig.aggressive(),
            logging_config=LoggingConfig.development(),
        )

    @classmethod
    def testing(cls) -> "ClientConfig":
        return cls(
            timeout=5.0,
            connect_timeout=2.0,
            retry_config=RetryConfig.none(),
            logging_config=LoggingConfig.none(),
            allow_http=True,
        )


@dataclass(frozen=True)
class HealthResponse:
    status: str
    version: str

    @classmethod
    def from_dict(cls, data: dict) -> "HealthResponse":
        return cls(status=str(data["status"]), version=str(data["version"]))
