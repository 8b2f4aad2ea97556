from .client import AsyncClient, Client
from .errors import (
    AuthFabricError,
    ErrorKind,
    ForbiddenError,
    InvalidRequestError,
    InvalidResponseError,
    LicenseExpiredError,
    NetworkError,
    RateLimitExceededError,
    SerializationError,
    ServerError,
    UnauthorizedError,
    error_for_status,
)
from .redaction import redact_body, redact_credential, redact_headers
from .request_logger import RequestLogger, RequestTimer
from .retry import RetryExecutor
from .secret import SecretContainer
from .signing import RequestSigner
from .transport import (
    AiohttpTransport,
    HttpxAsyncTransport,
    HttpxTransport,
    RequestsTransport,
    TransportResponse,
    coerce_transport,
)
from .types import ClientConfig, HealthResponse, LoggingConfig, LogLevel, RetryConfig

__version__ = "0.1.0"

__all__ = [
    "Client",
    "AsyncClient",
    "ClientConfig",
    "RetryConfig",
    "LoggingConfig",
    "LogLevel",
    "HealthResponse",
    "SecretContainer",
    "RequestSigner",
    "RetryExecutor",
    "RequestLogger",
    "RequestTimer",
    "redact_body",
    "redact_credential",
    "redact_headers",
    "TransportResponse",
    "RequestsTransport",
    "HttpxTransport",
    "HttpxAsyncTransport",
    "AiohttpTransport",
    "coerce_transport",
    "ErrorKind",
    "AuthFabricError",
    "NetworkError",
    "UnauthorizedError",
    "ForbiddenError",
    "RateLimitExceededError",
    "InvalidRequestError",
    "ServerError",
    "SerializationError",
    "InvalidResponseError",
    "LicenseExpiredError",
    "error_for_status",
]
