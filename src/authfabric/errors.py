"""Error taxonomy shared by the retry policy and the clients.

Messages are fixed, generic strings. Nothing received from the server or
raised by a transport library is copied into them.
"""

import enum


class ErrorKind(enum.Enum):
    NETWORK = "network"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    INVALID_REQUEST = "invalid_request"
    SERVER_ERROR = "server_error"
    SERIALIZATION_ERROR = "serialization_error"
    INVALID_RESPONSE = "invalid_response"
    LICENSE_EXPIRED = "license_expired"


# Only transient failures are worth another attempt.
RETRYABLE_KINDS = frozenset({ErrorKind.NETWORK, ErrorKind.SERVER_ERROR})


class AuthFabricError(Exception):
    """Base exception for all client errors."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class NetworkError(AuthFabricError):
    kind = ErrorKind.NETWORK

    def __init__(self, message: str = "Network error"):
        super().__init__(f"Network error: {message}")
        self.reason = message


class UnauthorizedError(AuthFabricError):
    kind = ErrorKind.UNAUTHORIZED

    def __init__(self):
        super().__init__("Authentication failed")


class ForbiddenError(AuthFabricError):
    kind = ErrorKind.FORBIDDEN

    def __init__(self):
        super().__init__("Access denied: insufficient tier permissions")


class RateLimitExceededError(AuthFabricError):
    kind = ErrorKind.RATE_LIMIT_EXCEEDED

    def __init__(self, reason: str = "Rate limit exceeded"):
        super().__init__(f"Rate limit exceeded: {reason}")
        self.reason = reason


class InvalidRequestError(AuthFabricError):
    kind = ErrorKind.INVALID_REQUEST

    def __init__(self, reason: str = "Invalid request"):
        super().__init__(f"Invalid request: {reason}")
        self.reason = reason


class ServerError(AuthFabricError):
    kind = ErrorKind.SERVER_ERROR

    def __init__(self):
        super().__init__("Server error")


class SerializationError(AuthFabricError):
    kind = ErrorKind.SERIALIZATION_ERROR

    def __init__(self):
        super().__init__("Serialization error")


class InvalidResponseError(AuthFabricError):
    kind = ErrorKind.INVALID_RESPONSE

    def __init__(self):
        super().__init__("Invalid response from server")


class LicenseExpiredError(AuthFabricError):
    kind = ErrorKind.LICENSE_EXPIRED

    def __init__(self):
        super().__init__("License expired")


def error_for_status(status: int) -> AuthFabricError | None:
    """Map an HTTP status code onto the taxonomy; None for 2xx."""
    if 200 <= status < 300:  # noqa: PLR2004
        return None
    if status == 401:  # noqa: PLR2004, http status code can be constant
        return UnauthorizedError()
    if status == 403:  # noqa: PLR2004
        return ForbiddenError()
    if status == 429:  # noqa: PLR2004
        return RateLimitExceededError()
    if status in (400, 422):
        return InvalidRequestError()
    if 500 <= status < 600:  # noqa: PLR2004
        return ServerError()
    return InvalidResponseError()
