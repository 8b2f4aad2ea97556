import base64
import hashlib
import hmac
import threading
import time

from .secret import SecretContainer

# Domain separation for the derived signing key; must match the server.
SIGNING_KEY_DOMAIN = b"truthlinked-request-signing-v1"

HEADER_TIMESTAMP = "X-Timestamp"
HEADER_SIGNATURE = "X-Signature"

_clock_lock = threading.Lock()
_last_timestamp = 0


def _as_bytes(value: bytes | str | None) -> bytes:
    if value is None:
        return b""
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


class RequestSigner:
    """HMAC-SHA256 request signatures for replay protection.

    The signing key is derived once from the license key and never changes:
        key = HMAC-SHA256(SIGNING_KEY_DOMAIN, license_key)
        sig = base64(HMAC-SHA256(key, METHOD \\n PATH \\n TIMESTAMP \\n BODY))
    """

    __slots__ = ("_key",)

    def __init__(self, credential: str | bytes | SecretContainer):
        if isinstance(credential, SecretContainer):
            raw = credential.peek_bytes()
        else:
            raw = _as_bytes(credential)
        self._key = hmac.new(SIGNING_KEY_DOMAIN, raw, hashlib.sha256).digest()

    def __repr__(self) -> str:
        return "RequestSigner(<signing key hidden>)"

    def _message(self, method: str, path: str, timestamp: int, body) -> bytes:
        return b"\n".join(
            [
                method.encode("utf-8"),
                path.encode("utf-8"),
                str(int(timestamp)).encode("ascii"),
                _as_bytes(body),
            ]
        )

    def sign(self, method: str, path: str, timestamp: int, body: bytes | str = b"") -> str:
        mac = hmac.new(self._key, self._message(method, path, timestamp, body), hashlib.sha256)
        return base64.b64encode(mac.digest()).decode("ascii")

    def verify(
        self, method: str, path: str, timestamp: int, body: bytes | str, signature: str
    ) -> bool:
        expected = self.sign(method, path, timestamp, body)
        return hmac.compare_digest(expected, signature)

    def signature_headers(
        self,
        method: str,
        path: str,
        body: bytes | str = b"",
        timestamp: int | None = None,
    ) -> dict[str, str]:
        """Return the X-Timestamp / X-Signature pair for one request."""
        ts = self.current_timestamp() if timestamp is None else int(timestamp)
        return {
            HEADER_TIMESTAMP: str(ts),
            HEADER_SIGNATURE: self.sign(method, path, ts, body),
        }

    @staticmethod
    def current_timestamp() -> int:
        """Seconds since the epoch; never goes backwards within the process."""
        global _last_timestamp
        now = int(time.time())
        with _clock_lock:
            if now < _last_timestamp:
                now = _last_timestamp
            _last_timestamp = now
        return now
