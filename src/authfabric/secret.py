import hmac
import json

# Credentials at or below this length are fully masked
REDACT_MIN_LENGTH = 8
REDACT_KEEP = 3


class SecretContainer:
    """Holds the license key in a wipeable buffer.

    The raw value is only reachable through peek(), which the signer and the
    Authorization header builder use. Every other way of turning the
    container into text (repr, str, format, pickle, to_json) goes through
    redacted().

    The buffer is zero-filled by wipe(), on leaving a ``with`` block, and
    best-effort when the object is finalized. CPython strings are immutable:
    the caller's original string and any value returned by peek() are not
    covered, and the interpreter decides when finalization runs.
    """

    __slots__ = ("_buf", "_wiped", "__weakref__")

    def __init__(self, raw: str | bytes):
        if isinstance(raw, str):
            raw = raw.encode("utf-8")
        if not raw:
            raise ValueError("credential cannot be empty")
        self._buf = bytearray(raw)
        self._wiped = False

    # -------- raw access (internal use) --------
    def peek(self) -> str:
        if self._wiped:
            raise ValueError("credential has been wiped")
        return self._buf.decode("utf-8")

    def peek_bytes(self) -> bytes:
        if self._wiped:
            raise ValueError("credential has been wiped")
        return bytes(self._buf)

    # -------- safe views --------
    def redacted(self) -> str:
        if self._wiped:
            return "***"
        value = self._buf.decode("utf-8", errors="replace")
        if len(value) > REDACT_MIN_LENGTH:
            return f"{value[:REDACT_KEEP]}...{value[-REDACT_KEEP:]}"
        return "***"

    def to_json(self) -> str:
        return json.dumps(self.redacted())

    def __repr__(self) -> str:
        return f"SecretContainer({self.redacted()!r})"

    def __str__(self) -> str:
        return self.redacted()

    def __format__(self, spec: str) -> str:
        return format(self.redacted(), spec)

    def __reduce__(self):
        # pickling yields the redacted text, never the credential
        return (str, (self.redacted(),))

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __eq__(self, other):
        if not isinstance(other, SecretContainer):
            return NotImplemented
        if self._wiped or other._wiped:
            return False
        return hmac.compare_digest(bytes(self._buf), bytes(other._buf))

    __hash__ = None

    def __len__(self) -> int:
        return 0 if self._wiped else len(self._buf)

    # -------- lifetime --------
    @property
    def wiped(self) -> bool:
        return self._wiped

    def wipe(self) -> None:
        buf = getattr(self, "_buf", None)
        if buf is not None:
            for i in range(len(buf)):
                buf[i] = 0
        self._wiped = True

    close = wipe

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.wipe()
        return False

    def __del__(self):
        try:
            self.wipe()
        except Exception:  # noqa: BLE001, finalizer must not raise
            pass

