from collections.abc import Iterable, Mapping

SENSITIVE_HEADER_MARKERS = ("authorization", "cookie", "token")
SENSITIVE_BODY_KEYS = ("sso_token", "af_token", "license_key")

BEARER_PREFIX = "Bearer "
SHORT_CREDENTIAL_LENGTH = 8


def redact_credential(value: str) -> str:
    if len(value) <= SHORT_CREDENTIAL_LENGTH:
        return "***"
    # bearer values keep one more trailing character
    if value.startswith(BEARER_PREFIX):
        return f"{value[:3]}...{value[-4:]}"
    return f"{value[:3]}...{value[-3:]}"


def is_sensitive_header(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in SENSITIVE_HEADER_MARKERS)


def redact_headers(
    headers: Mapping[str, str] | Iterable[tuple[str, str]] | None,
) -> list[tuple[str, str]]:
    """Return (name, value) pairs in input order with credential headers masked."""
    if headers is None:
        return []
    items = headers.items() if isinstance(headers, Mapping) else headers
    return [
        (name, redact_credential(value) if is_sensitive_header(name) else value)
        for name, value in items
    ]


def redact_body(body: bytes | str | None, max_body_size: int) -> str:
    """Mask known secret fields in a request/response body.

    This is a literal scan for ``"<key>":"`` followed by the next quote, one
    replacement per key. It does not parse JSON, so a value containing an
    escaped quote is only masked up to that quote.
    """
    if not body:
        return ""
    raw = body.encode("utf-8") if isinstance(body, str) else bytes(body)
    if len(raw) > max_body_size:
        return f"<body too large: {len(raw)} bytes>"
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        return f"<binary data: {len(raw)} bytes>"

    for key in SENSITIVE_BODY_KEYS:
        marker = f'"{key}":"'
        start = text.find(marker)
        if start == -1:
            continue
        value_start = start + len(marker)
        end = text.find('"', value_start)
        if end == -1:
            continue
        text = text[:value_start] + "***" + text[end:]
    return text
