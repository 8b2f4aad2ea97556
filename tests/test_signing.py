import base64

from authfabric import RequestSigner, SecretContainer


def test_sign_is_deterministic_and_44_chars():
    signer = RequestSigner("test_key")
    s1 = signer.sign("GET", "/health", 1234567890, b"")
    s2 = signer.sign("GET", "/health", 1234567890, b"")
    assert s1 == s2
    assert len(s1) == 44  # noqa: PLR2004
    # standard (not url-safe) base64 of a 32-byte digest
    assert len(base64.b64decode(s1, validate=True)) == 32  # noqa: PLR2004


def test_timestamp_changes_signature():
    signer = RequestSigner("test_key")
    assert signer.sign("GET", "/health", 1234567890) != signer.sign("GET", "/health", 1234567891)


def test_each_field_changes_signature():
    signer = RequestSigner("test_key")
    base = signer.sign("POST", "/v1/tokens", 1700000000, b'{"a":1}')
    assert signer.sign("PUT", "/v1/tokens", 1700000000, b'{"a":1}') != base
    assert signer.sign("POST", "/v1/token", 1700000000, b'{"a":1}') != base
    assert signer.sign("POST", "/v1/tokens", 1700000001, b'{"a":1}') != base
    assert signer.sign("POST", "/v1/tokens", 1700000000, b'{"a":2}') != base


def test_different_credentials_differ():
    a = RequestSigner("key_one").sign("GET", "/health", 1)
    b = RequestSigner("key_two").sign("GET", "/health", 1)
    assert a != b


def test_signer_accepts_secret_container():
    raw = RequestSigner("tl_free_secret123456789").sign("GET", "/x", 5, "body")
    contained = RequestSigner(SecretContainer("tl_free_secret123456789")).sign(
        "GET", "/x", 5, b"body"
    )
    assert raw == contained


def test_known_vector():
    import hashlib  # noqa: PLC0415
    import hmac  # noqa: PLC0415

    key = hmac.new(b"truthlinked-request-signing-v1", b"test_key", hashlib.sha256).digest()
    mac = hmac.new(key, b"GET\n/health\n1234567890\n", hashlib.sha256).digest()
    expected = base64.b64encode(mac).decode()
    assert RequestSigner("test_key").sign("GET", "/health", 1234567890, b"") == expected


def test_signature_headers_and_verify():
    signer = RequestSigner("test_key")
    headers = signer.signature_headers("GET", "/health", b"", timestamp=1234567890)
    assert headers["X-Timestamp"] == "1234567890"
    assert headers["X-Signature"] == signer.sign("GET", "/health", 1234567890)
    assert signer.verify("GET", "/health", 1234567890, b"", headers["X-Signature"])
    assert not signer.verify("GET", "/health", 1234567891, b"", headers["X-Signature"])


def test_current_timestamp_non_decreasing(monkeypatch):
    import authfabric.signing as signing  # noqa: PLC0415

    first = RequestSigner.current_timestamp()
    # wall clock jumps backwards
    monkeypatch.setattr(signing.time, "time", lambda: first - 100.0)
    second = RequestSigner.current_timestamp()
    assert second >= first


def test_repr_hides_key():
    signer = RequestSigner("tl_free_secret123456789")
    assert "secret" not in repr(signer)
    assert signer._key.hex() not in repr(signer)
