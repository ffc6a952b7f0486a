import asyncio
import base64
import json
import time
from datetime import datetime, timedelta

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID
from fastapi import HTTPException

from bloodconnect import auth
from bloodconnect.auth import verify_firebase_token as verify

PROJECT_ID = "bloodconnect-test"


@pytest.fixture(scope="module")
def signing_key():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "securetoken.test")])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(datetime.utcnow() - timedelta(days=1))
        .not_valid_after(datetime.utcnow() + timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    return key, cert.public_bytes(serialization.Encoding.PEM).decode()


@pytest.fixture
def google_keys(signing_key, monkeypatch):
    _, pem = signing_key

    async def fake_keys(force_refresh=False):
        return {"kid-1": pem}

    monkeypatch.setattr(auth, "get_google_public_keys", fake_keys)


def _segment(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


def _token(key, kid="kid-1", **claim_overrides):
    now = int(time.time())
    claims = {
        "aud": PROJECT_ID,
        "iss": f"https://securetoken.google.com/{PROJECT_ID}",
        "sub": "firebase-uid-1",
        "email": "donor@example.com",
        "iat": now - 10,
        "exp": now + 3600,
    }
    claims.update(claim_overrides)
    signing_input = f"{_segment({'alg': 'RS256', 'kid': kid})}.{_segment(claims)}"
    signature = key.sign(signing_input.encode(), padding.PKCS1v15(), hashes.SHA256())
    return f"{signing_input}.{base64.urlsafe_b64encode(signature).rstrip(b'=').decode()}"


def _status(token):
    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(verify(token))
    return exc_info.value


def test_valid_token_returns_claims(signing_key, google_keys):
    key, _ = signing_key

    claims = asyncio.run(verify(_token(key)))

    assert claims["sub"] == "firebase-uid-1"
    assert claims["email"] == "donor@example.com"


def test_expired_token_is_flagged(signing_key, google_keys):
    key, _ = signing_key

    error = _status(_token(key, exp=int(time.time()) - 5))

    assert error.status_code == 401
    assert error.headers == {"X-Token-Expired": "true"}


@pytest.mark.parametrize(
    "overrides",
    [{"aud": "another-project"}, {"iss": "https://example.com"}, {"sub": ""}],
)
def test_bad_claims_are_rejected(signing_key, google_keys, overrides):
    key, _ = signing_key

    assert _status(_token(key, **overrides)).status_code == 401


def test_tampered_payload_is_rejected(signing_key, google_keys):
    key, _ = signing_key
    header, _, signature = _token(key).split(".")
    forged = _segment({"aud": PROJECT_ID, "sub": "someone-else"})

    assert _status(f"{header}.{forged}.{signature}").detail == "Invalid token signature"


def test_unknown_key_id_is_rejected(signing_key, google_keys):
    key, _ = signing_key

    assert _status(_token(key, kid="rotated-away")).detail == "Unable to verify token signature"


def test_malformed_token(google_keys):
    assert _status("not-a-jwt").detail == "Invalid token format"
