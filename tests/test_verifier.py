# =============================================================================
# tests/test_verifier.py - Identity Verifier Tests
# =============================================================================
# Unit tests for IdentityVerifier:
# - HS256 tokens with the shared secret (dev/test mode)
# - Audience, expiry and algorithm checks
# - JWKS key lookup with refetch on an unknown key id
#
# JWKS requests go through httpx.MockTransport; nothing leaves the process.
# =============================================================================

import base64
import json
import time

import httpx
import pytest
from jose import jwt

from app.auth.verifier import IdentityVerifier
from app.exceptions import InvalidCredentialError
from tests.conftest import TEST_JWT_SECRET, TEST_PROJECT_ID, issue_token

JWKS_URL = "https://keys.example.com/jwks.json"


def make_verifier(shared_secret=TEST_JWT_SECRET, handler=None):
    transport = httpx.MockTransport(handler or (lambda request: httpx.Response(200, json={"keys": []})))
    return IdentityVerifier(
        project_id=TEST_PROJECT_ID,
        jwks_url=JWKS_URL,
        shared_secret=shared_secret,
        http_client=httpx.Client(transport=transport),
    )


def unsigned_rs256_token(kid: str) -> str:
    """A token whose header names an RS256 key; the signature is never reached."""
    def segment(data: dict) -> str:
        raw = json.dumps(data).encode()
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()

    header = segment({"alg": "RS256", "kid": kid, "typ": "JWT"})
    payload = segment({"sub": "alice", "aud": TEST_PROJECT_ID})
    return f"{header}.{payload}.c2lnbmF0dXJl"


class TestSharedSecretTokens:
    """Tests for HS256 verification."""

    def test_valid_token(self):
        verifier = make_verifier()

        identity = verifier.verify(issue_token("alice", email="alice@example.com", name="Alice"))

        assert identity.uid == "alice"
        assert identity.email == "alice@example.com"
        assert identity.name == "Alice"
        assert identity.claims["aud"] == TEST_PROJECT_ID

    def test_expired_token(self):
        verifier = make_verifier()

        with pytest.raises(InvalidCredentialError) as exc_info:
            verifier.verify(issue_token("alice", expires_in=-60))

        assert exc_info.value.message == "Unauthorized - Token has expired"

    def test_wrong_audience(self):
        verifier = make_verifier()

        with pytest.raises(InvalidCredentialError):
            verifier.verify(issue_token("alice", audience="some-other-project"))

    def test_wrong_secret(self):
        verifier = make_verifier()

        with pytest.raises(InvalidCredentialError):
            verifier.verify(issue_token("alice", secret="a-completely-different-secret"))

    def test_hs256_rejected_without_secret(self):
        verifier = make_verifier(shared_secret=None)

        with pytest.raises(InvalidCredentialError) as exc_info:
            verifier.verify(issue_token("alice"))

        assert exc_info.value.details["reason"] == "Unsupported token algorithm"

    def test_missing_subject(self):
        now = int(time.time())
        token = jwt.encode(
            {
                "aud": TEST_PROJECT_ID,
                "iss": f"https://securetoken.google.com/{TEST_PROJECT_ID}",
                "iat": now,
                "exp": now + 600,
            },
            TEST_JWT_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(InvalidCredentialError):
            make_verifier().verify(token)

    @pytest.mark.parametrize("token", ["", "not-a-jwt"])
    def test_malformed(self, token):
        with pytest.raises(InvalidCredentialError):
            make_verifier().verify(token)


class TestSigningKeys:
    """Tests for JWKS lookups."""

    def test_unknown_kid_refetches_once(self):
        requests = []

        def handler(request):
            requests.append(request.url)
            return httpx.Response(200, json={"keys": [{"kid": "other", "kty": "RSA"}]})

        verifier = make_verifier(handler=handler)

        with pytest.raises(InvalidCredentialError) as exc_info:
            verifier.verify(unsigned_rs256_token("rotated-away"))

        assert exc_info.value.details["reason"] == "Unknown signing key"
        assert len(requests) == 2
        assert str(requests[0]) == JWKS_URL

    def test_jwks_outage_rejects_token(self):
        verifier = make_verifier(handler=lambda request: httpx.Response(503))

        with pytest.raises(InvalidCredentialError):
            verifier.verify(unsigned_rs256_token("any"))

    def test_unsupported_algorithm(self):
        token = jwt.encode({"sub": "alice"}, "x" * 32, algorithm="HS512")

        with pytest.raises(InvalidCredentialError):
            make_verifier().verify(token)
