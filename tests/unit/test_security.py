"""
Unit tests for bearer token verification.
"""
import base64
import json
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from task_service.security import (
    TokenVerificationError,
    TokenVerifier,
    VerificationFailure,
    create_access_token,
)

SECRET = "unit-test-secret"


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _forge(header: dict, claims, signature: str = "sig") -> str:
    """Assemble a token from raw parts without signing it properly."""
    payload = claims if isinstance(claims, bytes) else json.dumps(claims).encode()
    return ".".join([_b64(json.dumps(header).encode()), _b64(payload), signature])


def _failure_of(verifier: TokenVerifier, token) -> VerificationFailure:
    with pytest.raises(TokenVerificationError) as exc_info:
        verifier.verify(token)
    return exc_info.value.failure


@pytest.fixture
def verifier():
    return TokenVerifier(secret=SECRET)


class TestTokenVerifierSuccess:
    def test_valid_token_returns_principal(self, verifier):
        token = create_access_token("user-42", SECRET)

        principal = verifier.verify(token)

        assert principal.subject_id == "user-42"
        assert principal.expires_at > datetime.now(timezone.utc)
        assert principal.issued_at <= principal.expires_at

    def test_default_lifetime_is_seven_days(self, verifier):
        issued = datetime(2026, 1, 1, tzinfo=timezone.utc)
        fixed = TokenVerifier(secret=SECRET, clock=lambda: issued + timedelta(hours=1))
        token = create_access_token("u1", SECRET, issued_at=issued)

        principal = fixed.verify(token)

        assert principal.issued_at == issued
        assert principal.expires_at - principal.issued_at == timedelta(days=7)

    def test_extra_claims_are_ignored(self, verifier):
        token = create_access_token(
            "u1", SECRET, extra_claims={"email": "a@example.com", "name": "A"}
        )
        assert verifier.verify(token).subject_id == "u1"

    @pytest.mark.parametrize("algorithm", ["HS384", "HS512"])
    def test_configured_algorithm_is_accepted(self, algorithm):
        verifier = TokenVerifier(secret=SECRET, algorithm=algorithm)
        token = create_access_token("u1", SECRET, algorithm=algorithm)
        assert verifier.verify(token).subject_id == "u1"

    def test_principal_is_immutable(self, verifier):
        principal = verifier.verify(create_access_token("u1", SECRET))
        with pytest.raises(Exception):
            principal.subject_id = "u2"


class TestTokenVerifierMalformed:
    @pytest.mark.parametrize(
        "token",
        ["", "   ", "garbage", "a.b", "a.b.c.d", "not.a.jwt", None, 12345],
    )
    def test_structurally_invalid_tokens(self, verifier, token):
        assert _failure_of(verifier, token) == VerificationFailure.MALFORMED

    def test_header_not_json(self, verifier):
        token = ".".join([_b64(b"not json"), _b64(b"{}"), "sig"])
        assert _failure_of(verifier, token) == VerificationFailure.MALFORMED

    def test_missing_subject_claim(self, verifier):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"iat": int(now.timestamp()), "exp": int((now + timedelta(hours=1)).timestamp())},
            SECRET,
            algorithm="HS256",
        )
        assert _failure_of(verifier, token) == VerificationFailure.MALFORMED

    @pytest.mark.parametrize("missing", ["iat", "exp"])
    def test_missing_time_claims(self, verifier, missing):
        now = datetime.now(timezone.utc)
        claims = {
            "sub": "u1",
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(hours=1)).timestamp()),
        }
        del claims[missing]
        token = jwt.encode(claims, SECRET, algorithm="HS256")
        assert _failure_of(verifier, token) == VerificationFailure.MALFORMED

    @pytest.mark.parametrize(
        "claims",
        [
            {"sub": 123, "iat": 1, "exp": 4102444800},
            {"sub": "", "iat": 1, "exp": 4102444800},
            {"sub": "u1", "iat": "yesterday", "exp": 4102444800},
            {"sub": "u1", "iat": 1, "exp": "tomorrow"},
            {"sub": "u1", "iat": 1, "exp": True},
        ],
    )
    def test_ill_typed_claims(self, verifier, claims):
        token = jwt.encode(claims, SECRET, algorithm="HS256")
        assert _failure_of(verifier, token) == VerificationFailure.MALFORMED

    def test_payload_that_is_not_an_object(self, verifier):
        from jose import jws

        token = jws.sign(b'["u1"]', SECRET, algorithm="HS256")
        assert _failure_of(verifier, token) == VerificationFailure.MALFORMED


class TestTokenVerifierSignature:
    def test_token_signed_with_other_secret(self, verifier):
        token = create_access_token("u1", "some-other-secret")
        assert _failure_of(verifier, token) == VerificationFailure.BAD_SIGNATURE

    def test_tampered_payload(self, verifier):
        token = create_access_token("u1", SECRET)
        header, _, signature = token.split(".")
        now = datetime.now(timezone.utc)
        forged_claims = {
            "sub": "admin",
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(days=7)).timestamp()),
        }
        forged = ".".join([header, _b64(json.dumps(forged_claims).encode()), signature])

        assert _failure_of(verifier, forged) == VerificationFailure.BAD_SIGNATURE

    def test_alg_none_is_rejected(self, verifier):
        now = datetime.now(timezone.utc)
        token = _forge(
            {"alg": "none", "typ": "JWT"},
            {"sub": "u1", "iat": int(now.timestamp()), "exp": int(now.timestamp()) + 3600},
            signature="",
        )
        assert _failure_of(verifier, token) == VerificationFailure.BAD_SIGNATURE

    def test_algorithm_comes_from_configuration_not_header(self, verifier):
        # Correctly signed, but with an algorithm the verifier was not configured for
        token = create_access_token("u1", SECRET, algorithm="HS512")
        assert _failure_of(verifier, token) == VerificationFailure.BAD_SIGNATURE

    def test_bad_signature_wins_over_expiry(self, verifier):
        token = create_access_token(
            "u1", "some-other-secret", expires_delta=timedelta(minutes=-5)
        )
        assert _failure_of(verifier, token) == VerificationFailure.BAD_SIGNATURE


class TestTokenVerifierExpiry:
    def test_expired_token(self, verifier):
        token = create_access_token("u1", SECRET, expires_delta=timedelta(seconds=-1))
        assert _failure_of(verifier, token) == VerificationFailure.EXPIRED

    def test_token_expiring_exactly_now_is_expired(self):
        issued = datetime(2026, 1, 1, tzinfo=timezone.utc)
        token = create_access_token("u1", SECRET, issued_at=issued)
        verifier = TokenVerifier(secret=SECRET, clock=lambda: issued + timedelta(days=7))

        assert _failure_of(verifier, token) == VerificationFailure.EXPIRED

    def test_token_valid_just_before_expiry(self):
        issued = datetime(2026, 1, 1, tzinfo=timezone.utc)
        token = create_access_token("u1", SECRET, issued_at=issued)
        verifier = TokenVerifier(
            secret=SECRET, clock=lambda: issued + timedelta(days=7, seconds=-1)
        )

        assert verifier.verify(token).subject_id == "u1"


class TestTokenVerifierConstruction:
    def test_empty_secret_is_rejected(self):
        with pytest.raises(ValueError):
            TokenVerifier(secret="")

    @pytest.mark.parametrize("algorithm", ["none", "RS256", "hs256"])
    def test_unsupported_algorithm_is_rejected(self, algorithm):
        with pytest.raises(ValueError):
            TokenVerifier(secret=SECRET, algorithm=algorithm)
