# src/task_service/security.py
"""
Bearer token verification.

Tokens are compact HMAC-signed JWTs minted by the external auth service. The
verifier is a pure function of (token, secret, current time): it performs no
I/O and holds no mutable state, so a single instance is shared by all
requests.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from jose import jws, jwt
from jose.exceptions import JWSError

from task_service.config import ALLOWED_JWT_ALGORITHMS
from task_service.schemas.auth_schemas import Principal

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME = timedelta(days=7)


class VerificationFailure(str, Enum):
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"


class TokenVerificationError(Exception):
    """Raised by TokenVerifier.verify; `failure` says which check rejected the token."""

    def __init__(self, failure: VerificationFailure, reason: str = ""):
        self.failure = failure
        self.reason = reason
        super().__init__(f"{failure.value}: {reason}" if reason else failure.value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _numeric_date(claims: Mapping[str, Any], name: str) -> datetime:
    value = claims.get(name)
    # bool is an int subclass but never a valid NumericDate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TokenVerificationError(
            VerificationFailure.MALFORMED, f"claim '{name}' missing or not numeric"
        )
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        raise TokenVerificationError(
            VerificationFailure.MALFORMED, f"claim '{name}' out of range"
        )


class TokenVerifier:
    """
    Validates bearer tokens against a shared secret.

    The accepted algorithm comes from configuration, never from the token
    header, so a token cannot downgrade itself to `none` or swap HMAC for
    another family. Signature comparison is delegated to python-jose's HMAC
    key, which uses a constant-time digest comparison.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ValueError("Token verifier requires a non-empty secret")
        if algorithm not in ALLOWED_JWT_ALGORITHMS:
            raise ValueError(f"Unsupported token algorithm: {algorithm}")
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock or _utcnow

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def verify(self, raw_token: str) -> Principal:
        """
        Verify a raw bearer token and return the principal it identifies.

        Checks run in order and stop at the first failure:
        structure, signature, required claims, expiry.

        Raises:
            TokenVerificationError: with the kind of the failed check.
        """
        if not isinstance(raw_token, str) or not raw_token.strip():
            raise TokenVerificationError(VerificationFailure.MALFORMED, "empty token")
        if raw_token.count(".") != 2:
            raise TokenVerificationError(
                VerificationFailure.MALFORMED, "expected three segments"
            )

        # 1. Structure
        try:
            header = jws.get_unverified_header(raw_token)
        except JWSError as e:
            raise TokenVerificationError(VerificationFailure.MALFORMED, str(e))

        # 2. Signature
        if header.get("alg") != self._algorithm:
            raise TokenVerificationError(
                VerificationFailure.BAD_SIGNATURE,
                f"algorithm {header.get('alg')!r} not allowed",
            )
        try:
            payload = jws.verify(raw_token, self._secret, algorithms=[self._algorithm])
        except JWSError as e:
            raise TokenVerificationError(VerificationFailure.BAD_SIGNATURE, str(e))

        # 3. Claims
        try:
            claims = json.loads(payload.decode("utf-8"))
        except ValueError:
            raise TokenVerificationError(
                VerificationFailure.MALFORMED, "payload is not valid JSON"
            )
        if not isinstance(claims, dict):
            raise TokenVerificationError(
                VerificationFailure.MALFORMED, "payload is not a JSON object"
            )

        subject_id = claims.get("sub")
        if not isinstance(subject_id, str) or not subject_id:
            raise TokenVerificationError(
                VerificationFailure.MALFORMED, "claim 'sub' missing or not a string"
            )
        issued_at = _numeric_date(claims, "iat")
        expires_at = _numeric_date(claims, "exp")

        # 4. Expiry
        if expires_at <= self._clock():
            raise TokenVerificationError(VerificationFailure.EXPIRED, "token expired")

        return Principal(
            subject_id=subject_id, issued_at=issued_at, expires_at=expires_at
        )


def create_access_token(
    subject_id: str,
    secret: str,
    algorithm: str = "HS256",
    expires_delta: Optional[timedelta] = None,
    issued_at: Optional[datetime] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Creates an access token in the format issued by the auth service.
    Used by the test suite and the developer token script.
    """
    now = issued_at or _utcnow()
    expire = now + (expires_delta if expires_delta is not None else DEFAULT_TOKEN_LIFETIME)

    to_encode: Dict[str, Any] = dict(extra_claims or {})
    to_encode.update(
        {
            "sub": subject_id,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
    )
    return jwt.encode(to_encode, secret, algorithm=algorithm)
