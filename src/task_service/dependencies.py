"""
FastAPI dependencies for request authentication and the task store.

The request gate is `get_current_principal`: every protected route declares
it, so a request without a valid bearer token is rejected before the route
body runs, and the verified Principal is handed to the route as an ordinary
argument.
"""
import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from task_service.config import settings
from task_service.crud.task_store import TaskStore
from task_service.db import AsyncSessionLocal
from task_service.exceptions import AuthenticationFailure
from task_service.schemas.auth_schemas import Principal
from task_service.security import TokenVerificationError, TokenVerifier

logger = logging.getLogger(__name__)

# auto_error is off so a missing header goes through the same generic 401 path
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_token_verifier() -> TokenVerifier:
    """Build the process-wide verifier from configuration, once."""
    return TokenVerifier(
        secret=settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )


def get_task_store() -> TaskStore:
    return TaskStore(AsyncSessionLocal)


def authenticate(
    credentials: Optional[HTTPAuthorizationCredentials], verifier: TokenVerifier
) -> Principal:
    """
    Turn bearer credentials into a Principal.

    Raises:
        AuthenticationFailure: If the header is missing or the token is invalid.
            The response is the same for every failure reason.
    """
    if credentials is None:
        logger.warning("Authentication failed: missing or non-bearer Authorization header")
        raise AuthenticationFailure()

    try:
        principal = verifier.verify(credentials.credentials)
    except TokenVerificationError as e:
        logger.warning(
            f"Authentication failed: {e.failure.value} ({e.reason})"
        )
        raise AuthenticationFailure()

    logger.debug(f"Authenticated subject {principal.subject_id}")
    return principal


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> Principal:
    """
    Validate the bearer token from the Authorization header.

    Returns:
        Principal: The identity carried by the token
    """
    return authenticate(credentials, verifier)
