"""
Helpers for building tokens and principals in tests.
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from task_service.config import settings
from task_service.schemas.auth_schemas import Principal
from task_service.security import create_access_token


def make_token(
    subject_id: str = "u1",
    secret: Optional[str] = None,
    algorithm: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
    **kwargs,
) -> str:
    """Sign a token the way the auth service does, using the test secret by default."""
    return create_access_token(
        subject_id=subject_id,
        secret=secret or settings.JWT_SECRET_KEY,
        algorithm=algorithm or settings.JWT_ALGORITHM,
        expires_delta=expires_delta,
        **kwargs,
    )


def auth_headers(subject_id: str = "u1", **kwargs) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(subject_id, **kwargs)}"}


def make_principal(subject_id: str = "u1") -> Principal:
    now = datetime.now(timezone.utc)
    return Principal(
        subject_id=subject_id, issued_at=now, expires_at=now + timedelta(days=7)
    )
