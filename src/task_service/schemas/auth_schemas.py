"""
Pydantic models for authentication data, such as the verified request principal.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Principal(BaseModel):
    """
    Identity derived from a verified bearer token.
    Built fresh for every request and never persisted.
    """

    model_config = ConfigDict(frozen=True)

    subject_id: str = Field(..., min_length=1, description="Stable subject identifier")
    issued_at: datetime = Field(..., description="When the token was issued (UTC)")
    expires_at: datetime = Field(..., description="When the token expires (UTC)")


class PrincipalResponse(BaseModel):
    """
    Response model describing the caller's own identity. `id` mirrors
    `subject_id` for clients that read the user id under that name.
    """

    id: str
    subject_id: str
    issued_at: datetime
    expires_at: datetime
