from typing import Any, Dict

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """
    Generic message response, typically used for errors.
    """

    detail: str


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    version: str
    environment: str
    components: Dict[str, Any] = Field(default_factory=dict)
