"""
Pydantic models (schemas) for the task API.

Length limits are enforced by the task store rather than here so that every
caller of the store gets the same validation, and so violations surface as
400 responses.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TaskCreate(BaseModel):
    """
    Request body for creating a task. Unknown fields (including any attempt
    to pass an owner) are ignored.
    """

    title: str = Field(..., description="Task title, 1-200 characters")
    description: Optional[str] = Field(
        None, description="Optional task description, up to 1000 characters"
    )


class TaskUpdate(BaseModel):
    """
    Request body for updating a task. Only the fields present in the request
    are applied; an explicit null description clears it.
    """

    title: Optional[str] = Field(None, description="New title, 1-200 characters")
    description: Optional[str] = Field(
        None, description="New description, up to 1000 characters"
    )


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: str
    title: str
    description: Optional[str] = None
    completed: bool
    created_at: datetime
    updated_at: datetime


class TaskListResponse(BaseModel):
    tasks: List[TaskResponse]
