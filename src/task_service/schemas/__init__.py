# Re-export schemas for convenience
from task_service.schemas.auth_schemas import Principal, PrincipalResponse
from task_service.schemas.common_schemas import HealthResponse, MessageResponse
from task_service.schemas.task_schemas import (
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
)

__all__ = [
    "Principal",
    "PrincipalResponse",
    "HealthResponse",
    "MessageResponse",
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "TaskListResponse",
]
