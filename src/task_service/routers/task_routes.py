"""
Task router. Every route requires a bearer token and only ever sees the
caller's own tasks.
"""

import logging

from fastapi import APIRouter, Depends, Path, Response, status

from task_service.crud.task_store import TaskStore
from task_service.models.task import MAX_TASK_ID
from task_service.dependencies import get_current_principal, get_task_store
from task_service.schemas.auth_schemas import Principal
from task_service.schemas.common_schemas import MessageResponse
from task_service.schemas.task_schemas import (
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/tasks",
    tags=["Tasks"],
    responses={
        status.HTTP_401_UNAUTHORIZED: {
            "description": "Missing, invalid or expired bearer token",
            "model": MessageResponse,
            "content": {
                "application/json": {"example": {"detail": "Invalid or expired token"}}
            },
        },
    },
)

_not_found = {
    "description": "Task does not exist or belongs to another user",
    "model": MessageResponse,
}
_forbidden = {
    "description": "Task belongs to another user",
    "model": MessageResponse,
}
_bad_request = {"description": "Invalid request body", "model": MessageResponse}


@router.get(
    "",
    response_model=TaskListResponse,
    status_code=status.HTTP_200_OK,
    summary="List the caller's tasks",
    description="Returns every task owned by the caller, newest first.",
)
async def list_tasks(
    principal: Principal = Depends(get_current_principal),
    store: TaskStore = Depends(get_task_store),
) -> TaskListResponse:
    tasks = await store.list_tasks(principal)
    return TaskListResponse(tasks=[TaskResponse.model_validate(t) for t in tasks])


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
    responses={status.HTTP_400_BAD_REQUEST: _bad_request},
)
async def create_task(
    task_in: TaskCreate,
    principal: Principal = Depends(get_current_principal),
    store: TaskStore = Depends(get_task_store),
) -> TaskResponse:
    """
    Create a task owned by the caller.

    The owner is always the authenticated subject; any owner field in the
    request body is ignored.
    """
    task = await store.create_task(principal, task_in)
    return TaskResponse.model_validate(task)


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Get one task",
    responses={status.HTTP_404_NOT_FOUND: _not_found},
)
async def get_task(
    task_id: int = Path(..., ge=1, le=MAX_TASK_ID, description="ID of the task"),
    principal: Principal = Depends(get_current_principal),
    store: TaskStore = Depends(get_task_store),
) -> TaskResponse:
    task = await store.get_task(principal, task_id)
    return TaskResponse.model_validate(task)


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Update a task's title and/or description",
    responses={
        status.HTTP_400_BAD_REQUEST: _bad_request,
        status.HTTP_403_FORBIDDEN: _forbidden,
        status.HTTP_404_NOT_FOUND: _not_found,
    },
)
async def update_task(
    changes: TaskUpdate,
    task_id: int = Path(..., ge=1, le=MAX_TASK_ID, description="ID of the task"),
    principal: Principal = Depends(get_current_principal),
    store: TaskStore = Depends(get_task_store),
) -> TaskResponse:
    task = await store.update_task(principal, task_id, changes)
    return TaskResponse.model_validate(task)


@router.patch(
    "/{task_id}/complete",
    response_model=TaskResponse,
    summary="Toggle a task's completed flag",
    responses={
        status.HTTP_403_FORBIDDEN: _forbidden,
        status.HTTP_404_NOT_FOUND: _not_found,
    },
)
async def toggle_task_complete(
    task_id: int = Path(..., ge=1, le=MAX_TASK_ID, description="ID of the task"),
    principal: Principal = Depends(get_current_principal),
    store: TaskStore = Depends(get_task_store),
) -> TaskResponse:
    task = await store.toggle_complete(principal, task_id)
    return TaskResponse.model_validate(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a task permanently",
    responses={
        status.HTTP_403_FORBIDDEN: _forbidden,
        status.HTTP_404_NOT_FOUND: _not_found,
    },
)
async def delete_task(
    task_id: int = Path(..., ge=1, le=MAX_TASK_ID, description="ID of the task"),
    principal: Principal = Depends(get_current_principal),
    store: TaskStore = Depends(get_task_store),
) -> Response:
    await store.delete_task(principal, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
