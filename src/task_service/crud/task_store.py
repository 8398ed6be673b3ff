# src/task_service/crud/task_store.py
"""
Ownership-filtered persistence for tasks.

Every operation takes the caller's Principal and only ever touches rows whose
owner_id equals principal.subject_id. Reads of someone else's task look
exactly like reads of a missing task; writes to someone else's task are
rejected with OwnershipFailure.

Each operation opens its own session. Mutations run the ownership check and
the change inside a single transaction. The row is locked where the backend
supports it, and the write itself is filtered on id and owner, so a row that
vanished between check and write is reported as not found.
"""

import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

from sqlalchemy import delete, not_, select, update
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from task_service.db import utcnow
from task_service.exceptions import (
    NotFoundFailure,
    OwnershipFailure,
    StorageFailure,
    ValidationFailure,
)
from task_service.models.task import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH, Task
from task_service.schemas.auth_schemas import Principal
from task_service.schemas.task_schemas import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)

T = TypeVar("T")


def validate_title(title: Optional[str]) -> str:
    if title is None:
        raise ValidationFailure("title: field is required")
    if not isinstance(title, str):
        raise ValidationFailure("title: must be a string")
    # len() counts code points, which is the unit the limits are defined in
    if len(title) < 1:
        raise ValidationFailure("title: must not be empty")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationFailure(
            f"title: must be at most {TITLE_MAX_LENGTH} characters"
        )
    return title


def validate_description(description: Optional[str]) -> Optional[str]:
    if description is None:
        return None
    if not isinstance(description, str):
        raise ValidationFailure("description: must be a string")
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationFailure(
            f"description: must be at most {DESCRIPTION_MAX_LENGTH} characters"
        )
    return description


def _is_transient(error: DBAPIError) -> bool:
    return isinstance(error, (OperationalError, InterfaceError)) or bool(
        error.connection_invalidated
    )


class TaskStore:
    """CRUD over tasks, scoped to the requesting principal."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        clock: Callable = utcnow,
    ):
        self._session_factory = session_factory
        self._clock = clock

    async def _run(
        self,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[T]],
        retry: bool = True,
    ) -> T:
        """
        Run `work` in a fresh session. A transient storage error is retried
        once with a new session unless `retry` is off; domain failures
        propagate untouched.
        """
        max_attempts = 2 if retry else 1
        for attempt in range(1, max_attempts + 1):
            try:
                async with self._session_factory() as session:
                    return await work(session)
            except DBAPIError as e:
                if attempt < max_attempts and _is_transient(e):
                    logger.warning(
                        f"Transient database error during {operation}, retrying once: "
                        f"{e.__class__.__name__}: {e}"
                    )
                    continue
                logger.error(
                    f"Database error during {operation}: {e}", exc_info=True
                )
                raise StorageFailure() from e
            except SQLAlchemyError as e:
                logger.error(f"Database error during {operation}: {e}", exc_info=True)
                raise StorageFailure() from e
        # Unreachable: the last attempt either returns or raises
        raise StorageFailure()

    @staticmethod
    async def _get_for_write(
        session: AsyncSession, principal: Principal, task_id: int
    ) -> Task:
        result = await session.execute(
            select(Task).where(Task.id == task_id).with_for_update()
        )
        task = result.scalars().first()
        if task is None:
            raise NotFoundFailure()
        if task.owner_id != principal.subject_id:
            logger.warning(
                f"Ownership check failed: subject {principal.subject_id} "
                f"attempted to modify task {task_id}"
            )
            raise OwnershipFailure()
        return task

    @staticmethod
    def _owned(principal: Principal, task_id: int):
        return (Task.id == task_id, Task.owner_id == principal.subject_id)

    @staticmethod
    async def _write_owned(session: AsyncSession, statement) -> None:
        result = await session.execute(
            statement.execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # Deleted by a concurrent request after the ownership check
            raise NotFoundFailure()

    async def list_tasks(self, principal: Principal) -> List[Task]:
        """Return the principal's tasks, newest first."""

        async def work(session: AsyncSession) -> List[Task]:
            result = await session.execute(
                select(Task)
                .where(Task.owner_id == principal.subject_id)
                .order_by(Task.created_at.desc(), Task.id.desc())
            )
            return list(result.scalars().all())

        return await self._run("list_tasks", work)

    async def create_task(self, principal: Principal, data: TaskCreate) -> Task:
        title = validate_title(data.title)
        description = validate_description(data.description)

        async def work(session: AsyncSession) -> Task:
            now = self._clock()
            async with session.begin():
                task = Task(
                    owner_id=principal.subject_id,
                    title=title,
                    description=description,
                    completed=False,
                    created_at=now,
                    updated_at=now,
                )
                session.add(task)
                # Flush to get the server-assigned id before commit.
                await session.flush()
            logger.info(
                f"Task {task.id} created for subject {principal.subject_id}"
            )
            return task

        # An insert that fails at commit may still have landed, so never replay it
        return await self._run("create_task", work, retry=False)

    async def get_task(self, principal: Principal, task_id: int) -> Task:
        """
        Fetch one task. A task owned by someone else is reported as not found.
        """

        async def work(session: AsyncSession) -> Task:
            result = await session.execute(
                select(Task).where(
                    Task.id == task_id, Task.owner_id == principal.subject_id
                )
            )
            task = result.scalars().first()
            if task is None:
                raise NotFoundFailure()
            return task

        return await self._run("get_task", work)

    async def update_task(
        self, principal: Principal, task_id: int, changes: TaskUpdate
    ) -> Task:
        """
        Apply the fields present in `changes`. At least one of title or
        description must be supplied.
        """
        supplied = changes.model_fields_set & {"title", "description"}
        if not supplied:
            raise ValidationFailure(
                "At least one of title or description must be provided"
            )

        async def work(session: AsyncSession) -> Task:
            async with session.begin():
                task = await self._get_for_write(session, principal, task_id)
                values = {"updated_at": self._clock()}
                if "title" in supplied:
                    values["title"] = validate_title(changes.title)
                if "description" in supplied:
                    values["description"] = validate_description(changes.description)
                await self._write_owned(
                    session,
                    update(Task).where(*self._owned(principal, task_id)).values(**values),
                )
                await session.refresh(task)
            logger.info(f"Task {task_id} updated by subject {principal.subject_id}")
            return task

        return await self._run("update_task", work)

    async def toggle_complete(self, principal: Principal, task_id: int) -> Task:
        async def work(session: AsyncSession) -> Task:
            async with session.begin():
                task = await self._get_for_write(session, principal, task_id)
                # Flip in SQL so two concurrent toggles can't both read the same value
                await self._write_owned(
                    session,
                    update(Task)
                    .where(*self._owned(principal, task_id))
                    .values(completed=not_(Task.completed), updated_at=self._clock()),
                )
                await session.refresh(task)
            logger.info(
                f"Task {task_id} marked {'complete' if task.completed else 'incomplete'} "
                f"by subject {principal.subject_id}"
            )
            return task

        return await self._run("toggle_complete", work)

    async def delete_task(self, principal: Principal, task_id: int) -> None:
        async def work(session: AsyncSession) -> None:
            async with session.begin():
                await self._get_for_write(session, principal, task_id)
                await self._write_owned(
                    session, delete(Task).where(*self._owned(principal, task_id))
                )
            logger.info(f"Task {task_id} deleted by subject {principal.subject_id}")

        await self._run("delete_task", work)
