from __future__ import annotations

import logging
from typing import Iterable
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.inspection import inspect as sa_inspect
from sqlalchemy.orm import Session

from tasktracker.models.task import Task
from tasktracker.repositories.base import RecordPatch
from tasktracker.repositories.task import TaskRepository
from tasktracker.repositories.user import UserRepository
from tasktracker.schemas.conditions import ConditionSet, Equals, scope_to
from tasktracker.schemas.pagination import ListPage, PaginationRequest
from tasktracker.schemas.task import TaskCreate, TaskFilter, TaskOut, TaskUpdate
from tasktracker.schemas.user import UserOut
from tasktracker.services.pagination import paginate

_LOG = logging.getLogger("tasktracker.tasks")


def task_to_out(row: Task) -> TaskOut:
    # Relations that were not requested stay unpopulated instead of lazy-loading.
    user = None if "user" in sa_inspect(row).unloaded else row.user
    return TaskOut(
        id=row.id,
        title=row.title,
        description=row.description,
        status=row.status,
        priority=row.priority,
        due_date=row.due_date,
        user_id=row.user_id,
        user=UserOut.model_validate(user) if user is not None else None,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _owned(task_id: UUID, user_id: UUID) -> ConditionSet:
    return ConditionSet.of(Equals(field="id", value=task_id)).and_(scope_to("user_id", user_id))


def list_tasks(
    db: Session,
    pagination: PaginationRequest,
    filters: TaskFilter,
    user_id: UUID,
    relations: Iterable[str] = (),
) -> ListPage[TaskOut]:
    # Ownership is ANDed on; nothing in the filter can widen it.
    conditions = filters.to_condition_set().and_(scope_to("user_id", user_id))
    return paginate(TaskRepository(db), conditions, pagination, task_to_out, relations)


def get_task(db: Session, task_id: UUID, user_id: UUID, relations: Iterable[str] = ()) -> TaskOut:
    row = TaskRepository(db).find_one(_owned(task_id, user_id), relations)
    if row is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task_to_out(row)


def create_task(db: Session, payload: TaskCreate, user_id: UUID) -> TaskOut:
    owner = UserRepository(db).find_one(ConditionSet.of(Equals(field="id", value=user_id)))
    if owner is None:
        raise HTTPException(status_code=404, detail="User not found")
    row = Task(
        title=payload.title,
        description=payload.description,
        status=payload.status.value,
        priority=payload.priority.value,
        due_date=payload.due_date,
        user_id=owner.id,
    )
    row = TaskRepository(db).add(row)
    _LOG.info("task created id=%s user_id=%s", row.id, owner.id)
    return task_to_out(row)


def update_task(db: Session, task_id: UUID, payload: TaskUpdate, user_id: UUID) -> TaskOut:
    patch = RecordPatch.from_model(payload, nullable={"description"})
    outcome = TaskRepository(db).update_by(_owned(task_id, user_id), patch)
    if outcome.updated_entity is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task_to_out(outcome.updated_entity)


def delete_task(db: Session, task_id: UUID, user_id: UUID) -> None:
    removed = TaskRepository(db).delete_by(_owned(task_id, user_id))
    if not removed:
        raise HTTPException(status_code=404, detail="Task not found")
    _LOG.info("task deleted id=%s user_id=%s", task_id, user_id)
