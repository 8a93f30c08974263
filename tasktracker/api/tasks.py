from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tasktracker.core.deps import get_current_user_id, get_pagination, get_relations
from tasktracker.db.session import get_db
from tasktracker.schemas.pagination import ListPage, PaginationRequest
from tasktracker.schemas.task import TaskCreate, TaskFilter, TaskOut, TaskUpdate
from tasktracker.services import task_service

router = APIRouter()


@router.get("", response_model=ListPage[TaskOut])
def list_tasks(
    filters: Annotated[TaskFilter, Query()],
    relations: list[str] = Depends(get_relations),
    pagination: PaginationRequest = Depends(get_pagination),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return task_service.list_tasks(db, pagination, filters, user_id, relations)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: UUID,
    relations: list[str] = Depends(get_relations),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return task_service.get_task(db, task_id, user_id, relations)


@router.post("", response_model=TaskOut, status_code=201)
def create_task(payload: TaskCreate, user_id: UUID = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return task_service.create_task(db, payload, user_id)


@router.patch("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: UUID,
    payload: TaskUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return task_service.update_task(db, task_id, payload, user_id)


@router.delete("/{task_id}", status_code=204)
def delete_task(task_id: UUID, user_id: UUID = Depends(get_current_user_id), db: Session = Depends(get_db)):
    task_service.delete_task(db, task_id, user_id)
