from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tasktracker.core.deps import get_pagination, require_role
from tasktracker.db.session import get_db
from tasktracker.models.enums import UserRole
from tasktracker.schemas.pagination import ListPage, PaginationRequest
from tasktracker.schemas.user import UserCreate, UserFilter, UserOut, UserUpdate
from tasktracker.services import user_service

router = APIRouter(dependencies=[Depends(require_role(UserRole.ADMIN.value))])


@router.get("", response_model=ListPage[UserOut])
def list_users(
    filters: Annotated[UserFilter, Query()],
    pagination: PaginationRequest = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    return user_service.list_users(db, pagination, filters)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: UUID, db: Session = Depends(get_db)):
    return user_service.get_user(db, user_id)


@router.post("", response_model=UserOut, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return user_service.create_user(db, payload)


@router.patch("/{user_id}", response_model=UserOut)
def update_user(user_id: UUID, payload: UserUpdate, db: Session = Depends(get_db)):
    return user_service.update_user(db, user_id, payload)


@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: UUID, db: Session = Depends(get_db)):
    user_service.delete_user(db, user_id)
