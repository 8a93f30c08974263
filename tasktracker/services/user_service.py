from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tasktracker.core.security import hash_password
from tasktracker.models.user import User
from tasktracker.repositories.base import RecordPatch
from tasktracker.repositories.user import UserRepository, normalize_email
from tasktracker.schemas.conditions import ConditionSet, Equals
from tasktracker.schemas.pagination import ListPage, PaginationRequest
from tasktracker.schemas.user import UserCreate, UserFilter, UserOut, UserUpdate
from tasktracker.services.pagination import paginate

_LOG = logging.getLogger("tasktracker.users")


def _by_id(user_id: UUID) -> ConditionSet:
    return ConditionSet.of(Equals(field="id", value=user_id))


def _email_taken_or_409(repo: UserRepository, email: str, *, exclude_id: UUID | None = None) -> None:
    existing = repo.get_by_email(email)
    if existing is not None and existing.id != exclude_id:
        raise HTTPException(status_code=409, detail="Email already in use")


def list_users(
    db: Session,
    pagination: PaginationRequest,
    filters: UserFilter,
) -> ListPage[UserOut]:
    return paginate(UserRepository(db), filters.to_condition_set(), pagination, UserOut.model_validate)


def get_user_row(db: Session, user_id: UUID) -> User:
    row = UserRepository(db).find_one(_by_id(user_id))
    if row is None:
        raise HTTPException(status_code=404, detail="User not found")
    return row


def get_user(db: Session, user_id: UUID) -> UserOut:
    return UserOut.model_validate(get_user_row(db, user_id))


def create_user_row(db: Session, payload: UserCreate) -> User:
    repo = UserRepository(db)
    email = normalize_email(payload.email)
    _email_taken_or_409(repo, email)
    row = User(
        email=email,
        full_name=payload.full_name.strip(),
        password_hash=hash_password(payload.password),
        role=payload.role.value,
    )
    try:
        row = repo.add(row)
    except IntegrityError:
        raise HTTPException(status_code=409, detail="Email already in use")
    _LOG.info("user created id=%s role=%s", row.id, row.role)
    return row


def create_user(db: Session, payload: UserCreate) -> UserOut:
    return UserOut.model_validate(create_user_row(db, payload))


def update_user(db: Session, user_id: UUID, payload: UserUpdate) -> UserOut:
    repo = UserRepository(db)
    values = dict(RecordPatch.from_model(payload).values)
    if "email" in values:
        values["email"] = normalize_email(values["email"])
        _email_taken_or_409(repo, values["email"], exclude_id=user_id)
    if "password" in values:
        values["password_hash"] = hash_password(values.pop("password"))
    try:
        outcome = repo.update_by(_by_id(user_id), RecordPatch(values=values))
    except IntegrityError:
        raise HTTPException(status_code=409, detail="Email already in use")
    if outcome.updated_entity is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserOut.model_validate(outcome.updated_entity)


def delete_user(db: Session, user_id: UUID) -> None:
    if not UserRepository(db).delete_by(_by_id(user_id)):
        raise HTTPException(status_code=404, detail="User not found")
    _LOG.info("user deleted id=%s", user_id)
