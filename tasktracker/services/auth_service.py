from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.orm import Session

from tasktracker.core.security import TOKEN_ACCESS, TOKEN_REFRESH, create_token, verify_password, verify_token
from tasktracker.models.enums import UserRole
from tasktracker.models.user import User
from tasktracker.repositories.user import UserRepository
from tasktracker.schemas.auth import LoginIn, LoginOut, RegisterIn
from tasktracker.schemas.user import UserCreate, UserOut
from tasktracker.services.user_service import create_user_row, get_user_row

_LOG = logging.getLogger("tasktracker.auth")


def token_claims(user: User) -> dict:
    return {
        "sub": str(user.id),
        "email": user.email,
        "full_name": user.full_name,
        "role": user.role,
    }


def issue_tokens(user: User) -> tuple[str, str]:
    claims = token_claims(user)
    return create_token(claims, TOKEN_ACCESS), create_token(claims, TOKEN_REFRESH)


def _login_response(user: User) -> tuple[LoginOut, str]:
    access_token, refresh_token = issue_tokens(user)
    return LoginOut(access_token=access_token, user=UserOut.model_validate(user)), refresh_token


def register(db: Session, payload: RegisterIn) -> tuple[LoginOut, str]:
    user = create_user_row(
        db,
        UserCreate(
            email=payload.email,
            full_name=payload.full_name,
            password=payload.password,
            role=UserRole.USER,
        ),
    )
    return _login_response(user)


def login(db: Session, payload: LoginIn) -> tuple[LoginOut, str]:
    user = UserRepository(db).get_by_email(payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        _LOG.warning("login failed email=%s", payload.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _login_response(user)


def refresh(db: Session, refresh_token: str | None) -> tuple[LoginOut, str]:
    if not refresh_token:
        raise HTTPException(status_code=401, detail="Refresh token is missing")
    payload = verify_token(refresh_token, TOKEN_REFRESH)
    if payload is None:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    try:
        user_id = UUID(str(payload.get("sub") or "").strip())
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    try:
        user = get_user_row(db, user_id)
    except HTTPException as exc:
        raise HTTPException(status_code=401, detail="Invalid refresh token") from exc
    return _login_response(user)
