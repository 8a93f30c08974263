from fastapi import APIRouter, Cookie, Depends, Response
from sqlalchemy.orm import Session

from tasktracker.core.config import settings
from tasktracker.core.deps import get_current_user_id
from tasktracker.db.session import get_db
from tasktracker.schemas.auth import LoginIn, LoginOut, RegisterIn
from tasktracker.schemas.user import UserOut
from tasktracker.services import auth_service
from tasktracker.services.user_service import get_user

router = APIRouter()


def _set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.REFRESH_COOKIE_NAME,
        token,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        max_age=settings.REFRESH_TOKEN_TTL_DAYS * 24 * 60 * 60,
    )


@router.post("/register", response_model=LoginOut, status_code=201)
def register(payload: RegisterIn, response: Response, db: Session = Depends(get_db)):
    out, refresh_token = auth_service.register(db, payload)
    _set_refresh_cookie(response, refresh_token)
    return out


@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, response: Response, db: Session = Depends(get_db)):
    out, refresh_token = auth_service.login(db, payload)
    _set_refresh_cookie(response, refresh_token)
    return out


@router.post("/refresh", response_model=LoginOut)
def refresh(
    response: Response,
    refresh_token: str | None = Cookie(default=None, alias=settings.REFRESH_COOKIE_NAME),
    db: Session = Depends(get_db),
):
    out, new_refresh_token = auth_service.refresh(db, refresh_token)
    _set_refresh_cookie(response, new_refresh_token)
    return out


@router.post("/logout", status_code=204)
def logout(response: Response, _user_id=Depends(get_current_user_id)):
    response.delete_cookie(
        settings.REFRESH_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return None


@router.get("/me", response_model=UserOut)
def me(user_id=Depends(get_current_user_id), db: Session = Depends(get_db)):
    return get_user(db, user_id)
