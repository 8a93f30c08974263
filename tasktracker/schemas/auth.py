from pydantic import BaseModel, Field

from tasktracker.schemas.user import UserOut


class RegisterIn(BaseModel):
    email: str = Field(min_length=3, max_length=200)
    full_name: str = Field(min_length=1, max_length=200)
    password: str = Field(min_length=6, max_length=128)


class LoginIn(BaseModel):
    email: str
    password: str


class LoginOut(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    user: UserOut
