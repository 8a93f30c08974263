from datetime import datetime
from typing import Iterator, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tasktracker.models.enums import UserRole
from tasktracker.schemas.conditions import Contains, Equals, Range, contains_condition, equals_condition
from tasktracker.schemas.filters import BaseFilter


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    full_name: str
    role: UserRole
    created_at: datetime
    updated_at: datetime


class UserCreate(BaseModel):
    email: str = Field(min_length=3, max_length=200)
    full_name: str = Field(min_length=1, max_length=200)
    password: str = Field(min_length=6, max_length=128)
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    email: Optional[str] = Field(default=None, min_length=3, max_length=200)
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    password: Optional[str] = Field(default=None, min_length=6, max_length=128)
    role: Optional[UserRole] = None


class UserFilter(BaseFilter):
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[UserRole] = None

    def conditions(self) -> Iterator[Equals | Contains | Range | None]:
        yield from super().conditions()
        yield contains_condition("email", self.email)
        yield contains_condition("full_name", self.full_name)
        yield equals_condition("role", self.role)
