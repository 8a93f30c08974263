from datetime import datetime
from typing import Iterator, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tasktracker.models.enums import TaskPriority, TaskStatus
from tasktracker.schemas.conditions import (
    Contains,
    Equals,
    Range,
    contains_condition,
    equals_condition,
    range_condition,
)
from tasktracker.schemas.filters import BaseFilter, coerce_datetime_filter_value
from tasktracker.schemas.user import UserOut


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime
    user_id: UUID
    user: Optional[UserOut] = None
    created_at: datetime
    updated_at: datetime


class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value):
        return coerce_datetime_filter_value(value)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value):
        return coerce_datetime_filter_value(value)


class TaskFilter(BaseFilter):
    title: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date_start: Optional[datetime] = None
    due_date_end: Optional[datetime] = None

    @field_validator("due_date_start", "due_date_end", mode="before")
    @classmethod
    def _parse_due_dates(cls, value):
        return coerce_datetime_filter_value(value)

    def conditions(self) -> Iterator[Equals | Contains | Range | None]:
        yield from super().conditions()
        yield contains_condition("title", self.title)
        yield equals_condition("status", self.status)
        yield equals_condition("priority", self.priority)
        yield range_condition("due_date", self.due_date_start, self.due_date_end)
