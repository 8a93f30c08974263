"""Store-agnostic description of query constraints.

A ``ConditionSet`` is a conjunction: every condition it holds must match.
There is no OR and no negation. Repositories compile it into their own
query language; nothing in this module touches a database.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

Bound = Union[datetime, date, int, float, Decimal]


class Equals(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["eq"] = "eq"
    field: str
    value: Any


class Contains(BaseModel):
    """Case-insensitive substring match."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["contains"] = "contains"
    field: str
    text: str = Field(min_length=1)


class Range(BaseModel):
    """Inclusive range; either side may be open but not both."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["range"] = "range"
    field: str
    lower: Bound | None = None
    upper: Bound | None = None

    @model_validator(mode="after")
    def _at_least_one_bound(self):
        if self.lower is None and self.upper is None:
            raise ValueError(f'range on "{self.field}" needs a lower or an upper bound')
        return self

    @property
    def closed(self) -> bool:
        return self.lower is not None and self.upper is not None


Condition = Annotated[Union[Equals, Contains, Range], Field(discriminator="kind")]


class ConditionSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    conditions: tuple[Condition, ...] = ()

    @classmethod
    def of(cls, *conditions: Equals | Contains | Range | None) -> "ConditionSet":
        return cls(conditions=tuple(c for c in conditions if c is not None))

    def and_(self, other: "ConditionSet") -> "ConditionSet":
        return ConditionSet(conditions=self.conditions + other.conditions)

    def for_field(self, field: str) -> list[Equals | Contains | Range]:
        return [c for c in self.conditions if c.field == field]

    @property
    def fields(self) -> set[str]:
        return {c.field for c in self.conditions}

    def __len__(self) -> int:
        return len(self.conditions)


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def equals_condition(field: str, value: Any) -> Equals | None:
    # "defined" check: falsy values such as 0, False or "" are legitimate.
    if value is None:
        return None
    return Equals(field=field, value=_plain(value))


def contains_condition(field: str, text: str | None) -> Contains | None:
    if not isinstance(text, str) or not text:
        return None
    return Contains(field=field, text=text)


def range_condition(field: str, lower: Bound | None, upper: Bound | None) -> Range | None:
    if lower is None and upper is None:
        return None
    return Range(field=field, lower=lower, upper=upper)


def scope_to(field: str, value: UUID | str) -> ConditionSet:
    """Mandatory ownership constraint, ANDed onto whatever the caller filtered by."""
    return ConditionSet.of(Equals(field=field, value=value))
