from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Iterator, Mapping

from pydantic import BaseModel, field_validator

from tasktracker.schemas.conditions import (
    Contains,
    ConditionSet,
    Equals,
    Range,
    range_condition,
)


def coerce_datetime_filter_value(value: Any) -> datetime | None:
    """Parse a filter bound. Empty means absent, date-only means start of day, naive means UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, datetime.min.time())
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            if "T" not in text and " " not in text and len(text) == 10:
                parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
            else:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise ValueError(f'invalid date-time value "{text}"')
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class BaseFilter(BaseModel):
    """Optional filter fields shared by every listable entity.

    Subclasses add their own fields and extend ``conditions``; translation to a
    ``ConditionSet`` always goes through ``to_condition_set``.
    """

    created_at_start: datetime | None = None
    created_at_end: datetime | None = None
    updated_at_start: datetime | None = None
    updated_at_end: datetime | None = None

    @field_validator(
        "created_at_start",
        "created_at_end",
        "updated_at_start",
        "updated_at_end",
        mode="before",
    )
    @classmethod
    def _parse_timestamps(cls, value):
        return coerce_datetime_filter_value(value)

    def conditions(self) -> Iterator[Equals | Contains | Range | None]:
        yield range_condition("created_at", self.created_at_start, self.created_at_end)
        yield range_condition("updated_at", self.updated_at_start, self.updated_at_end)

    def to_condition_set(self) -> ConditionSet:
        return ConditionSet.of(*self.conditions())


def translate_filter(filter_cls: type[BaseFilter], raw: Mapping[str, Any] | None) -> ConditionSet:
    """Validate raw filter fields with ``filter_cls`` and translate them."""
    return filter_cls.model_validate(dict(raw or {})).to_condition_set()
