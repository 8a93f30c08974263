from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Iterable, Mapping, Protocol, TypeVar

from pydantic import BaseModel
from sqlalchemy import asc, delete, desc, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.inspection import inspect as sa_inspect
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql.elements import ColumnElement

import tasktracker.db.base  # noqa: F401
from tasktracker.models.common import utcnow
from tasktracker.schemas.conditions import ConditionSet, Contains, Equals, Range
from tasktracker.schemas.pagination import PaginationRequest, SortDirection

_LOG = logging.getLogger("tasktracker.repository")

ModelT = TypeVar("ModelT")
ModelT_co = TypeVar("ModelT_co", covariant=True)


class UnknownFieldError(ValueError):
    """A condition or patch refers to an attribute the model does not map."""


@dataclass(frozen=True)
class QueryResult(Generic[ModelT]):
    items: list[ModelT]
    total_count: int


@dataclass(frozen=True)
class UpdateOutcome(Generic[ModelT]):
    updated_entity: ModelT | None
    matched: bool


@dataclass(frozen=True)
class RecordPatch:
    """Field assignments for a partial update. A key is either present or absent."""

    values: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_model(cls, payload: BaseModel, *, nullable: Iterable[str] = ()) -> "RecordPatch":
        # Only fields the client actually sent; explicit nulls survive only for nullable columns.
        allowed_none = set(nullable)
        values: dict[str, Any] = {}
        for key, value in payload.model_dump(exclude_unset=True).items():
            if value is None and key not in allowed_none:
                continue
            values[key] = value.value if isinstance(value, Enum) else value
        return cls(values=values)

    def is_empty(self) -> bool:
        return not self.values


class RecordStore(Protocol[ModelT_co]):
    def query(
        self,
        conditions: ConditionSet,
        relations: Iterable[str] = (),
        pagination: PaginationRequest | None = None,
    ) -> QueryResult[ModelT_co]: ...

    def update_by(self, conditions: ConditionSet, patch: RecordPatch) -> UpdateOutcome[ModelT_co]: ...

    def delete_by(self, conditions: ConditionSet) -> int: ...


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class Repository(Generic[ModelT]):
    """SQLAlchemy-backed ``RecordStore`` for one mapped model."""

    model: type[ModelT]
    default_sort_key = "created_at"
    # Columns a client may order by; anything else falls back to default_sort_key.
    sortable: frozenset[str] = frozenset({"created_at", "updated_at"})

    def __init__(self, db: Session):
        self.db = db

    def _column(self, name: str):
        mapper = sa_inspect(self.model)
        if name not in mapper.column_attrs:
            raise UnknownFieldError(f'"{self.model.__name__}" has no column "{name}"')
        return getattr(self.model, name)

    def _criterion(self, condition: Equals | Contains | Range) -> ColumnElement[bool]:
        col = self._column(condition.field)
        if isinstance(condition, Equals):
            return col == condition.value
        if isinstance(condition, Contains):
            return col.ilike(f"%{_escape_like(condition.text)}%", escape="\\")
        if condition.closed:
            return col.between(condition.lower, condition.upper)
        if condition.lower is not None:
            return col >= condition.lower
        return col <= condition.upper

    def compile(self, conditions: ConditionSet) -> list[ColumnElement[bool]]:
        return [self._criterion(c) for c in conditions.conditions]

    def _order_by(self, pagination: PaginationRequest | None):
        key = pagination.sort_key if pagination else self.default_sort_key
        direction = pagination.sort_direction if pagination else SortDirection.DESC
        if key not in self.sortable:
            _LOG.debug("unsortable key %r for %s, using %r", key, self.model.__name__, self.default_sort_key)
            key = self.default_sort_key
        col = getattr(self.model, key)
        return asc(col) if direction == SortDirection.ASC else desc(col)

    def _load_options(self, relations: Iterable[str]) -> list:
        mapper = sa_inspect(self.model)
        options = []
        for name in sorted(set(relations or ())):
            if name not in mapper.relationships:
                _LOG.debug("ignoring unknown relation %r for %s", name, self.model.__name__)
                continue
            options.append(selectinload(getattr(self.model, name)))
        return options

    def _patch_values(self, patch: RecordPatch) -> dict[str, Any]:
        values = {}
        for key, value in patch.values.items():
            self._column(key)
            values[key] = value.value if isinstance(value, Enum) else value
        if "updated_at" in sa_inspect(self.model).column_attrs:
            values.setdefault("updated_at", utcnow())
        return values

    def query(
        self,
        conditions: ConditionSet,
        relations: Iterable[str] = (),
        pagination: PaginationRequest | None = None,
    ) -> QueryResult[ModelT]:
        criteria = self.compile(conditions)
        count_stmt = select(func.count()).select_from(self.model).where(*criteria)
        stmt = (
            select(self.model)
            .where(*criteria)
            .order_by(self._order_by(pagination))
            .options(*self._load_options(relations))
        )
        if pagination is not None:
            stmt = stmt.offset(pagination.skip)
            # limit 0 means "no limit"
            if pagination.limit > 0:
                stmt = stmt.limit(pagination.limit)
        # Both statements run in the session's current transaction with the same criteria.
        total = self.db.scalar(count_stmt) or 0
        items = list(self.db.scalars(stmt).all())
        return QueryResult(items=items, total_count=int(total))

    def find_one(self, conditions: ConditionSet, relations: Iterable[str] = ()) -> ModelT | None:
        stmt = select(self.model).where(*self.compile(conditions)).options(*self._load_options(relations)).limit(1)
        return self.db.scalars(stmt).first()

    def exists(self, conditions: ConditionSet) -> bool:
        stmt = select(func.count()).select_from(self.model).where(*self.compile(conditions))
        return bool(self.db.scalar(stmt))

    def add(self, entity: ModelT) -> ModelT:
        try:
            self.db.add(entity)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(entity)
        return entity

    def update_by(self, conditions: ConditionSet, patch: RecordPatch) -> UpdateOutcome[ModelT]:
        """Apply ``patch`` to every matching row, then read one back with the same conditions.

        The write and the read-back share one transaction, committed after the
        read. No matching row yields ``UpdateOutcome(None, False)``.
        """
        criteria = self.compile(conditions)
        values = self._patch_values(patch)
        try:
            result = self.db.execute(
                update(self.model).where(*criteria).values(**values).execution_options(synchronize_session=False)
            )
            matched = bool(result.rowcount)
            entity = None
            if matched:
                entity = self.db.scalars(
                    select(self.model).where(*criteria).execution_options(populate_existing=True).limit(1)
                ).first()
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        _LOG.debug("update %s matched=%s fields=%s", self.model.__name__, matched, sorted(values))
        return UpdateOutcome(updated_entity=entity, matched=matched)

    def delete_by(self, conditions: ConditionSet) -> int:
        criteria = self.compile(conditions)
        try:
            result = self.db.execute(
                delete(self.model).where(*criteria).execution_options(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return int(result.rowcount or 0)

