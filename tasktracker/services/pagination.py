"""Query-string pagination with permissive default substitution.

Malformed or out-of-window values never fail the request: each one is
replaced by its default, and the caller gets a best-effort page.
"""
from __future__ import annotations

import math
from typing import Any, Callable, Iterable

from tasktracker.core.config import settings
from tasktracker.repositories.base import ModelT, RecordStore
from tasktracker.schemas.conditions import ConditionSet
from tasktracker.schemas.pagination import ListPage, PaginationDefaults, PaginationRequest, SortDirection


def default_pagination() -> PaginationDefaults:
    return PaginationDefaults(
        limit=settings.PAGINATION_DEFAULT_LIMIT,
        max_limit=settings.PAGINATION_MAX_LIMIT,
        max_skip=settings.PAGINATION_MAX_SKIP,
    )


def _parse_int(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    digits = text[1:] if text[:1] in {"+", "-"} else text
    # ASCII digits only: no "1_0", no full-width or other Unicode digits.
    if not digits or not digits.isascii() or not digits.isdigit():
        return None
    return int(text)


def resolve_pagination(
    page: Any = None,
    limit: Any = None,
    sort_key: str | None = None,
    sort_asc: Any = None,
    defaults: PaginationDefaults | None = None,
) -> PaginationRequest:
    defaults = defaults or default_pagination()

    requested_limit = _parse_int(limit)
    if requested_limit is None or requested_limit < 1 or requested_limit > defaults.max_limit:
        effective_limit = defaults.limit
    else:
        effective_limit = requested_limit

    requested_page = _parse_int(page)
    # Callers count pages from 1; internally pages are 0-based.
    if requested_page is not None and requested_page > 0 and (requested_page - 1) * effective_limit <= defaults.max_skip:
        effective_page = requested_page - 1
    else:
        effective_page = defaults.page

    key = str(sort_key or "").strip() or defaults.sort_key
    direction = SortDirection.ASC if sort_asc == "true" else defaults.sort_direction

    return PaginationRequest(
        page=effective_page,
        limit=effective_limit,
        skip=effective_page * effective_limit,
        sort_key=key,
        sort_direction=direction,
    )


def page_count(total_count: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return math.ceil(total_count / limit)


def paginate(
    store: RecordStore[ModelT],
    conditions: ConditionSet,
    pagination: PaginationRequest,
    serialize: Callable[[ModelT], Any],
    relations: Iterable[str] = (),
) -> ListPage:
    result = store.query(conditions, relations, pagination)
    return ListPage(
        items=[serialize(row) for row in result.items],
        total_count=result.total_count,
        pages=page_count(result.total_count, pagination.limit),
    )
