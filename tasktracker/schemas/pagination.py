from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class PaginationDefaults(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(default=0, ge=0)
    limit: int = Field(default=10, ge=1)
    max_limit: int = Field(default=50, ge=1)
    # Largest offset the store accepts (signed 64-bit).
    max_skip: int = Field(default=2**63 - 1, ge=0)
    sort_key: str = "created_at"
    sort_direction: SortDirection = SortDirection.DESC


class PaginationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(ge=0)
    limit: int = Field(ge=0)
    skip: int = Field(ge=0)
    sort_key: str
    sort_direction: SortDirection

    @model_validator(mode="after")
    def _skip_matches_page(self):
        if self.skip != self.page * self.limit:
            raise ValueError("skip must equal page * limit")
        return self


class ListPage(BaseModel, Generic[T]):
    model_config = ConfigDict(populate_by_name=True)

    items: list[T]
    total_count: int = Field(alias="totalCount", ge=0)
    pages: int = Field(ge=0)
