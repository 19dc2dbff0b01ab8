import enum
from pydantic import Field
from typing import Any, Dict, Generic, List, Optional, TypeVar
from .base import ApiModel

ItemType = TypeVar("ItemType")


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class Paginate(ApiModel):
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=1000)


class OrderBy(ApiModel):
    field: str = Field(min_length=1)
    direction: SortDirection = SortDirection.ASC


class FindByQuery(ApiModel):
    """Pagination, ordering and AND-combined filters for POST .../find"""
    paginate: Optional[Paginate] = None
    order_by: List[OrderBy] = []
    filter: Dict[str, Any] = {}


class FindByQueryResult(ApiModel, Generic[ItemType]):
    items: List[ItemType]
    total_count: int
    page: int
    page_size: int
    total_pages: int


class ImportRowError(ApiModel):
    row: int
    error: str


class ImportResult(ApiModel):
    created_count: int
    skipped_count: int
    errors: List[ImportRowError] = []


class BulkDeleteRequest(ApiModel):
    ids: List[str]


class DeleteManyResult(ApiModel):
    deleted_count: int
