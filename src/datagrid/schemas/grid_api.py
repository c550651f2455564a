"""API schemas for grid operations."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from datagrid.models.column import Column
from datagrid.models.snapshot import GridSnapshot
from datagrid.services.notification.base import Notification


class GridCreate(BaseModel):
    """Schema for creating a new grid."""

    id: str
    title: Optional[str] = None
    key_field: str = "id"
    columns: List[Column]
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class SortToggleRequest(BaseModel):
    """Schema for toggling the sort of a column."""

    column_key: str


class FilterToggleRequest(BaseModel):
    """Schema for toggling one accepted filter value."""

    value: str


class FilterSearchRequest(BaseModel):
    """Schema for narrowing the offered filter values."""

    search_term: str = ""


class FilterValuesResponse(BaseModel):
    """Schema for the values offered by a column filter."""

    column_key: str
    values: List[str]
    selected: List[str]


class PageRequest(BaseModel):
    """Schema for moving between pages."""

    page: Optional[int] = None
    page_size: Optional[int] = None


class FieldUpdate(BaseModel):
    """Schema for changing one draft value."""

    column_key: str
    value: Any = None


class BulkDeleteRequest(BaseModel):
    """Schema for deleting rows; the current selection when no keys are given."""

    keys: Optional[List[str]] = None


class GridResponse(BaseModel):
    """Schema for grid responses."""

    snapshot: GridSnapshot
    notifications: List[Notification] = Field(default_factory=list)
    result: Optional[Dict[str, Any]] = None
