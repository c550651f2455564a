"""Read-only snapshot of a grid, as shown on one page."""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from datagrid.models.column import Column
from datagrid.services.grid.sort_engine import SortEntry


class GridRowView(BaseModel):
    """One displayed row."""

    key: str
    transient: bool = False
    state: str = "viewing"
    selected: bool = False
    record: Dict[str, Any] = Field(default_factory=dict)
    draft: Dict[str, Any] = Field(default_factory=dict)


class GridSnapshot(BaseModel):
    """Everything needed to render the current page of a grid."""

    title: Optional[str] = None
    columns: List[Column]
    rows: List[GridRowView]
    page: int
    page_size: int
    page_size_options: List[int]
    total_rows: int
    total_pages: int
    visible_range: Tuple[int, int]
    page_numbers: List[int]
    sort: List[SortEntry]
    filters: Dict[str, List[str]]
    selected_keys: List[str]
    all_selected_on_page: bool = False
    editing_keys: List[str]
    pending_delete: Optional[str] = None
