"""API endpoints for grid operations."""

import logging
import re
from typing import Any, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from datagrid.core.dependencies import get_grid, get_grid_registry
from datagrid.schemas.grid_api import (
    BulkDeleteRequest,
    FieldUpdate,
    FilterSearchRequest,
    FilterToggleRequest,
    FilterValuesResponse,
    GridCreate,
    GridResponse,
    PageRequest,
    SortToggleRequest,
)
from datagrid.services.grid.engine import DataGrid
from datagrid.services.grid_registry import GridRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


def _content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and the UTF-8 filename (RFC 6266)."""
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _respond(
    grid_id: str,
    grid: DataGrid,
    registry: GridRegistry,
    result: Optional[Any] = None,
) -> GridResponse:
    """Build a response with the grid snapshot and any queued notifications."""
    return GridResponse(
        snapshot=grid.snapshot(),
        notifications=registry.notifier(grid_id).drain(),
        result=result.model_dump(mode="json") if result is not None else None,
    )


@router.post(
    "",
    response_model=GridResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new grid",
)
async def create_grid(
    grid_create: GridCreate,
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    """Create a new grid from columns and committed rows."""
    if grid_create.id in registry:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Grid with ID {grid_create.id} already exists",
        )

    grid = registry.create_grid(
        grid_create.id,
        grid_create.columns,
        grid_create.rows,
        key_field=grid_create.key_field,
        title=grid_create.title,
    )
    return _respond(grid_create.id, grid, registry)


@router.get("/{grid_id}", response_model=GridResponse, summary="Get the current page")
async def get_grid_snapshot(
    grid_id: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    return _respond(grid_id, grid, registry)


@router.delete("/{grid_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_grid(
    grid_id: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> Response:
    registry.remove(grid_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ----- sorting -----
@router.post("/{grid_id}/sort", response_model=GridResponse)
async def toggle_sort(
    grid_id: str,
    request: SortToggleRequest,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    """Cycle a column through ascending, descending and unsorted."""
    grid.toggle_sort(request.column_key)
    return _respond(grid_id, grid, registry)


@router.delete("/{grid_id}/sort", response_model=GridResponse)
async def clear_sorts(
    grid_id: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    grid.clear_sorts()
    return _respond(grid_id, grid, registry)


# ----- filtering -----
@router.get("/{grid_id}/filters/{column_key}/values", response_model=FilterValuesResponse)
async def get_filter_values(
    column_key: str,
    search: Optional[str] = Query(None, description="Case-insensitive substring"),
    grid: DataGrid = Depends(get_grid),
) -> FilterValuesResponse:
    """List the distinct values a column can be filtered by."""
    return FilterValuesResponse(
        column_key=column_key,
        values=grid.available_filter_values(column_key, search),
        selected=grid.filter_engine.selected_values(column_key),
    )


@router.put("/{grid_id}/filters/{column_key}/search", response_model=FilterValuesResponse)
async def set_filter_search(
    column_key: str,
    request: FilterSearchRequest,
    grid: DataGrid = Depends(get_grid),
) -> FilterValuesResponse:
    grid.set_filter_search(column_key, request.search_term)
    return FilterValuesResponse(
        column_key=column_key,
        values=grid.available_filter_values(column_key),
        selected=grid.filter_engine.selected_values(column_key),
    )


@router.post("/{grid_id}/filters/{column_key}/toggle", response_model=GridResponse)
async def toggle_filter(
    grid_id: str,
    column_key: str,
    request: FilterToggleRequest,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    grid.toggle_filter(column_key, request.value)
    return _respond(grid_id, grid, registry)


@router.post("/{grid_id}/filters/{column_key}/select-all", response_model=GridResponse)
async def select_all_filter(
    grid_id: str,
    column_key: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    grid.select_all_filter(column_key)
    return _respond(grid_id, grid, registry)


@router.delete("/{grid_id}/filters/{column_key}", response_model=GridResponse)
async def clear_filter(
    grid_id: str,
    column_key: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    grid.clear_filter(column_key)
    return _respond(grid_id, grid, registry)


@router.delete("/{grid_id}/filters", response_model=GridResponse)
async def clear_all_filters(
    grid_id: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    grid.clear_all_filters()
    return _respond(grid_id, grid, registry)


# ----- pagination -----
@router.put("/{grid_id}/page", response_model=GridResponse)
async def change_page(
    grid_id: str,
    request: PageRequest,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    """Change the page size and/or move to a page."""
    if request.page_size is not None:
        grid.set_page_size(request.page_size)
    if request.page is not None:
        grid.go_to_page(request.page)
    return _respond(grid_id, grid, registry)


# ----- selection -----
@router.post("/{grid_id}/selection/page", response_model=GridResponse)
async def toggle_page_selection(
    grid_id: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    grid.toggle_page_selection()
    return _respond(grid_id, grid, registry)


@router.post("/{grid_id}/selection/view", response_model=GridResponse)
async def select_all_in_view(
    grid_id: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    grid.select_all_in_view()
    return _respond(grid_id, grid, registry)


@router.post("/{grid_id}/selection/{row_key}", response_model=GridResponse)
async def toggle_selection(
    grid_id: str,
    row_key: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    grid.toggle_selection(grid.resolve_key(row_key))
    return _respond(grid_id, grid, registry)


@router.delete("/{grid_id}/selection", response_model=GridResponse)
async def clear_selection(
    grid_id: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    grid.clear_selection()
    return _respond(grid_id, grid, registry)


# ----- rows -----
@router.post("/{grid_id}/rows", response_model=GridResponse, status_code=status.HTTP_201_CREATED)
async def add_row(
    grid_id: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    """Add an empty row in edit mode; it is stored only when saved."""
    key = grid.add_row()
    response = _respond(grid_id, grid, registry)
    response.result = {"key": str(key)}
    return response


@router.post("/{grid_id}/rows/{row_key}/edit", response_model=GridResponse)
async def begin_edit(
    grid_id: str,
    row_key: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    grid.begin_edit(grid.resolve_key(row_key))
    return _respond(grid_id, grid, registry)


@router.patch("/{grid_id}/rows/{row_key}", response_model=GridResponse)
async def set_field(
    grid_id: str,
    row_key: str,
    update: FieldUpdate,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    grid.set_field(grid.resolve_key(row_key), update.column_key, update.value)
    return _respond(grid_id, grid, registry)


@router.post("/{grid_id}/rows/{row_key}/save", response_model=GridResponse)
async def save_row(
    grid_id: str,
    row_key: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    result = await grid.save_row(grid.resolve_key(row_key))
    return _respond(grid_id, grid, registry, result)


@router.post("/{grid_id}/rows/{row_key}/cancel", response_model=GridResponse)
async def cancel_edit(
    grid_id: str,
    row_key: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    grid.cancel_edit(grid.resolve_key(row_key))
    return _respond(grid_id, grid, registry)


@router.post("/{grid_id}/rows/{row_key}/delete", response_model=GridResponse)
async def request_delete(
    grid_id: str,
    row_key: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    """Mark a row for deletion; confirm with POST /delete/confirm."""
    grid.request_delete(grid.resolve_key(row_key))
    return _respond(grid_id, grid, registry)


@router.post("/{grid_id}/delete/confirm", response_model=GridResponse)
async def confirm_delete(
    grid_id: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    result = await grid.confirm_delete()
    return _respond(grid_id, grid, registry, result)


@router.delete("/{grid_id}/delete", response_model=GridResponse)
async def cancel_delete(
    grid_id: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    grid.cancel_delete()
    return _respond(grid_id, grid, registry)


# ----- bulk actions -----
@router.post("/{grid_id}/save-all", response_model=GridResponse)
async def save_all(
    grid_id: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    result = await grid.save_all()
    return _respond(grid_id, grid, registry, result)


@router.post("/{grid_id}/duplicate", response_model=GridResponse)
async def duplicate_selected(
    grid_id: str,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    keys = grid.duplicate_selected()
    response = _respond(grid_id, grid, registry)
    response.result = {"keys": [str(k) for k in keys]}
    return response


@router.post("/{grid_id}/bulk-delete", response_model=GridResponse)
async def bulk_delete(
    grid_id: str,
    request: BulkDeleteRequest,
    grid: DataGrid = Depends(get_grid),
    registry: GridRegistry = Depends(get_grid_registry),
) -> GridResponse:
    keys = None
    if request.keys is not None:
        keys = grid.resolve_known_keys(request.keys)
    result = await grid.bulk_delete(keys)
    return _respond(grid_id, grid, registry, result)


# ----- export -----
@router.get("/{grid_id}/export", summary="Download the filtered and sorted rows as CSV")
async def export_grid(
    title: Optional[str] = Query(None, description="Title used in the filename"),
    grid: DataGrid = Depends(get_grid),
) -> Response:
    payload = grid.export(title=title)
    return Response(
        content=payload.encode(),
        media_type=payload.media_type,
        headers={"Content-Disposition": _content_disposition(payload.filename)},
    )
