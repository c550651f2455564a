"""Dependencies for the application using FastAPI app state for singletons."""

import logging

from fastapi import Depends, HTTPException, Path, Request, status

from datagrid.services.grid.engine import DataGrid
from datagrid.services.grid_registry import GridRegistry

logger = logging.getLogger(__name__)


def get_grid_registry(request: Request) -> GridRegistry:
    """Get the grid registry from application state."""
    if not hasattr(request.app.state, "grid_registry"):
        raise ValueError("Grid registry not initialized in application state")

    return request.app.state.grid_registry


def get_grid(
    grid_id: str = Path(..., description="The ID of the grid"),
    registry: GridRegistry = Depends(get_grid_registry),
) -> DataGrid:
    """Get a grid by ID or answer 404."""
    grid = registry.get(grid_id)
    if grid is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Grid with ID {grid_id} not found",
        )
    return grid
