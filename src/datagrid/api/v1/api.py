"""API for the data grid."""

from fastapi import APIRouter

from datagrid.api.v1.endpoints import grid

api_router = APIRouter()
api_router.include_router(grid.router, prefix="/grids", tags=["grids"])
