"""Main module for the data grid API service."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from datagrid.api.v1.api import api_router
from datagrid.core.config import Settings, get_settings
from datagrid.core.errors import (
    ColumnCapabilityError,
    EditStateError,
    GridError,
    UnknownColumnError,
    UnknownRowError,
)
from datagrid.services.gateway.factory import GatewayFactory
from datagrid.services.grid_registry import GridRegistry

settings = get_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize services once at application startup."""
    logger.info("Initializing application services...")

    if not GatewayFactory.is_supported(settings.gateway):
        logger.error(f"Unsupported gateway type: {settings.gateway}")
        app.state.services_initialized = False
    else:
        app.state.grid_registry = GridRegistry(settings)
        app.state.services_initialized = True
        logger.info("All application services initialized successfully")

    yield


app = FastAPI(
    title=settings.project_name,
    openapi_url=f"{settings.api_v1_str}/openapi.json",
    redirect_slashes=False,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"],
    expose_headers=["Content-Disposition"],
    max_age=600,
)

app.include_router(api_router, prefix=settings.api_v1_str)


@app.exception_handler(GridError)
async def grid_error_handler(request: Request, exc: GridError) -> JSONResponse:
    """Map grid errors to HTTP status codes."""
    if isinstance(exc, (UnknownRowError, UnknownColumnError)):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, EditStateError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, ColumnCapabilityError):
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.get("/ping")
async def pong(settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    """Ping the API to check if it's running."""
    return {
        "ping": "pong!",
        "environment": settings.environment,
        "testing": settings.testing,
    }
