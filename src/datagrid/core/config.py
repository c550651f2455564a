"""Configuration settings for the data grid.

This module defines the configuration settings using Pydantic's
SettingsConfigDict to load environment variables from a .env file.
"""

import logging
from functools import lru_cache
from typing import List

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("uvicorn")


class Settings(BaseSettings):
    """Settings class for the grid engine and its API."""

    # ENVIRONMENT CONFIG
    environment: str = "dev"
    testing: bool = bool(0)
    log_level: str = "INFO"

    # API CONFIG
    project_name: str = "Data Grid API"
    api_v1_str: str = "/api/v1"
    backend_cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8000",
    ]

    # PAGINATION CONFIG
    pagination_enabled: bool = True
    default_page_size: int = 10
    page_size_options: List[int] = [10, 20, 50, 100]
    max_visible_pages: int = 10

    # EXPORT CONFIG
    export_default_title: str = "table_data"
    export_escape_quotes: bool = True
    export_include_bom: bool = True

    # PERSISTENCE CONFIG
    gateway: str = "memory"
    gateway_db_uri: str = "./data/grid_rows.db"

    # NOTIFICATION CONFIG
    auto_confirm: bool = True

    model_config = SettingsConfigDict(
        env_prefix="DATAGRID_",
        env_file=["../.env", ".env"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def check_page_size(self) -> "Settings":
        """Ensure the default page size is one of the selectable options."""
        if self.default_page_size not in self.page_size_options:
            raise ValueError(
                f"default_page_size {self.default_page_size} is not in "
                f"page_size_options {self.page_size_options}"
            )
        return self


@lru_cache()
def get_settings() -> Settings:
    """Get the settings for the application."""
    logger.info("Loading config settings from the environment...")

    settings = Settings()

    logger.info(
        f"Grid settings loaded: gateway={settings.gateway}, "
        f"page_size={settings.default_page_size}"
    )

    return settings
