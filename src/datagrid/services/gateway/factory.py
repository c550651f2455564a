"""Persistence gateway factory."""

import logging
from typing import Optional

from datagrid.core.config import Settings
from datagrid.services.gateway.base import PersistenceGateway
from datagrid.services.gateway.memory_gateway import InMemoryGateway
from datagrid.services.gateway.sqlite_gateway import SQLiteGateway

logger = logging.getLogger(__name__)


class GatewayFactory:
    """The factory for the persistence gateways."""

    GATEWAY_TYPES = ("memory", "sqlite")

    @staticmethod
    def is_supported(gateway_type: str) -> bool:
        return gateway_type in GatewayFactory.GATEWAY_TYPES

    @staticmethod
    def create_gateway(
        settings: Settings, key_field: str = "id", namespace: str = "default"
    ) -> Optional[PersistenceGateway]:
        """Create a persistence gateway for one grid.

        Each namespace gets its own keyspace, and created records are keyed
        on ``key_field``.
        """
        gateway_type = settings.gateway
        logger.info(f"Creating gateway of type: {gateway_type} for {namespace}")

        if gateway_type == "memory":
            logger.info("Using InMemoryGateway")
            return InMemoryGateway(key_field=key_field)
        elif gateway_type == "sqlite":
            logger.info(f"Using SQLiteGateway at {settings.gateway_db_uri}")
            return SQLiteGateway(
                settings.gateway_db_uri, key_field=key_field, namespace=namespace
            )
        else:
            logger.warning(f"No gateway found for type: {gateway_type}")
            return None
