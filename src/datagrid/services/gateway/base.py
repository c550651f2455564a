"""Abstract base class for persistence gateways."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from datagrid.models.row import RowKey


class PersistenceGateway(ABC):
    """Abstract base class for the service that stores grid rows."""

    @abstractmethod
    async def create(self, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Insert a new entity; the result may carry server-assigned fields."""
        pass

    @abstractmethod
    async def update(self, key: RowKey, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update an existing entity."""
        pass

    @abstractmethod
    async def delete(self, key: RowKey) -> None:
        """Delete one entity."""
        pass

    @abstractmethod
    async def bulk_delete(self, keys: List[RowKey]) -> None:
        """Delete several entities in one call."""
        pass
