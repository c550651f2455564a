"""In-memory persistence gateway."""

import copy
import logging
import uuid
from typing import Any, Dict, List, Optional

from datagrid.models.row import RowKey
from datagrid.services.gateway.base import PersistenceGateway

logger = logging.getLogger(__name__)


class InMemoryGateway(PersistenceGateway):
    """Keeps records in a dict keyed by row key.

    Records created without a key get a uuid4 hex id. Updating a key that was
    never stored inserts it, so rows loaded from elsewhere can be edited.
    """

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None, key_field: str = "id"):
        self.key_field = key_field
        self.records: Dict[RowKey, Dict[str, Any]] = {}
        for record in records or []:
            self.records[record[key_field]] = copy.deepcopy(record)

    async def create(self, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        stored = copy.deepcopy(record)
        key = stored.get(self.key_field)
        if key is None or key == "":
            key = uuid.uuid4().hex
            stored[self.key_field] = key
        if key in self.records:
            raise ValueError(f"Record with key {key} already exists")
        self.records[key] = stored
        logger.info(f"Created record {key}")
        return copy.deepcopy(stored)

    async def update(self, key: RowKey, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if key not in self.records:
            logger.warning(f"Record {key} not stored yet; inserting it")
            self.records[key] = {self.key_field: key}
        self.records[key].update(copy.deepcopy(record))
        logger.info(f"Updated record {key}")
        return copy.deepcopy(self.records[key])

    async def delete(self, key: RowKey) -> None:
        if self.records.pop(key, None) is None:
            logger.warning(f"Record {key} not found; nothing to delete")

    async def bulk_delete(self, keys: List[RowKey]) -> None:
        for key in keys:
            await self.delete(key)

    async def list_records(self) -> List[Dict[str, Any]]:
        return [copy.deepcopy(r) for r in self.records.values()]
