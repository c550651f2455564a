"""Registry of the grids served by the API."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from datagrid.core.config import Settings
from datagrid.models.column import Column
from datagrid.services.gateway.factory import GatewayFactory
from datagrid.services.grid.engine import DataGrid
from datagrid.services.notification.logging_service import CollectingNotificationService

logger = logging.getLogger(__name__)


class GridRegistry:
    """Keeps one DataGrid per grid id.

    Every grid gets its own gateway, keyed on the grid's key field and
    namespaced by the grid id.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._grids: Dict[str, DataGrid] = {}
        self._notifiers: Dict[str, CollectingNotificationService] = {}

    def __contains__(self, grid_id: str) -> bool:
        return grid_id in self._grids

    def create_grid(
        self,
        grid_id: str,
        columns: Sequence[Column],
        rows: List[Dict[str, Any]],
        key_field: str = "id",
        title: Optional[str] = None,
    ) -> DataGrid:
        """Create and register a grid."""
        if grid_id in self._grids:
            raise ValueError(f"Grid {grid_id} already exists")

        gateway = GatewayFactory.create_gateway(
            self.settings, key_field=key_field, namespace=grid_id
        )
        if gateway is None:
            raise ValueError(f"Unsupported gateway type: {self.settings.gateway}")

        notifier = CollectingNotificationService(auto_confirm=self.settings.auto_confirm)
        grid = DataGrid(
            columns,
            rows,
            gateway=gateway,
            notifier=notifier,
            key_field=key_field,
            title=title,
            settings=self.settings,
        )
        self._grids[grid_id] = grid
        self._notifiers[grid_id] = notifier
        logger.info(f"Created grid {grid_id} with {len(rows)} rows")
        return grid

    def get(self, grid_id: str) -> Optional[DataGrid]:
        return self._grids.get(grid_id)

    def notifier(self, grid_id: str) -> CollectingNotificationService:
        return self._notifiers[grid_id]

    def remove(self, grid_id: str) -> bool:
        self._notifiers.pop(grid_id, None)
        if self._grids.pop(grid_id, None) is None:
            logger.warning(f"Grid {grid_id} not found")
            return False
        logger.info(f"Removed grid {grid_id}")
        return True
