"""Operations over many rows: add, duplicate, delete and save-all."""

import copy
import logging
from typing import Iterable, List, Optional

from datagrid.core.errors import GridError, RowValidationError, UnknownRowError
from datagrid.models.column import ColumnModel, set_nested_value
from datagrid.models.results import DeleteResult, SaveAllResult
from datagrid.models.row import LocalKey, LocalKeyGenerator, RowKey, is_local_key
from datagrid.services.gateway.base import PersistenceGateway
from datagrid.services.grid.edit_session import EditSession, RowEditState
from datagrid.services.grid.row_store import RowStore
from datagrid.services.grid.selection import SelectionController
from datagrid.services.grid.sort_engine import SortEngine
from datagrid.services.notification.base import NotificationService

logger = logging.getLogger(__name__)


class BulkActionCoordinator:
    """Coordinates actions that touch the selection or several rows at once."""

    def __init__(
        self,
        columns: ColumnModel,
        store: RowStore,
        selection: SelectionController,
        edit_session: EditSession,
        sort_engine: SortEngine,
        gateway: PersistenceGateway,
        notifier: NotificationService,
        key_generator: Optional[LocalKeyGenerator] = None,
    ):
        self.columns = columns
        self.store = store
        self.selection = selection
        self.edit_session = edit_session
        self.sort_engine = sort_engine
        self.gateway = gateway
        self.notifier = notifier
        self.key_generator = key_generator or LocalKeyGenerator()
        self.pending_delete: Optional[RowKey] = None

    def add_row(self) -> LocalKey:
        """Create an empty transient row and start editing it."""
        key = self.key_generator.next_key()
        record = {}
        for column in self.columns:
            if column.key == self.store.key_field:
                continue
            set_nested_value(record, column.data_path, "")
        self.store.add_transient(key, record)
        self.edit_session.begin_edit(key)
        logger.info(f"Added new row {key}")
        return key

    def duplicate_selected(self) -> List[LocalKey]:
        """Copy every selected row that is not being edited into a new transient row."""
        selected = set(self.selection.selected_keys)
        sources = [
            entry
            for entry in self.store.entries()
            if entry.key in selected and not self.edit_session.is_active(entry.key)
        ]
        if not sources:
            logger.warning("No rows to duplicate (rows being edited cannot be copied)")
            self.notifier.notify(
                "warning",
                "Nothing to copy",
                "Select rows that are not being edited to copy them.",
            )
            return []

        new_keys = []
        for entry in sources:
            record = copy.deepcopy(entry.record)
            if self.store.key_field:
                record.pop(self.store.key_field, None)
            key = self.key_generator.next_key()
            self.store.add_transient(key, record)
            self.edit_session.begin_edit(key)
            new_keys.append(key)

        logger.info(f"Duplicated {len(new_keys)} rows")
        return new_keys

    def clear_sorts(self) -> None:
        self.sort_engine.clear()

    def _drop_rows(self, keys: Iterable[RowKey]) -> None:
        keys = list(keys)
        self.edit_session.forget(keys)
        for key in keys:
            self.store.remove(key)

    async def bulk_delete(self, keys: Optional[Iterable[RowKey]] = None) -> DeleteResult:
        """Delete rows after one confirmation for the whole batch.

        Defaults to the current selection. Transient rows are dropped locally;
        every other key goes to the gateway in a single bulk call.
        """
        keys = list(keys) if keys is not None else self.selection.selected_keys
        if not keys:
            return DeleteResult(status="nothing")

        confirmed = await self.notifier.confirm(
            title="Delete rows",
            message=f"Delete {len(keys)} selected row(s)? This cannot be undone.",
        )
        if not confirmed:
            logger.info(f"Bulk delete of {len(keys)} rows cancelled")
            return DeleteResult(status="cancelled")

        remote = [k for k in keys if not is_local_key(k)]
        try:
            if remote:
                logger.info(f"Deleting {len(remote)} rows")
                await self.gateway.bulk_delete(remote)
        except Exception as e:
            logger.error(f"Bulk delete failed: {e}")
            self.notifier.notify("error", "Delete failed", f"Deleting rows failed: {e}")
            return DeleteResult(status="failed", error=str(e))

        self._drop_rows(keys)
        self.selection.clear()
        self.notifier.notify("success", "Deleted", f"{len(keys)} row(s) deleted.")
        return DeleteResult(status="deleted", deleted_keys=keys)

    def request_delete(self, key: RowKey) -> None:
        """Mark one row as waiting for delete confirmation."""
        self.store.get(key)
        self.pending_delete = key

    def cancel_delete(self) -> None:
        self.pending_delete = None

    async def confirm_delete(self) -> DeleteResult:
        """Delete the row marked by request_delete."""
        key = self.pending_delete
        if key is None:
            return DeleteResult(status="nothing")

        if key not in self.store:
            self.pending_delete = None
            raise UnknownRowError(key)

        try:
            if not self.store.is_transient(key):
                logger.info(f"Deleting row {key}")
                await self.gateway.delete(key)
        except Exception as e:
            self.pending_delete = None
            logger.error(f"Error deleting row {key}: {e}")
            self.notifier.notify("error", "Delete failed", f"Deleting row {key} failed: {e}")
            return DeleteResult(status="failed", error=str(e))

        self.pending_delete = None
        self._drop_rows([key])
        self.selection.discard([key])
        return DeleteResult(status="deleted", deleted_keys=[key])

    async def save_all(self) -> SaveAllResult:
        """Validate every row being edited, then commit them one at a time.

        Validation is all-or-nothing. Commits are not: a gateway failure stops
        the loop and leaves the rows saved before it committed.
        """
        keys = self.edit_session.editing_keys
        if not keys:
            self.notifier.notify("warning", "Nothing to save", "There are no rows being edited.")
            return SaveAllResult(status="nothing")

        report = {}
        for key in keys:
            missing = self.edit_session.validate(key)
            if missing:
                report[key] = missing

        if report:
            error = RowValidationError(report=report)
            logger.warning(f"Save all aborted: {len(report)} rows failed validation")
            self.notifier.notify("warning", "Required values missing", str(error))
            return SaveAllResult(
                status="invalid",
                missing={str(k): v for k, v in report.items()},
                error=str(error),
            )

        saved = []
        for key in keys:
            if self.edit_session.state(key) is not RowEditState.EDITING:
                continue
            try:
                await self.edit_session.save(key)
            except GridError as e:
                logger.error(f"Save all stopped at row {key}; {len(saved)} rows already saved")
                self.notifier.notify(
                    "error",
                    "Save failed",
                    f"Saving row {key} failed after {len(saved)} row(s) were saved: {e}",
                )
                return SaveAllResult(
                    status="failed", saved_keys=saved, failed_key=key, error=str(e)
                )
            saved.append(key)

        self.notifier.notify("success", "Saved", f"{len(saved)} row(s) saved.")
        return SaveAllResult(status="saved", saved_keys=saved)
