"""Per-row edit lifecycle with draft values."""

import copy
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from datagrid.core.errors import (
    ColumnCapabilityError,
    EditStateError,
    GridError,
    PersistenceError,
    RowValidationError,
    UnknownRowError,
)
from datagrid.models.column import ColumnModel, set_nested_value
from datagrid.models.row import Record, RowKey, is_local_key
from datagrid.services.gateway.base import PersistenceGateway
from datagrid.services.grid.row_store import RowStore

logger = logging.getLogger(__name__)


class RowEditState(str, Enum):
    """Edit state of a single row."""

    VIEWING = "viewing"
    EDITING = "editing"
    SAVING = "saving"


class EditSession:
    """Tracks which rows are being edited and their uncommitted field values.

    Several rows may be in editing at once. A draft exists only while its key
    is active (editing or saving); saving successfully or cancelling drops both.
    """

    def __init__(self, columns: ColumnModel, store: RowStore, gateway: PersistenceGateway):
        self.columns = columns
        self.store = store
        self.gateway = gateway
        self._states: Dict[RowKey, RowEditState] = {}
        self._drafts: Dict[RowKey, Dict[str, Any]] = {}

    def state(self, key: RowKey) -> RowEditState:
        return self._states.get(key, RowEditState.VIEWING)

    @property
    def active_keys(self) -> List[RowKey]:
        """Keys in editing or saving, in the order editing began."""
        return list(self._states)

    @property
    def editing_keys(self) -> List[RowKey]:
        return [k for k, s in self._states.items() if s is RowEditState.EDITING]

    def is_active(self, key: RowKey) -> bool:
        return key in self._states

    def begin_edit(self, key: RowKey) -> None:
        """Put a row into editing with an empty draft."""
        self.store.get(key)
        state = self.state(key)
        if state is RowEditState.SAVING:
            raise EditStateError(key, state.value, "edit")
        if state is RowEditState.EDITING:
            return
        self._states[key] = RowEditState.EDITING
        self._drafts[key] = {}

    def set_field(self, key: RowKey, column_key: str, value: Any) -> None:
        state = self.state(key)
        if state is not RowEditState.EDITING:
            raise EditStateError(key, state.value, "change")
        column = self.columns.get(column_key)
        if not column.editable:
            raise ColumnCapabilityError(column_key, "editable")
        self._drafts[key][column.data_path] = value

    def draft(self, key: RowKey) -> Dict[str, Any]:
        return dict(self._drafts.get(key, {}))

    def cell_value(self, key: RowKey, column_key: str) -> Any:
        """Value shown in a cell: the draft value while editing, else the committed one."""
        column = self.columns.get(column_key)
        draft = self._drafts.get(key)
        if draft is not None and column.data_path in draft:
            return draft[column.data_path]
        return column.value_of(self.store.get(key).record)

    def candidate(self, key: RowKey) -> Record:
        """Committed record with the draft applied on top."""
        record = copy.deepcopy(self.store.get(key).record)
        for path, value in self._drafts.get(key, {}).items():
            set_nested_value(record, path, value)
        return record

    def missing_fields(self, record: Record) -> List[str]:
        """Titles of required columns that have no value in the record."""
        missing = []
        for column in self.columns:
            if not column.required or column.key == self.store.key_field:
                continue
            value = column.value_of(record)
            if value is None or (isinstance(value, str) and value.strip() == ""):
                missing.append(column.title)
        return missing

    def validate(self, key: RowKey) -> List[str]:
        return self.missing_fields(self.candidate(key))

    async def save(self, key: RowKey) -> Record:
        """Validate and persist one row.

        Raises RowValidationError before any gateway call when required values
        are missing, and PersistenceError when the gateway fails. In both cases
        the row stays in editing with its draft.
        """
        entry = self.store.get(key)
        state = self.state(key)
        if state is not RowEditState.EDITING:
            raise EditStateError(key, state.value, "save")

        candidate = self.candidate(key)
        missing = self.missing_fields(candidate)
        if missing:
            logger.warning(f"Save of row {key} aborted, missing: {', '.join(missing)}")
            raise RowValidationError(key=key, missing_fields=missing)

        transient = entry.transient
        self._states[key] = RowEditState.SAVING
        try:
            if transient:
                payload = dict(candidate)
                if self.store.key_field and is_local_key(payload.get(self.store.key_field)):
                    payload.pop(self.store.key_field)
                logger.info(f"Creating row {key}")
                result = await self.gateway.create(payload)
            else:
                logger.info(f"Updating row {key}")
                result = await self.gateway.update(key, candidate)
        except Exception as e:
            if self._states.get(key) is RowEditState.SAVING:
                self._states[key] = RowEditState.EDITING
            logger.error(f"Error saving row {key}: {e}")
            raise PersistenceError("create" if transient else "update", [key], str(e)) from e

        # A cancel while the request was in flight already dropped the draft
        if self._states.get(key) is RowEditState.SAVING:
            self._states.pop(key, None)
            self._drafts.pop(key, None)

        if transient:
            self.store.remove(key)
            if result:
                self._commit_created(result)
            return dict(result) if result else candidate

        merged = candidate
        if result:
            merged.update(result)
        if key in self.store:
            self.store.merge_committed(key, merged)
        return merged

    def _commit_created(self, record: Record) -> Optional[RowKey]:
        try:
            return self.store.add_committed(record).key
        except GridError as e:
            logger.warning(f"Created record could not be added to the grid: {e}")
            return None

    def cancel(self, key: RowKey) -> None:
        """Discard the draft; a transient row is removed entirely."""
        if key not in self._states and key not in self.store:
            raise UnknownRowError(key)
        self._states.pop(key, None)
        self._drafts.pop(key, None)
        if self.store.is_transient(key):
            self.store.remove(key)
            logger.info(f"Discarded unsaved row {key}")

    def forget(self, keys: List[RowKey]) -> None:
        """Drop edit state for rows that no longer exist."""
        for key in keys:
            self._states.pop(key, None)
            self._drafts.pop(key, None)
