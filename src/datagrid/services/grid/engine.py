"""Data grid facade combining sort, filter, paging, selection, editing and export."""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from datagrid.core.config import Settings, get_settings
from datagrid.core.errors import PersistenceError, RowValidationError, UnknownRowError
from datagrid.models.column import Column, ColumnModel
from datagrid.models.results import DeleteResult, SaveAllResult, SaveResult
from datagrid.models.row import KeyFunc, LocalKey, LocalKeyGenerator, Record, RowEntry, RowKey
from datagrid.models.snapshot import GridRowView, GridSnapshot
from datagrid.services.gateway.base import PersistenceGateway
from datagrid.services.grid.bulk_actions import BulkActionCoordinator
from datagrid.services.grid.edit_session import EditSession, RowEditState
from datagrid.services.grid.export import ExportPayload, ExportSerializer
from datagrid.services.grid.filter_engine import FilterEngine
from datagrid.services.grid.pagination import PaginationController
from datagrid.services.grid.row_store import RowStore
from datagrid.services.grid.selection import SelectionCallback, SelectionController
from datagrid.services.grid.sort_engine import SortEngine, SortEntry
from datagrid.services.notification.base import NotificationService
from datagrid.services.notification.logging_service import LoggingNotificationService

logger = logging.getLogger(__name__)


class DataGrid:
    """Interactive view over an in-memory row collection.

    The view is recomputed from the row store on every call: rows are
    filtered, then sorted, then sliced into pages. The grid owns its state;
    change it only through these methods.
    """

    def __init__(
        self,
        columns: Union[ColumnModel, Sequence[Union[Column, Dict[str, Any]]]],
        rows: Optional[Iterable[Record]] = None,
        *,
        gateway: PersistenceGateway,
        notifier: Optional[NotificationService] = None,
        key_field: Optional[str] = "id",
        key_func: Optional[KeyFunc] = None,
        title: Optional[str] = None,
        settings: Optional[Settings] = None,
        on_selection_change: Optional[SelectionCallback] = None,
    ):
        """Create a grid.

        Args:
            columns: Column descriptors, in display order.
            rows: Committed rows supplied by the caller.
            gateway: Service that persists creates, updates and deletes.
            notifier: Service used for confirmations and user messages.
            key_field: Record field holding the row key.
            key_func: Callable deriving the row key, used instead of key_field.
            title: Grid title, also used for the export filename.
            settings: Grid settings; the cached application settings by default.
            on_selection_change: Called with the selected keys after each change.
        """
        self.settings = settings or get_settings()
        self.title = title
        self.columns = columns if isinstance(columns, ColumnModel) else ColumnModel(columns)
        self.gateway = gateway
        self.notifier = notifier or LoggingNotificationService(
            auto_confirm=self.settings.auto_confirm
        )

        self.store = RowStore(rows, key_field=key_field, key_func=key_func)
        self.sort_engine = SortEngine(self.columns)
        self.filter_engine = FilterEngine(self.columns)
        self.pagination = PaginationController(
            page_size=self.settings.default_page_size,
            page_size_options=self.settings.page_size_options,
            enabled=self.settings.pagination_enabled,
            max_visible_pages=self.settings.max_visible_pages,
        )
        self.selection = SelectionController(on_change=on_selection_change)
        self.edit_session = EditSession(self.columns, self.store, gateway)
        self.bulk = BulkActionCoordinator(
            self.columns,
            self.store,
            self.selection,
            self.edit_session,
            self.sort_engine,
            gateway,
            self.notifier,
            LocalKeyGenerator(),
        )
        self.serializer = ExportSerializer(
            default_title=self.settings.export_default_title,
            escape_quotes=self.settings.export_escape_quotes,
            include_bom=self.settings.export_include_bom,
        )

    # ----- rows -----
    def replace_rows(self, rows: Iterable[Record]) -> None:
        """Swap in a fresh set of committed rows; transient rows are kept."""
        removed = self.store.replace_committed(rows)
        if not removed:
            return
        self.edit_session.forget(removed)
        self.selection.discard(removed)
        if self.bulk.pending_delete in removed:
            self.bulk.cancel_delete()

    def resolve_key(self, text: str) -> RowKey:
        return self.store.resolve(text)

    def resolve_known_keys(self, texts: Iterable[str]) -> List[RowKey]:
        """Resolve keys given as text, skipping those no longer in the grid."""
        keys = []
        for text in texts:
            try:
                keys.append(self.store.resolve(text))
            except UnknownRowError:
                logger.info(f"Row {text} is already gone; skipping")
        return keys

    # ----- view -----
    def view(self) -> List[RowEntry]:
        """Filtered and sorted rows, before pagination."""
        return self.sort_engine.sort(self.filter_engine.apply(self.store.entries()))

    def view_records(self) -> List[Record]:
        return [entry.record for entry in self.view()]

    def page_rows(self) -> List[RowEntry]:
        return self.pagination.slice(self.view())

    @property
    def total_pages(self) -> int:
        return self.pagination.total_pages(len(self.view()))

    # ----- sorting -----
    def toggle_sort(self, column_key: str) -> List[SortEntry]:
        return self.sort_engine.toggle(column_key)

    def clear_sorts(self) -> None:
        self.bulk.clear_sorts()

    # ----- filtering -----
    def available_filter_values(
        self, column_key: str, search_term: Optional[str] = None
    ) -> List[str]:
        return self.filter_engine.available_values(
            column_key, self.store.entries(), search_term
        )

    def set_filter_search(self, column_key: str, search_term: str) -> None:
        self.filter_engine.set_search_term(column_key, search_term)

    def toggle_filter(self, column_key: str, value: str) -> List[str]:
        return self.filter_engine.toggle(column_key, value)

    def select_all_filter(self, column_key: str) -> List[str]:
        return self.filter_engine.select_all(column_key, self.store.entries())

    def clear_filter(self, column_key: str) -> None:
        self.filter_engine.clear(column_key)

    def clear_all_filters(self) -> None:
        self.filter_engine.clear_all()

    # ----- pagination -----
    def set_page_size(self, page_size: int) -> None:
        self.pagination.set_page_size(page_size)

    def go_to_page(self, page: int) -> int:
        return self.pagination.go_to(page, len(self.view()))

    def next_page(self) -> int:
        return self.pagination.next(len(self.view()))

    def previous_page(self) -> int:
        return self.pagination.previous(len(self.view()))

    def first_page(self) -> int:
        return self.pagination.first()

    def last_page(self) -> int:
        return self.pagination.last(len(self.view()))

    # ----- selection -----
    def toggle_selection(self, key: RowKey) -> bool:
        self.store.get(key)
        return self.selection.toggle(key)

    def toggle_page_selection(self) -> bool:
        """Select or deselect the rows on the current page."""
        return self.selection.select_all_on_page(e.key for e in self.page_rows())

    def select_all_in_view(self) -> None:
        """Select every row of the filtered view, across all pages."""
        self.selection.select(e.key for e in self.view())

    def clear_selection(self) -> None:
        self.selection.clear()

    def selected_records(self) -> List[Record]:
        return [
            entry.record
            for entry in self.store.entries()
            if self.selection.is_selected(entry.key)
        ]

    # ----- editing -----
    def begin_edit(self, key: RowKey) -> None:
        self.edit_session.begin_edit(key)

    def set_field(self, key: RowKey, column_key: str, value: Any) -> None:
        self.edit_session.set_field(key, column_key, value)

    def cell_value(self, key: RowKey, column_key: str) -> Any:
        return self.edit_session.cell_value(key, column_key)

    def edit_state(self, key: RowKey) -> RowEditState:
        return self.edit_session.state(key)

    def cancel_edit(self, key: RowKey) -> None:
        was_transient = self.store.is_transient(key)
        self.edit_session.cancel(key)
        if was_transient:
            self.selection.discard([key])

    async def save_row(self, key: RowKey) -> SaveResult:
        """Save one row and report problems through the notifier."""
        try:
            record = await self.edit_session.save(key)
        except RowValidationError as e:
            self.notifier.notify("warning", "Required values missing", str(e))
            return SaveResult(
                key=key, status="invalid", missing_fields=e.missing_fields, error=str(e)
            )
        except PersistenceError as e:
            self.notifier.notify("error", "Save failed", str(e))
            return SaveResult(key=key, status="failed", error=str(e))
        return SaveResult(key=key, status="saved", record=record)

    # ----- bulk actions -----
    def add_row(self) -> LocalKey:
        return self.bulk.add_row()

    def duplicate_selected(self) -> List[LocalKey]:
        return self.bulk.duplicate_selected()

    async def bulk_delete(self, keys: Optional[Iterable[RowKey]] = None) -> DeleteResult:
        return await self.bulk.bulk_delete(keys)

    async def save_all(self) -> SaveAllResult:
        return await self.bulk.save_all()

    def request_delete(self, key: RowKey) -> None:
        self.bulk.request_delete(key)

    def cancel_delete(self) -> None:
        self.bulk.cancel_delete()

    async def confirm_delete(self) -> DeleteResult:
        return await self.bulk.confirm_delete()

    # ----- export -----
    def export(self, title: Optional[str] = None, today: Optional[date] = None) -> ExportPayload:
        """Render the whole filtered and sorted view, not only the current page."""
        records = self.view_records()
        payload = self.serializer.export(records, self.columns, title or self.title, today)
        logger.info(f"Exported {len(records)} rows to {payload.filename}")
        return payload

    # ----- snapshot -----
    def snapshot(self) -> GridSnapshot:
        view = self.view()
        total = len(view)
        page = self.pagination.slice(view)
        pending = self.bulk.pending_delete
        return GridSnapshot(
            title=self.title,
            columns=list(self.columns),
            rows=[
                GridRowView(
                    key=str(entry.key),
                    transient=entry.transient,
                    state=self.edit_session.state(entry.key).value,
                    selected=self.selection.is_selected(entry.key),
                    record=entry.record,
                    draft=self.edit_session.draft(entry.key),
                )
                for entry in page
            ],
            page=self.pagination.current_page,
            page_size=self.pagination.page_size,
            page_size_options=self.pagination.page_size_options,
            total_rows=total,
            total_pages=self.pagination.total_pages(total),
            visible_range=self.pagination.visible_range(total),
            page_numbers=self.pagination.page_numbers(total),
            sort=self.sort_engine.spec,
            filters=self.filter_engine.state,
            selected_keys=[str(k) for k in self.selection.selected_keys],
            all_selected_on_page=self.selection.is_all_selected(e.key for e in page),
            editing_keys=[str(k) for k in self.edit_session.active_keys],
            pending_delete=str(pending) if pending is not None else None,
        )
