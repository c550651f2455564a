"""Row selection by stable key."""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from datagrid.models.row import RowKey

logger = logging.getLogger(__name__)

SelectionCallback = Callable[[List[RowKey]], None]


class SelectionController:
    """Set of selected row keys, independent of sort, filter and page."""

    def __init__(self, on_change: Optional[SelectionCallback] = None):
        # dict keeps selection order
        self._selected: Dict[RowKey, None] = {}
        self.on_change = on_change

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self.selected_keys)

    @property
    def selected_keys(self) -> List[RowKey]:
        return list(self._selected)

    def __len__(self) -> int:
        return len(self._selected)

    def is_selected(self, key: RowKey) -> bool:
        return key in self._selected

    def toggle(self, key: RowKey) -> bool:
        """Flip one key, returning whether it is now selected."""
        if key in self._selected:
            del self._selected[key]
            selected = False
        else:
            self._selected[key] = None
            selected = True
        self._changed()
        return selected

    def is_all_selected(self, keys: Iterable[RowKey]) -> bool:
        keys = list(keys)
        return bool(keys) and all(k in self._selected for k in keys)

    def select_all_on_page(self, keys: Iterable[RowKey]) -> bool:
        """Select the given keys, or deselect them if they are all selected already.

        Only the passed keys change; selections elsewhere are kept.
        """
        keys = list(keys)
        if self.is_all_selected(keys):
            for key in keys:
                self._selected.pop(key, None)
            selected = False
        else:
            for key in keys:
                self._selected[key] = None
            selected = True
        self._changed()
        return selected

    def select(self, keys: Iterable[RowKey]) -> None:
        for key in keys:
            self._selected[key] = None
        self._changed()

    def discard(self, keys: Iterable[RowKey]) -> None:
        removed = [key for key in keys if key in self._selected]
        for key in removed:
            del self._selected[key]
        if removed:
            self._changed()

    def clear(self) -> None:
        if not self._selected:
            return
        self._selected = {}
        self._changed()
