"""Per-column value filters."""

from typing import Dict, Iterable, List, Optional, Sequence, Set

from datagrid.core.errors import ColumnCapabilityError
from datagrid.models.column import ColumnModel, to_text
from datagrid.models.row import RowEntry


class FilterEngine:
    """Accepted raw values per column, combined with AND across columns.

    A column whose accepted set is missing or empty does not filter at all.
    """

    def __init__(self, columns: ColumnModel):
        self.columns = columns
        self._filters: Dict[str, Set[str]] = {}
        self._search_terms: Dict[str, str] = {}

    def _filterable(self, column_key: str):
        column = self.columns.get(column_key)
        if not column.filterable:
            raise ColumnCapabilityError(column_key, "filterable")
        return column

    def available_values(
        self,
        column_key: str,
        rows: Iterable[RowEntry],
        search_term: Optional[str] = None,
    ) -> List[str]:
        """Distinct non-empty values of a column, optionally narrowed by a search term."""
        column = self.columns.get(column_key)
        if search_term is None:
            search_term = self._search_terms.get(column_key, "")

        values: Set[str] = set()
        for row in rows:
            value = column.value_of(row.record)
            if value is None or value == "":
                continue
            values.add(to_text(value))

        needle = search_term.lower()
        return sorted(v for v in values if needle in v.lower())

    def set_search_term(self, column_key: str, search_term: str) -> None:
        self.columns.get(column_key)
        self._search_terms[column_key] = search_term

    def search_term(self, column_key: str) -> str:
        return self._search_terms.get(column_key, "")

    def toggle(self, column_key: str, value: str) -> List[str]:
        """Add or remove one accepted value."""
        self._filterable(column_key)
        accepted = self._filters.setdefault(column_key, set())
        if value in accepted:
            accepted.remove(value)
        else:
            accepted.add(value)
        return self.selected_values(column_key)

    def select_all(self, column_key: str, rows: Iterable[RowEntry]) -> List[str]:
        """Accept every value currently offered for the column."""
        self._filterable(column_key)
        self._filters[column_key] = set(self.available_values(column_key, rows))
        return self.selected_values(column_key)

    def clear(self, column_key: str) -> None:
        self.columns.get(column_key)
        self._filters.pop(column_key, None)

    def clear_all(self) -> None:
        self._filters = {}

    def is_active(self, column_key: str) -> bool:
        return bool(self._filters.get(column_key))

    def selected_values(self, column_key: str) -> List[str]:
        return sorted(self._filters.get(column_key, ()))

    @property
    def state(self) -> Dict[str, List[str]]:
        """Active filters only."""
        return {k: sorted(v) for k, v in self._filters.items() if v}

    def accepts(self, row: RowEntry) -> bool:
        for column_key, accepted in self._filters.items():
            if not accepted:
                continue
            column = self.columns.find(column_key)
            if column is None:
                continue
            if to_text(column.value_of(row.record)) not in accepted:
                return False
        return True

    def apply(self, rows: Sequence[RowEntry]) -> List[RowEntry]:
        """Keep the rows that pass every active column filter."""
        return [row for row in rows if self.accepts(row)]
