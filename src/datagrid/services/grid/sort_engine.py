"""Multi-column sort state and the type-aware row comparator."""

import functools
import re
from typing import Any, List, Literal, Optional, Sequence

from pydantic import BaseModel

from datagrid.core.errors import ColumnCapabilityError
from datagrid.models.column import Column, ColumnModel, to_text
from datagrid.models.row import RowEntry

SortDirection = Literal["asc", "desc"]

# Leading numeric prefix, accepted the way browsers parse "12.5px" as 12.5
_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


class SortEntry(BaseModel):
    """One (column, direction) pair of the sort order."""

    column_key: str
    direction: SortDirection = "asc"


def parse_number(value: Any) -> float:
    """Parse a cell as a float, falling back to 0 when it is not numeric."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return 0.0 if value != value else float(value)
    match = _NUMBER_PREFIX.match(to_text(value))
    if not match:
        return 0.0
    return float(match.group(0))


def _sort_value(column: Column, record: Any) -> Any:
    value = column.value_of(record)
    if value is None:
        value = ""
    if column.type == "number":
        return parse_number(value)
    return to_text(value).lower()


class SortEngine:
    """Ordered list of sort entries; the first entry is the primary key."""

    def __init__(self, columns: ColumnModel):
        self.columns = columns
        self._spec: List[SortEntry] = []

    @property
    def spec(self) -> List[SortEntry]:
        return list(self._spec)

    def toggle(self, column_key: str) -> List[SortEntry]:
        """Cycle a column through asc -> desc -> unsorted."""
        column = self.columns.get(column_key)
        if not column.sortable:
            raise ColumnCapabilityError(column_key, "sortable")

        for index, entry in enumerate(self._spec):
            if entry.column_key != column_key:
                continue
            if entry.direction == "asc":
                self._spec[index] = SortEntry(column_key=column_key, direction="desc")
            else:
                del self._spec[index]
            return self.spec

        self._spec.append(SortEntry(column_key=column_key, direction="asc"))
        return self.spec

    def clear(self) -> None:
        self._spec = []

    def priority(self, column_key: str) -> Optional[int]:
        """1-based position of the column in the sort order, if sorted."""
        for index, entry in enumerate(self._spec):
            if entry.column_key == column_key:
                return index + 1
        return None

    def direction(self, column_key: str) -> Optional[SortDirection]:
        for entry in self._spec:
            if entry.column_key == column_key:
                return entry.direction
        return None

    def compare(self, row_a: RowEntry, row_b: RowEntry) -> int:
        """Compare two rows by every sort entry in priority order."""
        for entry in self._spec:
            column = self.columns.find(entry.column_key)
            if column is None:
                continue
            a_value = _sort_value(column, row_a.record)
            b_value = _sort_value(column, row_b.record)
            if a_value == b_value:
                continue
            result = -1 if a_value < b_value else 1
            return result if entry.direction == "asc" else -result
        return 0

    def sort(self, rows: Sequence[RowEntry]) -> List[RowEntry]:
        """Return the rows ordered by the current sort order; ties keep input order."""
        if not self._spec:
            return list(rows)
        return sorted(rows, key=functools.cmp_to_key(self.compare))
