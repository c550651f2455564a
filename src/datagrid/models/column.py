"""Column model describing how each grid column is read, sorted and edited."""

from typing import Any, Dict, Iterator, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, Field, model_validator

from datagrid.core.errors import DuplicateColumnError, UnknownColumnError

ColumnType = Literal["text", "number", "date", "email", "select"]


def get_nested_value(record: Any, path: str) -> Any:
    """Read a dot-separated path from a record, returning None when absent."""
    if record is None:
        return None
    if not path:
        return record
    result = record
    for part in path.split("."):
        if result is None:
            return None
        if isinstance(result, dict):
            result = result.get(part)
        else:
            result = getattr(result, part, None)
    return result


def set_nested_value(record: Dict[str, Any], path: str, value: Any) -> None:
    """Write a dot-separated path into a record, creating intermediate dicts."""
    parts = path.split(".")
    target = record
    for part in parts[:-1]:
        child = target.get(part)
        if not isinstance(child, dict):
            child = {}
            target[part] = child
        target = child
    target[parts[-1]] = value


def to_text(value: Any) -> str:
    """Stringify a cell value the same way for sorting, filtering and export."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class Column(BaseModel):
    """Static description of a single grid column."""

    key: str
    title: str
    data_path: Optional[str] = None
    type: ColumnType = "text"
    sortable: bool = True
    filterable: bool = True
    editable: bool = True
    required: bool = False
    options: List[str] = Field(default_factory=list)
    width: Optional[Union[int, str]] = None

    @model_validator(mode="after")
    def default_data_path(self) -> "Column":
        """Fall back to the column key when no data path is configured."""
        if not self.data_path:
            self.data_path = self.key
        return self

    def value_of(self, record: Any) -> Any:
        """Read this column's value from a record."""
        return get_nested_value(record, self.data_path)


class ColumnModel:
    """Ordered, keyed collection of columns."""

    def __init__(self, columns: Sequence[Union[Column, Dict[str, Any]]]):
        self._columns: List[Column] = [
            c if isinstance(c, Column) else Column(**c) for c in columns
        ]
        self._by_key: Dict[str, Column] = {}
        for column in self._columns:
            if column.key in self._by_key:
                raise DuplicateColumnError(column.key)
            self._by_key[column.key] = column

    def __iter__(self) -> Iterator[Column]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __contains__(self, key: str) -> bool:
        return key in self._by_key

    def get(self, key: str) -> Column:
        """Get a column by key."""
        try:
            return self._by_key[key]
        except KeyError:
            raise UnknownColumnError(key) from None

    def find(self, key: str) -> Optional[Column]:
        return self._by_key.get(key)

    def keys(self) -> List[str]:
        return [c.key for c in self._columns]

    def titles(self) -> List[str]:
        return [c.title for c in self._columns]
