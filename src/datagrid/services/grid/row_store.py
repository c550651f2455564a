"""Working row set: committed rows from the caller plus local transient rows."""

import copy
import logging
from typing import Dict, Iterable, List, Optional

from datagrid.core.errors import GridError, UnknownRowError
from datagrid.models.row import KeyFunc, LocalKey, Record, RowEntry, RowKey

logger = logging.getLogger(__name__)


class RowStore:
    """Holds committed and transient rows in insertion order."""

    def __init__(
        self,
        rows: Optional[Iterable[Record]] = None,
        key_field: Optional[str] = "id",
        key_func: Optional[KeyFunc] = None,
    ):
        if key_field is None and key_func is None:
            raise ValueError("Either key_field or key_func is required")
        self.key_field = key_field
        self.key_func = key_func
        self._committed: Dict[RowKey, RowEntry] = {}
        self._transient: Dict[RowKey, RowEntry] = {}
        if rows:
            self.replace_committed(rows)

    def derive_key(self, record: Record) -> RowKey:
        """Derive the key of a committed record."""
        if self.key_func is not None:
            key = self.key_func(record)
        else:
            key = record.get(self.key_field)
        if key is None or key == "":
            raise GridError(f"Row has no key: {record}")
        return key

    def replace_committed(self, rows: Iterable[Record]) -> List[RowKey]:
        """Replace every committed row, returning the keys that disappeared."""
        committed: Dict[RowKey, RowEntry] = {}
        for record in rows:
            key = self.derive_key(record)
            if key in committed:
                logger.warning(f"Duplicate row key {key}; keeping the last record")
            committed[key] = RowEntry(key=key, record=dict(record))
        removed = [k for k in self._committed if k not in committed]
        self._committed = committed
        logger.info(f"Loaded {len(committed)} committed rows")
        return removed

    def add_committed(self, record: Record) -> RowEntry:
        key = self.derive_key(record)
        entry = RowEntry(key=key, record=dict(record))
        self._committed[key] = entry
        return entry

    def add_transient(self, key: LocalKey, record: Record) -> RowEntry:
        entry = RowEntry(key=key, record=record, transient=True)
        self._transient[key] = entry
        return entry

    def merge_committed(self, key: RowKey, fields: Record) -> RowEntry:
        """Merge saved fields into a committed row, keeping its key."""
        entry = self.get(key)
        entry.record.update(copy.deepcopy(fields))
        return entry

    def remove(self, key: RowKey) -> bool:
        """Remove a row; removing an unknown key is a no-op."""
        if self._committed.pop(key, None) is not None:
            return True
        return self._transient.pop(key, None) is not None

    def get(self, key: RowKey) -> RowEntry:
        entry = self.find(key)
        if entry is None:
            raise UnknownRowError(key)
        return entry

    def find(self, key: RowKey) -> Optional[RowEntry]:
        entry = self._committed.get(key)
        if entry is None:
            entry = self._transient.get(key)
        return entry

    def resolve(self, text: str) -> RowKey:
        """Find the key whose string form matches ``text``."""
        for key in self.keys():
            if str(key) == text:
                return key
        raise UnknownRowError(text)

    def __contains__(self, key: RowKey) -> bool:
        return key in self._committed or key in self._transient

    def __len__(self) -> int:
        return len(self._committed) + len(self._transient)

    def keys(self) -> List[RowKey]:
        return list(self._committed) + list(self._transient)

    def entries(self) -> List[RowEntry]:
        """All rows: committed first, then transient, each in insertion order."""
        return list(self._committed.values()) + list(self._transient.values())

    def is_transient(self, key: RowKey) -> bool:
        return key in self._transient
