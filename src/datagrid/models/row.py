"""Row identity and row entry models."""

import itertools
from typing import Any, Callable, Dict, Union

from pydantic import BaseModel, ConfigDict, Field


class LocalKey(BaseModel):
    """Opaque key of a row that has not been persisted yet."""

    model_config = ConfigDict(frozen=True)

    seq: int

    def __str__(self) -> str:
        return f"local-{self.seq}"


RowKey = Union[LocalKey, int, str]
Record = Dict[str, Any]
KeyFunc = Callable[[Record], RowKey]


class LocalKeyGenerator:
    """Hands out collision-free local keys for transient rows."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def next_key(self) -> LocalKey:
        return LocalKey(seq=next(self._counter))


class RowEntry(BaseModel):
    """A record held by the row store, addressed by its stable key."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: RowKey
    record: Record = Field(default_factory=dict)
    transient: bool = False


def is_local_key(key: Any) -> bool:
    return isinstance(key, LocalKey)
