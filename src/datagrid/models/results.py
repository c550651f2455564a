"""Result models returned by grid operations."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_serializer

from datagrid.models.row import LocalKey


def _plain_key(key: Any) -> Any:
    return str(key) if isinstance(key, LocalKey) else key


class SaveResult(BaseModel):
    """Outcome of saving one row."""

    key: Any
    status: Literal["saved", "invalid", "failed"]
    record: Optional[Dict[str, Any]] = None
    missing_fields: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    @field_serializer("key")
    def serialize_key(self, key: Any) -> Any:
        return _plain_key(key)


class SaveAllResult(BaseModel):
    """Outcome of saving every row that is being edited.

    Rows are committed one at a time, so a ``failed`` result can still list
    rows in ``saved_keys`` that were committed before the failure.
    """

    status: Literal["saved", "nothing", "invalid", "failed"]
    saved_keys: List[Any] = Field(default_factory=list)
    failed_key: Optional[Any] = None
    missing: Dict[str, List[str]] = Field(default_factory=dict)
    error: Optional[str] = None

    @field_serializer("saved_keys")
    def serialize_saved_keys(self, keys: List[Any]) -> List[Any]:
        return [_plain_key(k) for k in keys]

    @field_serializer("failed_key")
    def serialize_failed_key(self, key: Any) -> Any:
        return _plain_key(key)


class DeleteResult(BaseModel):
    """Outcome of a single or bulk delete."""

    status: Literal["deleted", "cancelled", "nothing", "failed"]
    deleted_keys: List[Any] = Field(default_factory=list)
    error: Optional[str] = None

    @field_serializer("deleted_keys")
    def serialize_deleted_keys(self, keys: List[Any]) -> List[Any]:
        return [_plain_key(k) for k in keys]
