"""Persistence gateway storing grid rows as JSON documents in SQLite."""

import asyncio
import json
import logging
import os
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from datagrid.models.row import RowKey
from datagrid.services.gateway.base import PersistenceGateway

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteGateway(PersistenceGateway):
    """Stores each record as a JSON document keyed by namespace and id.

    Grids sharing one database file use different namespaces, so equal row
    keys in two grids never address the same document.

    The sqlite3 calls are blocking, so every operation runs in a worker
    thread with its own connection.
    """

    def __init__(self, db_path: str, key_field: str = "id", namespace: str = "default"):
        self.db_path = db_path
        self.key_field = key_field
        self.namespace = namespace
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_db(self) -> None:
        """Create the database file and the grid_rows table if needed."""
        dir_path = os.path.dirname(self.db_path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)

        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS grid_rows (
                    namespace TEXT NOT NULL,
                    id TEXT NOT NULL,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (namespace, id)
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

        logger.info(f"Initialized SQLite grid store at {self.db_path}")

    def _create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        stored = dict(record)
        if stored.get(self.key_field) in (None, ""):
            stored[self.key_field] = uuid.uuid4().hex
        key = str(stored[self.key_field])
        timestamp = _now()

        conn = self._connect()
        try:
            conn.execute(
                "INSERT INTO grid_rows (namespace, id, data, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (self.namespace, key, json.dumps(stored, default=str), timestamp, timestamp),
            )
            conn.commit()
            logger.info(f"Inserted row {key} into database")
            return stored
        except Exception as e:
            conn.rollback()
            logger.error(f"Error inserting row {key}: {e}")
            raise
        finally:
            conn.close()

    def _update(self, key: RowKey, record: Dict[str, Any]) -> Dict[str, Any]:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT data FROM grid_rows WHERE namespace = ? AND id = ?",
                (self.namespace, str(key)),
            ).fetchone()
            if row is None:
                raise KeyError(f"Row {key} not found")

            stored = json.loads(row[0])
            stored.update(record)
            conn.execute(
                "UPDATE grid_rows SET data = ?, updated_at = ? WHERE namespace = ? AND id = ?",
                (json.dumps(stored, default=str), _now(), self.namespace, str(key)),
            )
            conn.commit()
            logger.info(f"Updated row {key} in database")
            return stored
        except Exception as e:
            conn.rollback()
            logger.error(f"Error updating row {key}: {e}")
            raise
        finally:
            conn.close()

    def _delete_many(self, keys: List[RowKey]) -> int:
        conn = self._connect()
        try:
            cursor = conn.executemany(
                "DELETE FROM grid_rows WHERE namespace = ? AND id = ?",
                [(self.namespace, str(k)) for k in keys],
            )
            conn.commit()
            logger.info(f"Deleted {cursor.rowcount} of {len(keys)} rows from database")
            return cursor.rowcount
        except Exception as e:
            conn.rollback()
            logger.error(f"Error deleting rows {keys}: {e}")
            raise
        finally:
            conn.close()

    def _list(self) -> List[Dict[str, Any]]:
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT data FROM grid_rows WHERE namespace = ? ORDER BY created_at, id",
                (self.namespace,),
            ).fetchall()
            return [json.loads(row[0]) for row in rows]
        finally:
            conn.close()

    async def create(self, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await asyncio.to_thread(self._create, record)

    async def update(self, key: RowKey, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await asyncio.to_thread(self._update, key, record)

    async def delete(self, key: RowKey) -> None:
        await asyncio.to_thread(self._delete_many, [key])

    async def bulk_delete(self, keys: List[RowKey]) -> None:
        await asyncio.to_thread(self._delete_many, list(keys))

    async def list_records(self) -> List[Dict[str, Any]]:
        """All stored records in insertion order."""
        return await asyncio.to_thread(self._list)
