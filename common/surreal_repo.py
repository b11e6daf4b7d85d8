from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from surrealdb import AsyncSurreal, RecordID

from common.errors import ConflictError, StorageError
from settings.db import first_record, normalize_record

logger = logging.getLogger(__name__)


class SurrealRepo:
    """
    Thin wrapper over the SurrealDB client for one table.
    Any unexpected driver error is logged and re-raised as StorageError.
    """

    table: str = ""

    def __init__(self, db: AsyncSurreal):
        self.db = db

    async def _query(self, query: str, vars: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        try:
            res = await self.db.query(query, vars or {})
        except Exception as exc:
            logger.exception("Query on '%s' failed", self.table)
            raise StorageError(f"Error querying {self.table}") from exc
        return [normalize_record(r) for r in (res or [])]

    async def _select(self, record_id: RecordID) -> Optional[Dict[str, Any]]:
        try:
            record = first_record(await self.db.select(record_id))
        except Exception as exc:
            logger.exception("Select of %s failed", record_id)
            raise StorageError(f"Error reading {self.table}") from exc
        return normalize_record(record) if record else None

    async def _create(self, payload: Dict[str, Any], conflict_message: Optional[str] = None) -> Dict[str, Any]:
        try:
            record = first_record(await self.db.create(self.table, payload))
        except Exception as exc:
            if conflict_message and "already contains" in str(exc):
                raise ConflictError(conflict_message) from exc
            logger.exception("Create on '%s' failed", self.table)
            raise StorageError(f"Error creating {self.table}") from exc
        if not record:
            raise StorageError(f"Error creating {self.table}")
        return normalize_record(record)

    async def _merge(self, record_id: RecordID, changes: Dict[str, Any]) -> Dict[str, Any]:
        try:
            record = first_record(await self.db.merge(record_id, changes))
        except Exception as exc:
            logger.exception("Update of %s failed", record_id)
            raise StorageError(f"Error updating {self.table}") from exc
        if not record:
            raise StorageError(f"Error updating {self.table}")
        return normalize_record(record)

    async def _delete(self, record_id: RecordID) -> None:
        try:
            await self.db.delete(record_id)
        except Exception as exc:
            logger.exception("Delete of %s failed", record_id)
            raise StorageError(f"Error deleting {self.table}") from exc
