from __future__ import annotations

import logging
import pathlib
from typing import Any, Dict, Optional

from surrealdb import AsyncSurreal, RecordID

from settings.config import settings

logger = logging.getLogger(__name__)


SCHEMA_PATH = pathlib.Path(__file__).resolve().parent / "surreal" / "schema.surql"

db: Optional[AsyncSurreal] = None


# --- Lifecycle management ---
async def init_db() -> AsyncSurreal:
    """Initialize the SurrealDB connection on app startup."""
    logger.info("Connecting to SurrealDB at %s (ns=%s, db=%s)", settings.SURREALDB_URL, settings.SURREALDB_NS, settings.SURREALDB_DB)
    global db
    client = AsyncSurreal(settings.SURREALDB_URL)
    try:
        await client.signin({
            "username": settings.SURREALDB_USER,
            "password": settings.SURREALDB_PASS,
            })
        await client.use(settings.SURREALDB_NS, settings.SURREALDB_DB)
    except Exception as e:
        raise Exception(f"Error initializing app database connection. Check your credentials: {e}") from e

    # Idempotent DEFINE ... IF NOT EXISTS statements
    schema_sql = SCHEMA_PATH.read_text(encoding="utf-8")
    await client.query(schema_sql)
    logger.info("SurrealDB schema applied")
    db = client
    return client


async def close_db() -> None:
    """Close the SurrealDB connection on app shutdown."""
    global db
    if db is None:
        return
    try:
        await db.close()
    except Exception as e:
        raise Exception("Error closing app database connection") from e
    finally:
        db = None


# --- FastAPI dependencies ---
async def get_db() -> AsyncSurreal:
    """Return the Surreal client for DI and direct usage in scripts."""
    if db is None:
        return await init_db()
    return db


# --- Record helpers ---
def to_record_id(table: str, value: str) -> RecordID:
    """
    Build a RecordID from either "table:key" or a bare key.
    An id naming a different table is still scoped to `table`, so it simply won't be found.
    """
    key = value.split(":", 1)[1] if value.startswith(f"{table}:") else value
    return RecordID(table, key)


def normalize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    if "id" in record:
        record = {**record, "id": str(record["id"])}
    return record


def first_record(result: Any) -> Optional[Dict[str, Any]]:
    # select() returns a dict for a single record, but some server versions wrap it in a list
    if isinstance(result, list):
        return result[0] if result else None
    return result or None
