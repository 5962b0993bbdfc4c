import aiosqlite
import structlog

from stockwatch.config import settings

logger = structlog.get_logger()

_db: aiosqlite.Connection | None = None

# Single string-to-string table backing the persistent cache.
KV_STORE_DDL = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
)
"""


async def init_database(path: str | None = None) -> aiosqlite.Connection:
    """Open the connection once per process and ensure the schema exists."""
    global _db
    db_path = path or settings.db_path
    connection = await aiosqlite.connect(db_path)
    connection.row_factory = aiosqlite.Row
    await connection.execute("PRAGMA journal_mode=WAL")
    await connection.execute(KV_STORE_DDL)
    await connection.commit()

    _db = connection
    logger.info("database_initialized", path=db_path)
    return connection


async def close_database() -> None:
    global _db
    if _db is None:
        return
    connection, _db = _db, None
    await connection.close()
    logger.info("database_closed")


def get_db() -> aiosqlite.Connection:
    if _db is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _db


async def check_health() -> int:
    """Return the number of stored keys; raises if the database is unusable."""
    cursor = await get_db().execute("SELECT COUNT(*) FROM kv_store")
    row = await cursor.fetchone()
    await cursor.close()
    return row[0]
