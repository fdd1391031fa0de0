import logging
import os

import aiosqlite

from kidquiz.config import settings

logger = logging.getLogger(__name__)

_db: aiosqlite.Connection | None = None


async def get_db(db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create the database connection."""
    global _db
    if _db is None:
        path = db_path or settings.DB_PATH
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        _db = await aiosqlite.connect(path)
        _db.row_factory = aiosqlite.Row
        await _create_tables(_db)
        logger.info("Local state database opened at %s", path)
    return _db


async def close_db():
    """Close the database connection."""
    global _db
    if _db:
        await _db.close()
        _db = None


async def _create_tables(db: aiosqlite.Connection):
    await db.executescript("""
        CREATE TABLE IF NOT EXISTS local_state (
            key         TEXT PRIMARY KEY,
            value       TEXT NOT NULL,
            updated_at  TEXT DEFAULT (datetime('now'))
        );
    """)
    await db.commit()
