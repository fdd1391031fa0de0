from kidquiz.db.database import get_db


async def get_local_value(key: str) -> str | None:
    """Read one key from the local key/value table."""
    db = await get_db()
    cursor = await db.execute("SELECT value FROM local_state WHERE key = ?", (key,))
    row = await cursor.fetchone()
    return row["value"] if row else None


async def set_local_value(key: str, value: str) -> None:
    """Create or overwrite one key in the local key/value table."""
    db = await get_db()
    await db.execute(
        """INSERT INTO local_state (key, value)
           VALUES (?, ?)
           ON CONFLICT(key) DO UPDATE SET
               value = excluded.value,
               updated_at = datetime('now')""",
        (key, value),
    )
    await db.commit()
