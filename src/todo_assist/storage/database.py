"""SQLite database connection manager with schema migration."""

from __future__ import annotations

from pathlib import Path

import aiosqlite

from todo_assist.log import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS todos (
    todo_seq        INTEGER PRIMARY KEY AUTOINCREMENT,
    user_seq        INTEGER NOT NULL,
    todo_content    TEXT,
    todo_date       TEXT,
    complete_dtm    TEXT,
    todo_note       TEXT,
    del_yn          TEXT    NOT NULL DEFAULT 'N' CHECK(del_yn IN ('Y','N')),
    reg_id          TEXT,
    reg_ip          TEXT,
    reg_dtm         TEXT    NOT NULL,
    upd_id          TEXT,
    upd_ip          TEXT,
    upd_dtm         TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_todos_owner_date
    ON todos(user_seq, del_yn, todo_date);

CREATE INDEX IF NOT EXISTS idx_todos_owner_complete
    ON todos(user_seq, del_yn, complete_dtm);
"""


class Database:
    """Async SQLite database manager."""

    def __init__(self, db_path: str):
        self._db_path = db_path
        self._conn: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Open connection and run migrations."""
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(self._db_path)
        self._conn.row_factory = aiosqlite.Row
        await self._conn.execute("PRAGMA journal_mode=WAL")
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.commit()
        logger.info("database_initialized", path=self._db_path)

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._conn

    async def close(self) -> None:
        if self._conn:
            await self._conn.close()
            self._conn = None
            logger.info("database_closed")
