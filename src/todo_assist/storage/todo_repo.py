"""To-do repository: owner-scoped reads and audited writes."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Optional

from todo_assist.log import get_logger
from todo_assist.storage.database import Database
from todo_assist.storage.models import Owner, TodoRecord

logger = get_logger(__name__)

UPDATABLE_COLUMNS = frozenset({"todo_content", "complete_dtm", "todo_note"})


def _stamp(now: Optional[datetime]) -> str:
    """Audit timestamp as a naive local ISO string, matching complete_dtm."""
    return (now or datetime.now()).isoformat(timespec="seconds")


class TodoRepository:
    """CRUD over the todos table. Every query is scoped to one owner."""

    def __init__(self, db: Database):
        self._db = db

    async def find_for_owner_as_of(
        self, user_seq: int, todo_date: Optional[str] = None
    ) -> list[TodoRecord]:
        """List the owner's to-dos as they appear on ``todo_date``.

        With a date, a row is included when it is still open and dated on or
        before that day, when it is dated that day and done, or when it was
        completed during that day. Without a date every live row is returned.
        Open items come first, then most recently completed, then newest.
        """
        sql = "SELECT * FROM todos WHERE del_yn = 'N' AND user_seq = ?"
        params: list[Any] = [user_seq]

        if todo_date:
            start_of_day = f"{todo_date}T00:00:00"
            next_day = (date.fromisoformat(todo_date) + timedelta(days=1)).isoformat()
            sql += """
               AND (
                    (todo_date <= ? AND complete_dtm IS NULL)
                 OR (todo_date = ? AND complete_dtm IS NOT NULL)
                 OR (complete_dtm >= ? AND complete_dtm < ?)
               )"""
            params.extend([todo_date, todo_date, start_of_day, f"{next_day}T00:00:00"])

        sql += " ORDER BY complete_dtm IS NOT NULL, complete_dtm DESC, todo_seq DESC"

        cursor = await self._db.conn.execute(sql, params)
        rows = await cursor.fetchall()
        return [self._row_to_record(row) for row in rows]

    async def search(self, user_seq: int, keyword: str) -> list[TodoRecord]:
        """Case-insensitive substring search over the owner's to-do contents."""
        cursor = await self._db.conn.execute(
            """SELECT * FROM todos
               WHERE user_seq = ? AND del_yn = 'N'
                 AND LOWER(todo_content) LIKE LOWER(?)
               ORDER BY todo_date DESC, todo_seq DESC""",
            (user_seq, f"%{keyword}%"),
        )
        rows = await cursor.fetchall()
        return [self._row_to_record(row) for row in rows]

    async def get(self, user_seq: int, todo_seq: int) -> TodoRecord | None:
        cursor = await self._db.conn.execute(
            "SELECT * FROM todos WHERE todo_seq = ? AND user_seq = ? AND del_yn = 'N'",
            (todo_seq, user_seq),
        )
        row = await cursor.fetchone()
        return self._row_to_record(row) if row else None

    async def create(
        self,
        owner: Owner,
        ip: str,
        todo_content: str,
        todo_date: str,
        todo_note: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> TodoRecord:
        """Insert a to-do and return the stored row with its audit columns."""
        stamp = _stamp(now)
        cursor = await self._db.conn.execute(
            """INSERT INTO todos
               (user_seq, todo_content, todo_date, todo_note,
                reg_id, reg_ip, reg_dtm, upd_id, upd_ip, upd_dtm)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                owner.user_seq,
                todo_content,
                todo_date,
                todo_note,
                owner.user_id,
                ip,
                stamp,
                owner.user_id,
                ip,
                stamp,
            ),
        )
        await self._db.conn.commit()
        todo_seq = cursor.lastrowid
        logger.info("todo_created", user_seq=owner.user_seq, todo_seq=todo_seq)

        created = await self.get(owner.user_seq, todo_seq)  # type: ignore[arg-type]
        if created is None:
            raise RuntimeError(f"Inserted todo {todo_seq} could not be read back")
        return created

    async def update_by_id(
        self,
        todo_seq: int,
        owner: Owner,
        ip: str,
        changes: dict[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> TodoRecord | None:
        """Apply ``changes`` to an owned to-do.

        Returns None when the row does not exist, is deleted, or belongs to
        someone else.
        """
        unknown = set(changes) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update columns: {', '.join(sorted(unknown))}")

        existing = await self.get(owner.user_seq, todo_seq)
        if existing is None:
            return None

        assignments = [f"{column} = ?" for column in changes]
        assignments += ["upd_id = ?", "upd_ip = ?", "upd_dtm = ?"]
        params = [*changes.values(), owner.user_id, ip, _stamp(now), todo_seq, owner.user_seq]

        await self._db.conn.execute(
            f"UPDATE todos SET {', '.join(assignments)} WHERE todo_seq = ? AND user_seq = ?",
            params,
        )
        await self._db.conn.commit()
        logger.info(
            "todo_updated",
            user_seq=owner.user_seq,
            todo_seq=todo_seq,
            fields=sorted(changes),
        )
        return await self.get(owner.user_seq, todo_seq)

    async def delete(
        self, owner: Owner, ip: str, todo_seq: int, *, now: Optional[datetime] = None
    ) -> bool:
        """Soft-delete an owned to-do. Returns False when nothing matched."""
        cursor = await self._db.conn.execute(
            """UPDATE todos
               SET del_yn = 'Y', upd_id = ?, upd_ip = ?, upd_dtm = ?
               WHERE todo_seq = ? AND user_seq = ? AND del_yn = 'N'""",
            (owner.user_id, ip, _stamp(now), todo_seq, owner.user_seq),
        )
        await self._db.conn.commit()
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("todo_deleted", user_seq=owner.user_seq, todo_seq=todo_seq)
        return deleted

    @staticmethod
    def _row_to_record(row) -> TodoRecord:
        return TodoRecord(
            todo_seq=row["todo_seq"],
            user_seq=row["user_seq"],
            todo_content=row["todo_content"],
            todo_date=row["todo_date"],
            complete_dtm=row["complete_dtm"],
            todo_note=row["todo_note"],
            del_yn=row["del_yn"],
            reg_id=row["reg_id"],
            reg_ip=row["reg_ip"],
            reg_dtm=row["reg_dtm"],
            upd_id=row["upd_id"],
            upd_ip=row["upd_ip"],
            upd_dtm=row["upd_dtm"],
        )
