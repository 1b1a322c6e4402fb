"""Adapter between tool calls and the to-do repository.

Every method returns a JSON-serialisable dict that is sent back to the model
as the function response. Validation problems, missing rows and storage
failures are reported inside that dict instead of being raised, so the model
always receives a well-formed tool result.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo

from todo_assist.log import get_logger
from todo_assist.storage.models import Owner, TodoRecord
from todo_assist.storage.todo_repo import TodoRepository

logger = get_logger(__name__)

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

STATUS_COMPLETED = "completed"
STATUS_INCOMPLETE = "incomplete"
STATUS_OVERDUE = "overdue"

REFRESH_WINDOW_DAYS = 7

_UNSET: Any = object()


class TodoGateway:
    """Executes validated tool invocations against the owner's to-do list."""

    def __init__(
        self,
        repo: TodoRepository,
        timezone: str = "Asia/Seoul",
        clock: Callable[[], datetime] | None = None,
    ):
        self._repo = repo
        self._tz = ZoneInfo(timezone)
        self._clock = clock or (lambda: datetime.now(self._tz))

    def now(self) -> datetime:
        """Current wall-clock time in the configured zone, without tzinfo."""
        current = self._clock()
        if current.tzinfo is not None:
            current = current.astimezone(self._tz).replace(tzinfo=None)
        return current

    def today(self) -> date:
        return self.now().date()

    # -- getTodos -----------------------------------------------------------

    async def list_todos(
        self,
        user_seq: int,
        status: Optional[str] = None,
        days: Optional[int] = None,
    ) -> dict[str, Any]:
        logger.info("list_todos_started", user_seq=user_seq, status=status, days=days)
        try:
            today = self.today()
            target_date = (today + timedelta(days=int(days))) if days is not None else today
            todos = await self._repo.find_for_owner_as_of(user_seq, target_date.isoformat())

            if status:
                todos = [t for t in todos if _matches_status(t, status, today)]

            result = {
                "totalCount": len(todos),
                "todos": [_summarize(t, today) for t in todos],
                "queryParams": {
                    "status": status,
                    "days": days,
                    "targetDate": target_date.isoformat(),
                },
            }
            logger.info(
                "list_todos_finished",
                user_seq=user_seq,
                total_count=result["totalCount"],
                target_date=target_date.isoformat(),
            )
            return result
        except Exception:
            logger.exception("list_todos_failed", user_seq=user_seq)
            return {
                "success": False,
                "error": "할 일 데이터를 가져오는데 실패했습니다",
                "totalCount": 0,
                "todos": [],
            }

    # -- createTodo ---------------------------------------------------------

    async def create_todo(
        self,
        user_seq: int,
        user_id: str,
        client_ip: str,
        content: Optional[str],
        todo_date: Optional[str],
        note: Optional[str] = None,
    ) -> dict[str, Any]:
        logger.info("create_todo_started", user_seq=user_seq, todo_date=todo_date)

        if not isinstance(content, str) or not content.strip():
            return {"success": False, "error": "할 일 내용(todoContent)이 필요합니다."}
        if not is_valid_date(todo_date):
            logger.warning("create_todo_bad_date", todo_date=todo_date)
            return {
                "success": False,
                "error": "잘못된 날짜 형식입니다. YYYY-MM-DD 형식을 사용해주세요 (예: 2024-12-31)",
            }

        try:
            created = await self._repo.create(
                Owner(user_seq=user_seq, user_id=user_id),
                client_ip,
                content,
                todo_date,  # type: ignore[arg-type]
                note,
                now=self.now(),
            )
            refreshed = await self.list_todos(user_seq, None, REFRESH_WINDOW_DAYS)
        except Exception:
            logger.exception("create_todo_failed", user_seq=user_seq)
            return {
                "success": False,
                "error": "TODO 항목 생성에 실패했습니다. 다시 시도해주세요.",
            }

        return {
            "success": True,
            "data": {
                "todoSeq": created.todo_seq,
                "todoContent": created.todo_content,
                "todoDate": created.todo_date,
                "todoNote": created.todo_note,
                "completeDtm": created.complete_dtm,
                "createdAt": created.reg_dtm,
            },
            "refreshedList": refreshed,
        }

    # -- updateTodo ---------------------------------------------------------

    async def update_todo(
        self,
        user_seq: int,
        user_id: str,
        client_ip: str,
        todo_seq: Optional[int] = None,
        content_to_find: Optional[str] = None,
        *,
        content: Any = _UNSET,
        is_completed: Any = _UNSET,
        note: Any = _UNSET,
    ) -> dict[str, Any]:
        """Partially update one to-do. Only the keyword fields actually passed are written.

        Completion time and the audit stamp come from the same clock reading.
        """
        logger.info(
            "update_todo_started",
            user_seq=user_seq,
            todo_seq=todo_seq,
            content_to_find=content_to_find,
        )
        try:
            target_seq = todo_seq
            if not target_seq and content_to_find:
                found = await self.find_todo_by_content(user_seq, content_to_find)
                if not found["success"]:
                    return found
                target_seq = found["todoSeq"]

            if not target_seq:
                return {"success": False, "error": "todoSeq 또는 todoContentToFind가 필요합니다."}

            now = self.now()
            changes: dict[str, Any] = {}
            if content is not _UNSET:
                changes["todo_content"] = content
            if is_completed is not _UNSET:
                changes["complete_dtm"] = _timestamp(now) if is_completed else None
            if note is not _UNSET:
                changes["todo_note"] = note

            updated = await self._repo.update_by_id(
                int(target_seq),
                Owner(user_seq=user_seq, user_id=user_id),
                client_ip,
                changes,
                now=now,
            )
            if updated is None:
                logger.warning("update_todo_not_found", user_seq=user_seq, todo_seq=target_seq)
                return {
                    "success": False,
                    "error": "TODO 항목을 찾을 수 없거나 접근이 거부되었습니다",
                }

            refreshed = await self.list_todos(user_seq, None, REFRESH_WINDOW_DAYS)
        except Exception:
            logger.exception("update_todo_failed", user_seq=user_seq)
            return {
                "success": False,
                "error": "TODO 항목 업데이트에 실패했습니다. 다시 시도해주세요.",
            }

        return {
            "success": True,
            "data": {
                "todoSeq": updated.todo_seq,
                "todoContent": updated.todo_content,
                "todoDate": updated.todo_date,
                "todoNote": updated.todo_note,
                "completeDtm": updated.complete_dtm,
                "updatedAt": updated.upd_dtm,
            },
            "refreshedList": refreshed,
        }

    async def find_todo_by_content(self, user_seq: int, content_to_find: str) -> dict[str, Any]:
        """Resolve a search phrase to exactly one to-do, preferring open items on ties."""
        try:
            matches = await self._repo.search(user_seq, content_to_find)
        except Exception:
            logger.exception("find_todo_by_content_failed", user_seq=user_seq)
            return {"success": False, "error": "할 일 검색에 실패했습니다."}

        if not matches:
            return {"success": False, "error": "일치하는 할 일을 찾을 수 없습니다."}
        if len(matches) == 1:
            return {"success": True, "todoSeq": matches[0].todo_seq}

        open_matches = [t for t in matches if not t.is_completed]
        if len(open_matches) == 1:
            return {"success": True, "todoSeq": open_matches[0].todo_seq}

        return {
            "success": False,
            "matches": len(matches),
            "error": (
                f'"{content_to_find}"와 일치하는 할 일이 {len(matches)}개 있습니다. '
                f"(미완료: {len(open_matches)}개). 더 구체적으로 지정해주세요."
            ),
        }

    async def delete_todo(
        self, user_seq: int, user_id: str, client_ip: str, todo_seq: int
    ) -> dict[str, Any]:
        logger.info("delete_todo_started", user_seq=user_seq, todo_seq=todo_seq)
        try:
            deleted = await self._repo.delete(
                Owner(user_seq=user_seq, user_id=user_id), client_ip, todo_seq, now=self.now()
            )
        except Exception:
            logger.exception("delete_todo_failed", user_seq=user_seq)
            return {"success": False, "error": "TODO 항목 삭제에 실패했습니다. 다시 시도해주세요."}

        if not deleted:
            return {
                "success": False,
                "error": "TODO 항목을 찾을 수 없거나 접근이 거부되었습니다",
            }
        return {"success": True, "todoSeq": todo_seq}


def _timestamp(moment: datetime) -> str:
    return moment.isoformat(timespec="seconds")


def is_valid_date(value: Any) -> bool:
    """YYYY-MM-DD that also names a real calendar day."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _is_overdue(todo: TodoRecord, today: date) -> bool:
    if todo.is_completed or not todo.todo_date:
        return False
    try:
        return date.fromisoformat(todo.todo_date[:10]) < today
    except ValueError:
        return False


def _matches_status(todo: TodoRecord, status: str, today: date) -> bool:
    if status == STATUS_COMPLETED:
        return todo.is_completed
    if status == STATUS_INCOMPLETE:
        # overdue items are still incomplete
        return not todo.is_completed
    if status == STATUS_OVERDUE:
        return _is_overdue(todo, today)
    return True


def _summarize(todo: TodoRecord, today: date) -> dict[str, Any]:
    return {
        "todoSeq": todo.todo_seq,
        "todoContent": todo.todo_content or "",
        "todoDate": todo.todo_date,
        "todoNote": todo.todo_note,
        "completeDtm": todo.complete_dtm,
        "isCompleted": todo.is_completed,
        "isOverdue": _is_overdue(todo, today),
    }
