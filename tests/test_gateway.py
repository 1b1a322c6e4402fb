"""Tests for TodoGateway: filtering, validation and partial updates."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from helpers import FIXED_NOW, TODAY

from todo_assist.ai.gateway import TodoGateway, is_valid_date
from todo_assist.storage.models import Owner


async def _seed(repo, owner, content, todo_date, completed_at=None):
    todo = await repo.create(owner, "127.0.0.1", content, todo_date)
    if completed_at:
        todo = await repo.update_by_id(todo.todo_seq, owner, "127.0.0.1", {"complete_dtm": completed_at})
    return todo


async def _seed_day(repo, owner):
    await _seed(repo, owner, "밀린 보고서", "2026-10-10")
    await _seed(repo, owner, "장보기", "2026-10-19")
    await _seed(repo, owner, "운동", "2026-10-19", "2026-10-19T07:00:00")


class TestListTodos:
    async def test_overdue_only_returns_incomplete_items_before_today(self, repo, owner, gateway):
        await _seed_day(repo, owner)

        result = await gateway.list_todos(1, status="overdue")

        assert result["totalCount"] == 1
        for todo in result["todos"]:
            assert todo["isCompleted"] is False
            assert todo["todoDate"] < TODAY.isoformat()
            assert todo["isOverdue"] is True

    async def test_incomplete_includes_overdue(self, repo, owner, gateway):
        await _seed_day(repo, owner)

        result = await gateway.list_todos(1, status="incomplete")

        assert [t["todoContent"] for t in result["todos"]] == ["장보기", "밀린 보고서"]

    async def test_completed(self, repo, owner, gateway):
        await _seed_day(repo, owner)

        result = await gateway.list_todos(1, status="completed")

        assert [t["todoContent"] for t in result["todos"]] == ["운동"]
        assert result["todos"][0]["isCompleted"] is True
        assert result["todos"][0]["isOverdue"] is False

    async def test_no_status_or_unknown_status_does_not_filter(self, repo, owner, gateway):
        await _seed_day(repo, owner)

        assert (await gateway.list_todos(1))["totalCount"] == 3
        assert (await gateway.list_todos(1, status="someday"))["totalCount"] == 3

    async def test_query_params_and_target_date(self, repo, owner, gateway):
        await _seed(repo, owner, "내일 회의", "2026-10-20")

        today_view = await gateway.list_todos(1)
        tomorrow_view = await gateway.list_todos(1, days=1)

        assert today_view["totalCount"] == 0
        assert today_view["queryParams"] == {"status": None, "days": None, "targetDate": "2026-10-19"}
        assert tomorrow_view["totalCount"] == 1
        assert tomorrow_view["queryParams"]["targetDate"] == "2026-10-20"

    async def test_repeated_calls_are_identical(self, repo, owner, gateway):
        await _seed_day(repo, owner)
        await _seed(repo, owner, "빨래", "2026-10-19")

        first = await gateway.list_todos(1, status="incomplete")
        second = await gateway.list_todos(1, status="incomplete")

        assert first["totalCount"] == second["totalCount"]
        assert [t["todoSeq"] for t in first["todos"]] == [t["todoSeq"] for t in second["todos"]]

    async def test_storage_failure_returns_well_formed_result(self):
        class BrokenRepo:
            async def find_for_owner_as_of(self, user_seq, todo_date):
                raise RuntimeError("database is locked")

        gateway = TodoGateway(BrokenRepo(), clock=lambda: FIXED_NOW)

        result = await gateway.list_todos(1)

        assert result["success"] is False
        assert result["error"]
        assert result["totalCount"] == 0
        assert result["todos"] == []


class TestCreateTodo:
    async def test_creates_and_returns_refreshed_list(self, repo, gateway):
        result = await gateway.create_todo(1, "alice", "10.0.0.1", "장보기", "2026-10-19", "우유")

        assert result["success"] is True
        assert result["data"]["todoContent"] == "장보기"
        assert result["data"]["todoDate"] == "2026-10-19"
        assert result["data"]["todoNote"] == "우유"
        assert result["data"]["completeDtm"] is None
        assert result["data"]["createdAt"]
        assert result["refreshedList"]["queryParams"]["targetDate"] == "2026-10-26"

        stored = await repo.get(1, result["data"]["todoSeq"])
        assert stored.reg_ip == "10.0.0.1"
        assert stored.reg_id == "alice"

    async def test_impossible_month_is_rejected_without_storage(self, repo, gateway):
        result = await gateway.create_todo(1, "alice", "10.0.0.1", "장보기", "2024-13-01")

        assert result["success"] is False
        assert "YYYY-MM-DD" in result["error"]
        assert await repo.find_for_owner_as_of(1, None) == []

    async def test_wrong_shape_is_rejected(self, repo, gateway):
        for bad in ["2024/12/01", "20241201", "tomorrow", None, "2024-1-1"]:
            result = await gateway.create_todo(1, "alice", "ip", "장보기", bad)
            assert result["success"] is False

        assert await repo.find_for_owner_as_of(1, None) == []

    async def test_missing_content_is_rejected(self, repo, gateway):
        result = await gateway.create_todo(1, "alice", "ip", "  ", "2026-10-19")

        assert result["success"] is False
        assert await repo.find_for_owner_as_of(1, None) == []


class TestUpdateTodo:
    async def test_partial_update_by_id(self, repo, owner, gateway):
        todo = await _seed(repo, owner, "장보기", "2026-10-19")

        result = await gateway.update_todo(1, "alice", "10.0.0.2", todo.todo_seq, note="마트 가기")

        assert result["success"] is True
        assert result["data"]["todoNote"] == "마트 가기"
        assert result["data"]["todoContent"] == "장보기"
        assert result["data"]["updatedAt"]
        assert "refreshedList" in result

    async def test_completion_uses_clock(self, repo, owner, gateway):
        todo = await _seed(repo, owner, "장보기", "2026-10-19")

        done = await gateway.update_todo(1, "alice", "ip", todo.todo_seq, is_completed=True)
        reopened = await gateway.update_todo(1, "alice", "ip", todo.todo_seq, is_completed=False)

        assert done["data"]["completeDtm"] == "2026-10-19T09:30:00"
        assert reopened["data"]["completeDtm"] is None

    async def test_audit_stamps_share_the_local_clock(self, repo):
        seoul = ZoneInfo("Asia/Seoul")
        gateway = TodoGateway(repo, timezone="Asia/Seoul", clock=lambda: datetime.now(seoul))
        created = await gateway.create_todo(1, "alice", "ip", "장보기", "2026-10-19")

        result = await gateway.update_todo(
            1, "alice", "ip", created["data"]["todoSeq"], is_completed=True
        )

        data = result["data"]
        assert data["updatedAt"] == data["completeDtm"]
        created_at = datetime.fromisoformat(created["data"]["createdAt"])
        assert abs(datetime.fromisoformat(data["updatedAt"]) - created_at) < timedelta(minutes=1)
        local_now = datetime.now(seoul).replace(tzinfo=None)
        assert abs(local_now - created_at) < timedelta(minutes=1)

    async def test_other_owner_is_not_found_or_denied(self, repo, gateway):
        todo = await _seed(repo, Owner(user_seq=2, user_id="bob"), "bob's", "2026-10-19")

        result = await gateway.update_todo(1, "alice", "ip", todo.todo_seq, content="mine now")

        assert result == {
            "success": False,
            "error": "TODO 항목을 찾을 수 없거나 접근이 거부되었습니다",
        }
        assert (await repo.get(2, todo.todo_seq)).todo_content == "bob's"

    async def test_requires_id_or_search_term(self, gateway):
        result = await gateway.update_todo(1, "alice", "ip", content="x")

        assert result["success"] is False

    async def test_resolves_single_match_by_content(self, repo, owner, gateway):
        todo = await _seed(repo, owner, "치과 예약", "2026-10-21")

        result = await gateway.update_todo(1, "alice", "ip", content_to_find="치과", note="오후 3시")

        assert result["success"] is True
        assert result["data"]["todoSeq"] == todo.todo_seq

    async def test_prefers_the_single_open_match(self, repo, owner, gateway):
        await _seed(repo, owner, "보고서 초안", "2026-10-10", "2026-10-11T09:00:00")
        open_one = await _seed(repo, owner, "보고서 최종", "2026-10-19")

        result = await gateway.find_todo_by_content(1, "보고서")

        assert result == {"success": True, "todoSeq": open_one.todo_seq}

    async def test_ambiguous_match_asks_for_detail(self, repo, owner, gateway):
        await _seed(repo, owner, "보고서 초안", "2026-10-18")
        await _seed(repo, owner, "보고서 최종", "2026-10-19")

        result = await gateway.update_todo(1, "alice", "ip", content_to_find="보고서", note="x")

        assert result["success"] is False
        assert result["matches"] == 2

    async def test_no_match(self, gateway):
        result = await gateway.find_todo_by_content(1, "없는 일")

        assert result["success"] is False


class TestDeleteTodo:
    async def test_soft_deletes_and_stamps(self, repo, owner, gateway, db):
        todo = await _seed(repo, owner, "장보기", "2026-10-19")

        result = await gateway.delete_todo(1, "alice", "10.0.0.3", todo.todo_seq)

        assert result == {"success": True, "todoSeq": todo.todo_seq}
        assert await repo.get(1, todo.todo_seq) is None
        cursor = await db.conn.execute(
            "SELECT del_yn, upd_ip, upd_dtm FROM todos WHERE todo_seq = ?", (todo.todo_seq,)
        )
        row = await cursor.fetchone()
        assert (row["del_yn"], row["upd_ip"], row["upd_dtm"]) == ("Y", "10.0.0.3", "2026-10-19T09:30:00")

    async def test_other_owner_is_denied(self, repo, gateway):
        todo = await _seed(repo, Owner(user_seq=2, user_id="bob"), "bob's", "2026-10-19")

        result = await gateway.delete_todo(1, "alice", "ip", todo.todo_seq)

        assert result["success"] is False
        assert await repo.get(2, todo.todo_seq) is not None


def test_is_valid_date():
    assert is_valid_date("2026-02-28")
    assert not is_valid_date("2026-02-30")
    assert not is_valid_date("2024-13-01")
    assert not is_valid_date(20261019)
