from __future__ import annotations

import pytest
from helpers import FIXED_NOW

from todo_assist.ai.gateway import TodoGateway
from todo_assist.ai.models import RequestContext
from todo_assist.ai.prompt import SystemPrompt
from todo_assist.ai.tools.registry import ToolRegistry
from todo_assist.storage.database import Database
from todo_assist.storage.models import Owner
from todo_assist.storage.todo_repo import TodoRepository


@pytest.fixture
async def db(tmp_path):
    database = Database(str(tmp_path / "todos.db"))
    await database.initialize()
    yield database
    await database.close()


@pytest.fixture
def repo(db) -> TodoRepository:
    return TodoRepository(db)


@pytest.fixture
def gateway(repo) -> TodoGateway:
    return TodoGateway(repo, timezone="Asia/Seoul", clock=lambda: FIXED_NOW)


@pytest.fixture
def registry(gateway) -> ToolRegistry:
    tools = ToolRegistry()
    tools.discover_and_register(gateway)
    return tools


@pytest.fixture
def system_prompt() -> SystemPrompt:
    return SystemPrompt("[ROLE] [사용자 이름]님의 할 일 비서입니다.")


@pytest.fixture
def owner() -> Owner:
    return Owner(user_seq=1, user_id="alice")


@pytest.fixture
def context() -> RequestContext:
    return RequestContext(user_seq=1, user_id="alice", user_name="앨리스", client_ip="10.0.0.1")
