"""To-do tools: getTodos, createTodo and updateTodo."""

from __future__ import annotations

from typing import Any

from todo_assist.ai.gateway import TodoGateway
from todo_assist.ai.models import RequestContext
from todo_assist.ai.tools.base import Tool

_WRITE_CONTEXT = ("user_seq", "user_id", "client_ip")


class GetTodosTool(Tool):
    def __init__(self, gateway: TodoGateway):
        self._gateway = gateway

    @property
    def name(self) -> str:
        return "getTodos"

    @property
    def description(self) -> str:
        return "사용자의 할 일 목록을 DB에서 조회합니다."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "OBJECT",
            "properties": {
                "status": {
                    "type": "STRING",
                    "description": (
                        "조회할 할 일의 상태. 'completed' (완료), 'incomplete' (미완료), "
                        "'overdue' (지연). 지정하지 않으면 모든 상태."
                    ),
                },
                "days": {
                    "type": "NUMBER",
                    "description": (
                        "오늘을 기준으로 조회할 날짜까지의 일수. (예: 1은 내일, -1은 어제). "
                        "지정하지 않으면 오늘."
                    ),
                },
            },
        }

    async def execute(self, context: RequestContext, args: dict[str, Any]) -> dict[str, Any]:
        return await self._gateway.list_todos(
            context.user_seq,  # type: ignore[arg-type]
            status=args.get("status"),
            days=args.get("days"),
        )


class CreateTodoTool(Tool):
    required_context = _WRITE_CONTEXT

    def __init__(self, gateway: TodoGateway):
        self._gateway = gateway

    @property
    def name(self) -> str:
        return "createTodo"

    @property
    def description(self) -> str:
        return "사용자의 새로운 할 일을 생성합니다. 할 일 내용과 날짜는 필수입니다."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "OBJECT",
            "properties": {
                "todoContent": {
                    "type": "STRING",
                    "description": "할 일의 내용 (필수). 사용자가 수행해야 할 작업을 명확하게 설명합니다.",
                },
                "todoDate": {
                    "type": "STRING",
                    "description": (
                        "할 일의 목표 날짜 (필수). YYYY-MM-DD 형식. "
                        "사용자가 날짜를 명시하지 않으면 오늘 날짜를 사용합니다."
                    ),
                },
                "todoNote": {
                    "type": "STRING",
                    "description": "할 일에 대한 추가 메모나 설명 (선택 사항).",
                },
            },
            "required": ["todoContent", "todoDate"],
        }

    async def execute(self, context: RequestContext, args: dict[str, Any]) -> dict[str, Any]:
        return await self._gateway.create_todo(
            context.user_seq,  # type: ignore[arg-type]
            context.user_id,  # type: ignore[arg-type]
            context.client_ip,  # type: ignore[arg-type]
            args.get("todoContent"),
            args.get("todoDate"),
            args.get("todoNote"),
        )


class UpdateTodoTool(Tool):
    required_context = _WRITE_CONTEXT

    def __init__(self, gateway: TodoGateway):
        self._gateway = gateway

    @property
    def name(self) -> str:
        return "updateTodo"

    @property
    def description(self) -> str:
        return "기존 할 일을 수정합니다. todoSeq 또는 todoContentToFind로 식별할 수 있습니다."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "OBJECT",
            "properties": {
                "todoSeq": {
                    "type": "NUMBER",
                    "description": "수정할 할 일의 고유 ID (선택 사항 - todoContentToFind가 제공되지 않은 경우 필수).",
                },
                "todoContentToFind": {
                    "type": "STRING",
                    "description": "수정할 할 일을 찾기 위한 내용 검색어 (선택 사항 - todoSeq가 제공되지 않은 경우 필수).",
                },
                "todoContent": {
                    "type": "STRING",
                    "description": "수정할 할 일의 새로운 내용 (선택 사항).",
                },
                "isCompleted": {
                    "type": "BOOLEAN",
                    "description": (
                        "완료 상태 (선택 사항). true로 설정하면 작업을 완료로 표시하고, "
                        "false로 설정하면 미완료로 표시합니다."
                    ),
                },
                "todoNote": {
                    "type": "STRING",
                    "description": "수정할 메모 내용 (선택 사항).",
                },
            },
        }

    async def execute(self, context: RequestContext, args: dict[str, Any]) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        if args.get("todoContent") is not None:
            fields["content"] = args["todoContent"]
        if args.get("isCompleted") is not None:
            fields["is_completed"] = bool(args["isCompleted"])
        if args.get("todoNote") is not None:
            fields["note"] = args["todoNote"]

        return await self._gateway.update_todo(
            context.user_seq,  # type: ignore[arg-type]
            context.user_id,  # type: ignore[arg-type]
            context.client_ip,  # type: ignore[arg-type]
            args.get("todoSeq"),
            args.get("todoContentToFind"),
            **fields,
        )
