"""Two-round Gemini exchange with at most one local function call."""

from __future__ import annotations

import json
from datetime import date
from typing import Any, Callable, Optional

from todo_assist.ai.client import AIClient
from todo_assist.ai.conversation import (
    ConversationPayload,
    FunctionCall,
    Turn,
    first_part,
    function_call_of,
)
from todo_assist.ai.errors import InvalidResponseError
from todo_assist.ai.models import ChatRequest, RequestContext
from todo_assist.ai.prompt import SystemPrompt
from todo_assist.ai.sanitizer import render_safe_html
from todo_assist.ai.tools.registry import ToolRegistry
from todo_assist.log import get_logger

logger = get_logger(__name__)


class ConversationOrchestrator:
    """Runs one request through the fixed protocol.

    1. send system prompt, prompt and tool declarations
    2. if the first part is a function call, execute it, append the call and
       its result, and send again
    3. sanitize the text of the final first part

    A second function call in the follow-up answer is never executed.
    Transport errors from the client propagate unchanged.
    """

    def __init__(
        self,
        ai_client: AIClient,
        tool_registry: ToolRegistry,
        system_prompt: SystemPrompt,
        today: Callable[[], date],
    ):
        self._client = ai_client
        self._tools = tool_registry
        self._system_prompt = system_prompt
        self._today = today

    async def run(self, request: ChatRequest, context: RequestContext) -> str:
        payload = ConversationPayload.build(
            self._system_prompt.render(context.user_name, self._today()),
            request.prompt,
            request.history,
        )
        declarations = self._tools.declarations()

        logger.info("gemini_first_call", tool_count=len(declarations), prompt=request.prompt[:100])
        response = await self._client.generate_content(payload.to_request(declarations))
        part = first_part(response)

        call = function_call_of(part)
        if call is not None:
            result = await self._invoke(call, context)
            if result is None:
                logger.warning("function_call_skipped", function=call.name)
            else:
                payload.append(Turn.model_function_call(part))
                payload.append(Turn.function_result(call.name, result))
                logger.info(
                    "gemini_second_call",
                    function=call.name,
                    content_count=len(payload.turns),
                )
                response = await self._client.generate_content(payload.to_request(declarations))
                part = first_part(response)

        return self._finish(part)

    async def _invoke(self, call: FunctionCall, context: RequestContext) -> Optional[dict[str, Any]]:
        """Execute the requested tool. None means it was not run."""
        logger.info("function_call_requested", function=call.name, args=json.dumps(call.args, ensure_ascii=False))

        tool = self._tools.get(call.name)
        if tool is None:
            logger.warning("unknown_function_call", function=call.name)
            return None

        missing = tool.missing_context(context)
        if missing:
            logger.warning("function_call_missing_context", function=call.name, missing=missing)
            return None

        try:
            result = await tool.execute(context, call.args)
        except Exception as e:
            logger.error("tool_execution_error", function=call.name, error=str(e))
            result = {"success": False, "error": f"{call.name} 실행 중 오류가 발생했습니다."}

        logger.info(
            "function_call_result",
            function=call.name,
            result=json.dumps(result, ensure_ascii=False, default=str)[:500],
        )
        return result

    @staticmethod
    def _finish(part: dict[str, Any]) -> str:
        text = part.get("text")
        has_call = function_call_of(part) is not None

        if not text and not has_call:
            logger.error("final_part_without_text", part=json.dumps(part, ensure_ascii=False)[:500])
            raise InvalidResponseError("AI Assistant returned invalid response format")
        if has_call and not text:
            # skipped or chained call: nothing to show
            logger.warning("final_part_is_function_call")

        return render_safe_html(text or "")
