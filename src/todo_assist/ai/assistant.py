"""Chat entry point: retries the orchestrator and always answers with a ChatResponse."""

from __future__ import annotations

import asyncio
import random
from datetime import datetime, timezone
from typing import Awaitable, Callable

from pydantic import ValidationError

from todo_assist.ai.errors import AuthenticationRequiredError
from todo_assist.ai.models import ChatRequest, ChatResponse, RequestContext
from todo_assist.ai.orchestrator import ConversationOrchestrator
from todo_assist.ai.retry import RetryPolicy, error_message
from todo_assist.log import bind_request_context, get_logger

logger = get_logger(__name__)

MSG_EMPTY_PROMPT = "메시지를 입력해주세요."


class AssistantService:
    """Handles the full flow: prompt -> orchestrator (with retries) -> ChatResponse."""

    def __init__(
        self,
        orchestrator: ConversationOrchestrator,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ):
        self._orchestrator = orchestrator
        self._policy = policy or RetryPolicy()
        self._sleep = sleep
        self._rng = rng

    async def chat(self, request: ChatRequest | str, context: RequestContext) -> ChatResponse:
        bind_request_context(user_seq=context.user_seq, client_ip=context.client_ip)

        if isinstance(request, str):
            try:
                request = ChatRequest(prompt=request)
            except ValidationError:
                return _failure(MSG_EMPTY_PROMPT)

        max_retries = self._policy.max_retries
        for attempt in range(1, max_retries + 1):
            try:
                if attempt > 1:
                    logger.info("chat_retry", attempt=attempt, max_retries=max_retries)
                if context.user_seq is None:
                    raise AuthenticationRequiredError("no user identity on request")

                html = await self._orchestrator.run(request, context)
                return ChatResponse(response=html, timestamp=_now_iso(), success=True)

            except Exception as e:
                is_last_attempt = attempt == max_retries
                logger.error(
                    "chat_attempt_failed",
                    attempt=attempt,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                if self._policy.is_retryable(e) and not is_last_attempt:
                    delay_ms = self._policy.delay_ms(attempt, e, self._rng)
                    logger.info("chat_backoff", attempt=attempt, delay_ms=round(delay_ms))
                    await self._sleep(delay_ms / 1000)
                    continue
                return _failure(error_message(e))

        # max_retries >= 1, the loop always returns
        return _failure(error_message(RuntimeError("retries exhausted")))


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _failure(message: str) -> ChatResponse:
    return ChatResponse(response="", timestamp=_now_iso(), success=False, error=message)
