"""Backoff policy and user-facing messages for failed chat attempts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from todo_assist.ai.errors import LLMAPIError, LLMConnectionError

MSG_LOGIN_REQUIRED = "로그인이 필요합니다."
MSG_OVERLOADED = "AI 서비스가 현재 과부하 상태입니다. 잠시 후 다시 시도해주세요."
MSG_QUOTA_EXCEEDED = "AI 서비스 사용량이 한도를 초과했습니다."
MSG_SERVER_ERROR = "AI 서비스에 일시적인 문제가 발생했습니다."
MSG_NETWORK = "네트워크 연결을 확인해주세요."
MSG_API_FAILED = "AI 어시스턴트 요청이 실패했습니다. 잠시 후 다시 시도해주세요."
MSG_GENERIC = "문제가 발생했습니다. 다시 시도해주세요."


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 30000
    jitter_ms: int = 1000

    def is_retryable(self, error: BaseException) -> bool:
        """Only rate-limit responses are retried."""
        return status_of(error) == 429

    def delay_ms(self, attempt: int, error: BaseException, rng: Callable[[], float]) -> float:
        """Delay before the attempt after ``attempt`` (1-based).

        A server hint wins; otherwise exponential backoff plus jitter. Both
        are capped at ``max_delay_ms``.
        """
        retry_after = getattr(error, "retry_after", None)
        if retry_after is not None:
            return min(float(retry_after) * 1000, self.max_delay_ms)
        exponential = self.base_delay_ms * 2 ** (attempt - 1)
        return min(exponential + rng() * self.jitter_ms, self.max_delay_ms)


def status_of(error: BaseException) -> Optional[int]:
    return getattr(error, "status_code", None)


def error_message(error: BaseException) -> str:
    """Korean message shown to the user for the final failure.

    A 429 only reaches here once the retry budget is spent.
    """
    status = status_of(error)
    text = str(error)

    if status == 401:
        return MSG_LOGIN_REQUIRED
    if status == 429:
        return MSG_OVERLOADED
    if status == 403 and "quota" in text.lower():
        return MSG_QUOTA_EXCEEDED
    if status is not None and status >= 500:
        return MSG_SERVER_ERROR
    if isinstance(error, LLMConnectionError):
        return MSG_NETWORK
    if isinstance(error, LLMAPIError):
        return MSG_API_FAILED
    return MSG_GENERIC
