"""Exceptions raised by the assistant pipeline."""

from __future__ import annotations

from typing import Any, Optional


class AssistantError(Exception):
    """Base class for assistant failures. ``status_code`` mirrors the HTTP status when known."""

    status_code: Optional[int] = None


class LLMAPIError(AssistantError):
    """The LLM endpoint answered with an HTTP error status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        retry_after: Optional[float] = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after  # seconds
        self.body = body

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429


class LLMConnectionError(AssistantError):
    """The LLM endpoint could not be reached (refused, timed out, reset)."""


class InvalidResponseError(AssistantError):
    """The LLM answered 2xx but the body is not the shape the protocol expects."""


class AuthenticationRequiredError(AssistantError):
    """The request carries no user identity."""

    status_code = 401
