"""LLM client abstraction with a Gemini generateContent backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from todo_assist.ai.errors import InvalidResponseError, LLMAPIError, LLMConnectionError
from todo_assist.config import GeminiConfig
from todo_assist.log import get_logger

logger = get_logger(__name__)


class AIClient(ABC):
    """Abstract base class for LLM backends."""

    @abstractmethod
    async def generate_content(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send one request body and return the decoded response body.

        Raises LLMAPIError for HTTP error statuses, LLMConnectionError when the
        endpoint cannot be reached and InvalidResponseError for bodies that are
        not JSON objects.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources held by the backend."""


class GeminiClient(AIClient):
    """Gemini REST backend using httpx."""

    def __init__(self, config: GeminiConfig, transport: httpx.AsyncBaseTransport | None = None):
        self._model = config.model
        self._client = httpx.AsyncClient(
            base_url=config.base_url.rstrip("/"),
            timeout=httpx.Timeout(config.timeout, connect=10.0),
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": config.api_key,
            },
            transport=transport,
        )

    @property
    def model(self) -> str:
        return self._model

    async def generate_content(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"/models/{self._model}:generateContent"
        logger.debug(
            "gemini_request",
            model=self._model,
            content_count=len(payload.get("contents", [])),
        )

        try:
            response = await self._client.post(url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._to_api_error(e.response) from e
        except httpx.TransportError as e:
            logger.error("gemini_unreachable", model=self._model, error=repr(e))
            raise LLMConnectionError(f"network error talking to Gemini: {e!r}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidResponseError("Gemini returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise InvalidResponseError(f"Gemini returned {type(data).__name__}, expected an object")

        logger.debug(
            "gemini_response",
            model=self._model,
            candidate_count=len(data.get("candidates") or []),
        )
        return data

    async def aclose(self) -> None:
        await self._client.aclose()

    @classmethod
    def _to_api_error(cls, response: httpx.Response) -> LLMAPIError:
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        message = f"Gemini API request failed with status {response.status_code}"
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            detail = body["error"].get("message")
            if detail:
                message = f"{message}: {detail}"

        retry_after = _parse_retry_after(response.headers.get("retry-after"))
        if retry_after is None:
            retry_after = _retry_delay_from_body(body)

        logger.warning(
            "gemini_api_error",
            status=response.status_code,
            retry_after=retry_after,
            message=message,
        )
        return LLMAPIError(message, response.status_code, retry_after=retry_after, body=body)


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Seconds from a Retry-After header. HTTP-date values are ignored."""
    if not value:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def _retry_delay_from_body(body: Any) -> Optional[float]:
    """Seconds from a google.rpc.RetryInfo detail such as ``{"retryDelay": "12s"}``."""
    if not isinstance(body, dict) or not isinstance(body.get("error"), dict):
        return None
    for detail in body["error"].get("details") or []:
        if not isinstance(detail, dict):
            continue
        delay = detail.get("retryDelay")
        if isinstance(delay, str) and delay.endswith("s"):
            return _parse_retry_after(delay[:-1])
    return None
