"""Fakes and response builders shared by the test modules."""

from __future__ import annotations

import copy
from datetime import date, datetime
from typing import Any

from todo_assist.ai.client import AIClient
from todo_assist.ai.errors import LLMAPIError

FIXED_NOW = datetime(2026, 10, 19, 9, 30, 0)
TODAY = date(2026, 10, 19)


class FakeAIClient(AIClient):
    """Replays scripted responses (dicts) or raises scripted exceptions, in order."""

    def __init__(self, *outcomes: Any):
        self._outcomes = list(outcomes)
        self.requests: list[dict[str, Any]] = []

    async def generate_content(self, payload: dict[str, Any]) -> dict[str, Any]:
        self.requests.append(copy.deepcopy(payload))
        if not self._outcomes:
            raise AssertionError("unexpected extra call to the LLM")
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def call_count(self) -> int:
        return len(self.requests)


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.calls)


def text_response(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def call_response(name: str, args: dict[str, Any] | None = None) -> dict[str, Any]:
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"functionCall": {"name": name, "args": args or {}}}]}}
        ]
    }


def api_error(status: int, message: str = "", retry_after: float | None = None) -> LLMAPIError:
    text = f"Gemini API request failed with status {status}"
    if message:
        text = f"{text}: {message}"
    return LLMAPIError(text, status, retry_after=retry_after)
