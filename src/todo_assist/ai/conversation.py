"""Conversation payload in the Gemini generateContent request format."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from todo_assist.ai.errors import InvalidResponseError
from todo_assist.ai.models import HistoryTurn

ROLE_USER = "user"
ROLE_MODEL = "model"
ROLE_FUNCTION = "function"


@dataclass(frozen=True)
class Turn:
    role: str
    parts: tuple[dict[str, Any], ...]

    @classmethod
    def user_text(cls, text: str) -> Turn:
        return cls(ROLE_USER, ({"text": text},))

    @classmethod
    def model_function_call(cls, part: dict[str, Any]) -> Turn:
        """The model part that requested the call, echoed back unchanged."""
        return cls(ROLE_MODEL, (part,))

    @classmethod
    def function_result(cls, name: str, content: Any) -> Turn:
        return cls(
            ROLE_FUNCTION,
            ({"function_response": {"name": name, "response": {"content": content}}},),
        )

    def to_content(self) -> dict[str, Any]:
        return {"role": self.role, "parts": list(self.parts)}


@dataclass
class ConversationPayload:
    """One request's conversation. Turns are only ever appended."""

    system_instruction: str
    turns: list[Turn] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        system_instruction: str,
        prompt: str,
        history: Optional[list[HistoryTurn]] = None,
    ) -> ConversationPayload:
        payload = cls(system_instruction)
        for past in history or []:
            payload.append(Turn(past.role, tuple({"text": p.text} for p in past.parts)))
        payload.append(Turn.user_text(prompt))
        return payload

    def append(self, turn: Turn) -> None:
        self.turns.append(turn)

    def to_request(self, declarations: list[dict[str, Any]]) -> dict[str, Any]:
        body: dict[str, Any] = {
            "system_instruction": {"parts": [{"text": self.system_instruction}]},
            "contents": [turn.to_content() for turn in self.turns],
        }
        if declarations:
            body["tools"] = [{"function_declarations": declarations}]
        return body


@dataclass(frozen=True)
class FunctionCall:
    name: str
    args: dict[str, Any]


def first_part(response: dict[str, Any]) -> dict[str, Any]:
    """``candidates[0].content.parts[0]``, or InvalidResponseError if any level is missing."""
    candidates = response.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise InvalidResponseError("response has no candidates")
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    if not isinstance(content, dict):
        raise InvalidResponseError("first candidate has no content")
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        raise InvalidResponseError("first candidate content has no parts")
    return parts[0]


def function_call_of(part: dict[str, Any]) -> Optional[FunctionCall]:
    raw = part.get("functionCall") or part.get("function_call")
    if not isinstance(raw, dict) or not raw.get("name"):
        return None
    args = raw.get("args")
    return FunctionCall(name=str(raw["name"]), args=args if isinstance(args, dict) else {})
