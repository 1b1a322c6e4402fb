"""System prompt loading and per-request rendering."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

from todo_assist.log import get_logger

logger = get_logger(__name__)

USER_NAME_PLACEHOLDER = "[사용자 이름]"

DEFAULT_SYSTEM_PROMPT = "[ROLE] 당신은 친절한 한국어 비서입니다. 존댓말로 할 일 목록에 관해서만 답변하세요."


class SystemPrompt:
    """Prompt text read once at start-up and shared read-only by all requests."""

    def __init__(self, template: str):
        self._template = template.strip()

    @classmethod
    def load(cls, path: str | Path) -> SystemPrompt:
        prompt_file = Path(path)
        try:
            template = prompt_file.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("system_prompt_load_failed", path=str(prompt_file), error=str(e))
            return cls(DEFAULT_SYSTEM_PROMPT)
        logger.info("system_prompt_loaded", path=str(prompt_file), length=len(template))
        return cls(template)

    @property
    def template(self) -> str:
        return self._template

    def render(self, user_name: Optional[str], today: date) -> str:
        text = self._template
        if user_name:
            text = text.replace(USER_NAME_PLACEHOLDER, user_name)
        return (
            f"{text}\n\n[CURRENT_DATE]\n"
            f"오늘 날짜: {today.isoformat()} (YYYY-MM-DD 형식)\n"
            '이 날짜를 기준으로 "오늘", "내일", "다음 주" 등의 상대적 날짜를 계산하세요.'
        )
