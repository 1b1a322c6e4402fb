"""Data models for storage layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Owner:
    """Minimal identity stamped on rows when only the user's ids are known."""

    user_seq: int
    user_id: str


@dataclass
class TodoRecord:
    user_seq: int
    todo_content: Optional[str]
    todo_date: Optional[str]  # YYYY-MM-DD
    complete_dtm: Optional[str] = None  # ISO timestamp, None while incomplete
    todo_note: Optional[str] = None
    del_yn: str = "N"
    reg_id: Optional[str] = None
    reg_ip: Optional[str] = None
    reg_dtm: Optional[str] = None
    upd_id: Optional[str] = None
    upd_ip: Optional[str] = None
    upd_dtm: Optional[str] = None
    todo_seq: Optional[int] = None

    @property
    def is_completed(self) -> bool:
        return self.complete_dtm is not None
