"""Pydantic DTOs for chats, messages, and tasks.

Attributes are snake_case; the JSON written to storage and returned to
clients uses camelCase aliases (isRunning, createdAt, ...).
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Role = Literal["user", "assistant", "system"]
TaskState = Literal["pending", "success", "failure"]
TerminalState = Literal["success", "failure"]


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class ChatModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Message(ChatModel):
    id: str
    created_at: int
    content: str
    parts: list[dict[str, Any]] = []
    role: Role

    @classmethod
    def from_ui(cls, raw: dict[str, Any]) -> Message:
        """Build a stored message from an agent/UI message.

        Missing ids are generated, and content is the text of the first
        text part (empty if there is none). A messages route uses this to
        build the list it passes to ChatService.update_messages.
        """
        parts = raw.get("parts") or []
        content = next(
            (p.get("text", "") for p in parts if isinstance(p, dict) and p.get("type") == "text"),
            "",
        )
        return cls(
            id=raw.get("id") or str(uuid.uuid4()),
            created_at=now_ms(),
            content=content,
            parts=parts,
            role=raw["role"],
        )


class Task(ChatModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    text: str
    is_running: bool = False
    state: TaskState = "pending"
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)

    @property
    def is_terminal(self) -> bool:
        return self.state != "pending"


class TaskUpdate(ChatModel):
    """Partial task update; only fields explicitly set are applied."""

    text: str | None = Field(None, min_length=1)
    is_running: bool | None = None
    state: TaskState | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class ChatDto(ChatModel):
    id: str
    title: str
    messages: list[Message] = []
    tasks: list[Task] = []
