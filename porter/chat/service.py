"""Chat accessor and task state machine.

Every mutation is load, modify, save against the ChatStore. Mutations on
the same chat id are serialized per process with an asyncio.Lock so two
tool calls racing on one chat cannot drop each other's task updates.
Writers in other processes are not covered.

Task lifecycle:
  pending (not running) --update is_running=True--> pending (running)
  running --complete success|failure--> terminal (not running)
Terminal tasks may still be updated; that is logged, not refused.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import asynccontextmanager
from typing import Any

from pydantic import ValidationError as SchemaError

from porter.chat.schemas import ChatDto, Message, Task, TaskUpdate, now_ms
from porter.errors import ChatNotFoundError, TaskNotFoundError, ValidationError, require
from porter.storage.documents import ChatStore
from porter.storage.models import ChatRecord

logger = logging.getLogger(__name__)

_TERMINAL_STATES = ("success", "failure")


class ChatService:
    def __init__(self, store: ChatStore, default_title: str = "New Chat") -> None:
        self._store = store
        self._default_title = default_title
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()

    # ------------------------------------------------------------------
    # Chats
    # ------------------------------------------------------------------

    async def create(self) -> ChatDto:
        record = await self._store.create(title=self._default_title, messages=[], tasks=[])
        logger.info("Created chat %s", record.id)
        return self._to_dto(record)

    async def find(self, chat_id: str) -> ChatDto | None:
        """Return the chat, or None if no chat has this id."""
        require(chat_id, "Chat ID is required")
        record = await self._store.find(chat_id)
        if record is None:
            return None
        return self._to_dto(record)

    async def update_messages(self, chat_id: str, messages: Sequence[Message | dict[str, Any]]) -> ChatDto:
        """Replace the whole message log.

        This is what a messages route calls after each agent turn, with the
        agent's messages converted by Message.from_ui. No route in this
        package calls it.
        """
        logger.info("Updating the messages for chat %s", chat_id)
        require(chat_id, "Chat ID is required")
        if messages is None:
            raise ValidationError("Messages are required")
        stored = [Message.model_validate(m).to_json() for m in messages]

        def apply(record: ChatRecord) -> None:
            record.messages = stored

        return await self._mutate(chat_id, apply)

    async def update_title(self, chat_id: str, title: str) -> ChatDto:
        require(chat_id, "Chat ID is required")
        require(title, "Title is required")

        def apply(record: ChatRecord) -> None:
            record.title = title

        return await self._mutate(chat_id, apply)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def add_task(self, chat_id: str, text: str) -> ChatDto:
        require(chat_id, "Chat ID is required")
        require(text, "Task text is required")
        created = now_ms()
        task = Task(text=text, created_at=created, updated_at=created)

        def apply(record: ChatRecord) -> None:
            record.tasks = [*record.tasks, task.to_json()]

        dto = await self._mutate(chat_id, apply)
        logger.info("Added task %s to chat %s", task.id, chat_id)
        return dto

    async def update_task(self, chat_id: str, task_id: str, update: TaskUpdate | dict[str, Any]) -> ChatDto:
        """Apply the fields present in update; updated_at always moves."""
        require(chat_id, "Chat ID is required")
        require(task_id, "Task ID is required")
        try:
            changes = TaskUpdate.model_validate(update).changes()
        except SchemaError as e:
            raise ValidationError(f"Invalid task update: {e.errors()[0]['msg']}") from e
        return await self._mutate_task(chat_id, task_id, lambda task: task.model_copy(update=changes))

    async def complete_task(self, chat_id: str, task_id: str, state: str) -> ChatDto:
        require(chat_id, "Chat ID is required")
        require(task_id, "Task ID is required")
        if state not in _TERMINAL_STATES:
            raise ValidationError(f"Task state must be one of {', '.join(_TERMINAL_STATES)}")
        return await self._mutate_task(
            chat_id, task_id, lambda task: task.model_copy(update={"is_running": False, "state": state})
        )

    async def list_tasks(self, chat_id: str) -> list[Task]:
        chat = await self.find(chat_id)
        if chat is None:
            raise ChatNotFoundError(chat_id)
        return chat.tasks

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _chat_lock(self, chat_id: str) -> AsyncIterator[None]:
        """Hold the lock for chat_id; it is dropped once nobody holds or awaits it."""
        lock = self._locks.get(chat_id)
        if lock is None:
            lock = self._locks[chat_id] = asyncio.Lock()
        self._lock_users[chat_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[chat_id] -= 1
            if not self._lock_users[chat_id]:
                del self._lock_users[chat_id]
                del self._locks[chat_id]

    async def _mutate(self, chat_id: str, apply: Callable[[ChatRecord], None]) -> ChatDto:
        async with self._chat_lock(chat_id):
            record = await self._store.find(chat_id)
            if record is None:
                raise ChatNotFoundError(chat_id)
            apply(record)
            await self._store.save(record)
            return self._to_dto(record)

    async def _mutate_task(self, chat_id: str, task_id: str, change: Callable[[Task], Task]) -> ChatDto:
        def apply(record: ChatRecord) -> None:
            tasks = [Task.model_validate(t) for t in record.tasks]
            for i, task in enumerate(tasks):
                if task.id == task_id:
                    break
            else:
                raise TaskNotFoundError(chat_id, task_id)
            if task.is_terminal:
                logger.info("Task %s in chat %s is already %s; updating anyway", task_id, chat_id, task.state)
            updated = change(task)
            updated.updated_at = now_ms()
            tasks[i] = updated
            record.tasks = [t.to_json() for t in tasks]

        return await self._mutate(chat_id, apply)

    def _to_dto(self, record: ChatRecord) -> ChatDto:
        return ChatDto(
            id=record.id,
            title=record.title,
            messages=[Message.model_validate(m) for m in record.messages or []],
            tasks=[Task.model_validate(t) for t in record.tasks or []],
        )
