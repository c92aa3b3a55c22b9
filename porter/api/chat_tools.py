"""Chat tools: title and task list management for the current chat.

The chat id is bound when the tools are registered, so the agent never
passes it and cannot touch another chat.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field

from porter.api.tools import ToolDispatcher, ToolResult, error_result, parse_input, tool_schema
from porter.chat.schemas import ChatDto, Task, TaskUpdate
from porter.chat.service import ChatService
from porter.errors import ChatNotFoundError, TaskNotFoundError

logger = logging.getLogger(__name__)


class UpdateChatTitleInput(BaseModel):
    title: str = Field(min_length=1, max_length=100, description='Short descriptive title, e.g. "Deploy Django App"')


class CreateTaskInput(BaseModel):
    text: str = Field(min_length=1, max_length=200, description="What the task will accomplish")


class UpdateTaskInput(BaseModel):
    task_id: str = Field(min_length=1, description="ID of the task to update")
    text: str | None = Field(None, min_length=1, max_length=200, description="New task text")
    is_running: bool | None = Field(None, description="Whether work on the task is in progress")
    state: Literal["pending", "success", "failure"] | None = Field(None, description="Task state")


class CompleteTaskInput(BaseModel):
    task_id: str = Field(min_length=1, description="ID of the task to complete")
    state: Literal["success", "failure"] = Field(description="Final outcome of the task")


class ListTasksInput(BaseModel):
    pass


def _find_task(chat: ChatDto, task_id: str) -> dict[str, Any] | None:
    for task in chat.tasks:
        if task.id == task_id:
            return task.to_json()
    return None


def _failure(e: Exception, fallback: str) -> ToolResult:
    if isinstance(e, TaskNotFoundError):
        return error_result("Task not found.")
    if isinstance(e, ChatNotFoundError):
        return error_result("Chat not found.")
    return error_result(fallback)


def register_chat_tools(dispatcher: ToolDispatcher, chat_service: ChatService, chat_id: str) -> None:
    """Register chat tools bound to one chat id."""

    async def update_chat_title(**args: Any) -> ToolResult:
        params = parse_input(UpdateChatTitleInput, args)
        if isinstance(params, dict):
            return params
        logger.info("[Tool] update_chat_title chat=%s", chat_id)
        try:
            chat = await chat_service.update_title(chat_id, params.title)
        except Exception as e:
            logger.exception("update_chat_title tool failed")
            return _failure(e, "Failed to update chat title. Please try again later.")
        return {"chat": chat.to_json(), "message": f'Chat title updated to: "{chat.title}"'}

    async def create_task(**args: Any) -> ToolResult:
        params = parse_input(CreateTaskInput, args)
        if isinstance(params, dict):
            return params
        logger.info("[Tool] create_task chat=%s", chat_id)
        try:
            chat = await chat_service.add_task(chat_id, params.text)
        except Exception as e:
            logger.exception("create_task tool failed")
            return _failure(e, "Failed to create task. Please try again later.")
        task: Task = chat.tasks[-1]
        return {"task": task.to_json(), "message": f'Task created: "{task.text}" (ID: {task.id})'}

    async def update_task(**args: Any) -> ToolResult:
        params = parse_input(UpdateTaskInput, args)
        if isinstance(params, dict):
            return params
        update = TaskUpdate.model_validate(params.model_dump(exclude_unset=True, exclude={"task_id"}))
        logger.info("[Tool] update_task chat=%s task=%s %s", chat_id, params.task_id, update.changes())
        try:
            chat = await chat_service.update_task(chat_id, params.task_id, update)
        except Exception as e:
            logger.exception("update_task tool failed")
            return _failure(e, "Failed to update task. Please try again later.")
        return {"task": _find_task(chat, params.task_id), "message": f"Task {params.task_id} updated."}

    async def complete_task(**args: Any) -> ToolResult:
        params = parse_input(CompleteTaskInput, args)
        if isinstance(params, dict):
            return params
        logger.info("[Tool] complete_task chat=%s task=%s state=%s", chat_id, params.task_id, params.state)
        try:
            chat = await chat_service.complete_task(chat_id, params.task_id, params.state)
        except Exception as e:
            logger.exception("complete_task tool failed")
            return _failure(e, "Failed to complete task. Please try again later.")
        return {
            "task": _find_task(chat, params.task_id),
            "message": f"Task {params.task_id} completed with state: {params.state}",
        }

    async def list_tasks(**args: Any) -> ToolResult:
        params = parse_input(ListTasksInput, args)
        if isinstance(params, dict):
            return params
        try:
            tasks = await chat_service.list_tasks(chat_id)
        except Exception as e:
            logger.exception("list_tasks tool failed")
            return _failure(e, "Failed to list tasks. Please try again later.")
        return {"tasks": [t.to_json() for t in tasks]}

    dispatcher.register(
        "update_chat_title", update_chat_title,
        tool_schema(UpdateChatTitleInput, "Set a short descriptive title for this chat."),
    )
    dispatcher.register(
        "create_task", create_task,
        tool_schema(CreateTaskInput, "Add a task to this chat's task list. Tasks start as pending."),
    )
    dispatcher.register(
        "update_task", update_task,
        tool_schema(UpdateTaskInput, "Update a task's text, running flag, or state."),
    )
    dispatcher.register(
        "complete_task", complete_task,
        tool_schema(CompleteTaskInput, "Mark a task as finished with success or failure."),
    )
    dispatcher.register(
        "list_tasks", list_tasks,
        tool_schema(ListTasksInput, "List this chat's tasks in creation order."),
    )
