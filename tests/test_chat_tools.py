"""Tests for porter/api/chat_tools.py -- chat tools bound to one chat.

Uses the real ChatService over in-memory SQLite.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from porter.api.chat_tools import register_chat_tools
from porter.api.tools import ToolDispatcher

CHAT_TOOLS = {"update_chat_title", "create_task", "update_task", "complete_task", "list_tasks"}


@pytest_asyncio.fixture
async def chat(chat_service):
    return await chat_service.create()


@pytest.fixture
def dispatcher(chat_service, chat) -> ToolDispatcher:
    dispatcher = ToolDispatcher()
    register_chat_tools(dispatcher, chat_service, chat.id)
    return dispatcher


async def _create_task(dispatcher: ToolDispatcher, text: str = "Deploy the app") -> str:
    result = await dispatcher.dispatch("create_task", {"text": text})
    return result["task"]["id"]


def test_registers_all_tools(dispatcher):
    assert set(dispatcher.tool_names()) == CHAT_TOOLS
    for definition in dispatcher.tool_definitions():
        assert "chat_id" not in definition["input_schema"]["properties"]


class TestUpdateChatTitle:
    async def test_updates_title(self, dispatcher, chat_service, chat):
        result = await dispatcher.dispatch("update_chat_title", {"title": "Deploy Django App"})

        assert result["message"] == 'Chat title updated to: "Deploy Django App"'
        assert result["chat"]["title"] == "Deploy Django App"
        assert (await chat_service.find(chat.id)).title == "Deploy Django App"

    @pytest.mark.parametrize("title", ["", "x" * 101])
    async def test_title_length(self, dispatcher, chat_service, chat, title):
        result = await dispatcher.dispatch("update_chat_title", {"title": title})

        assert result["error"].startswith("Invalid input for title")
        assert (await chat_service.find(chat.id)).title == "New Chat"

    async def test_chat_missing(self, chat_service):
        dispatcher = ToolDispatcher()
        register_chat_tools(dispatcher, chat_service, "nonexistent-chat")

        result = await dispatcher.dispatch("update_chat_title", {"title": "Anything"})

        assert result == {"error": "Chat not found."}


class TestCreateTask:
    async def test_creates_pending_task(self, dispatcher):
        result = await dispatcher.dispatch("create_task", {"text": "Create service from repo"})

        task = result["task"]
        assert task["text"] == "Create service from repo"
        assert task["state"] == "pending"
        assert task["isRunning"] is False
        assert result["message"] == f'Task created: "Create service from repo" (ID: {task["id"]})'

    async def test_text_too_long(self, dispatcher):
        result = await dispatcher.dispatch("create_task", {"text": "x" * 201})
        assert result["error"].startswith("Invalid input for text")

    async def test_storage_failure(self):
        service = AsyncMock()
        service.add_task.side_effect = RuntimeError("database is locked")
        dispatcher = ToolDispatcher()
        register_chat_tools(dispatcher, service, "chat-1")

        result = await dispatcher.dispatch("create_task", {"text": "anything"})

        assert result == {"error": "Failed to create task. Please try again later."}


class TestUpdateTask:
    async def test_marks_running(self, dispatcher):
        task_id = await _create_task(dispatcher)

        result = await dispatcher.dispatch("update_task", {"task_id": task_id, "is_running": True})

        assert result["task"]["isRunning"] is True
        assert result["task"]["text"] == "Deploy the app"
        assert result["message"] == f"Task {task_id} updated."

    async def test_updates_text_and_state(self, dispatcher):
        task_id = await _create_task(dispatcher)

        result = await dispatcher.dispatch(
            "update_task", {"task_id": task_id, "text": "Deploy the API", "state": "failure"}
        )

        assert result["task"]["text"] == "Deploy the API"
        assert result["task"]["state"] == "failure"

    async def test_unknown_task(self, dispatcher):
        result = await dispatcher.dispatch("update_task", {"task_id": "nonexistent-task", "is_running": True})
        assert result == {"error": "Task not found."}

    async def test_invalid_state(self, dispatcher):
        task_id = await _create_task(dispatcher)

        result = await dispatcher.dispatch("update_task", {"task_id": task_id, "state": "done"})

        assert result["error"].startswith("Invalid input for state")


class TestCompleteTask:
    async def test_success(self, dispatcher):
        task_id = await _create_task(dispatcher)
        await dispatcher.dispatch("update_task", {"task_id": task_id, "is_running": True})

        result = await dispatcher.dispatch("complete_task", {"task_id": task_id, "state": "success"})

        assert result["task"]["state"] == "success"
        assert result["task"]["isRunning"] is False
        assert result["message"] == f"Task {task_id} completed with state: success"

    async def test_failure(self, dispatcher):
        task_id = await _create_task(dispatcher)

        result = await dispatcher.dispatch("complete_task", {"task_id": task_id, "state": "failure"})

        assert result["task"]["state"] == "failure"

    async def test_pending_is_not_a_completion_state(self, dispatcher):
        task_id = await _create_task(dispatcher)

        result = await dispatcher.dispatch("complete_task", {"task_id": task_id, "state": "pending"})

        assert result["error"].startswith("Invalid input for state")

    async def test_unknown_task(self, dispatcher):
        result = await dispatcher.dispatch("complete_task", {"task_id": "nonexistent-task", "state": "success"})
        assert result == {"error": "Task not found."}


class TestListTasks:
    async def test_in_creation_order(self, dispatcher):
        first = await _create_task(dispatcher, "Create service")
        second = await _create_task(dispatcher, "Generate domain")

        result = await dispatcher.dispatch("list_tasks", {})

        assert [t["id"] for t in result["tasks"]] == [first, second]

    async def test_empty(self, dispatcher):
        assert await dispatcher.dispatch("list_tasks", {}) == {"tasks": []}

    async def test_tools_only_touch_bound_chat(self, dispatcher, chat_service):
        other = await chat_service.create()
        await _create_task(dispatcher)

        assert await chat_service.list_tasks(other.id) == []
