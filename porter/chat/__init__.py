"""Chat module: chat aggregate, messages, and the task state machine.

Public API: ChatService + schema types from schemas.py.
"""

from porter.chat.schemas import ChatDto, Message, Role, Task, TaskState, TaskUpdate, TerminalState
from porter.chat.service import ChatService

__all__ = [
    "ChatDto",
    "ChatService",
    "Message",
    "Role",
    "Task",
    "TaskState",
    "TaskUpdate",
    "TerminalState",
]
