"""Exception hierarchy for Porter's local layers.

Chat and configuration errors inherit from PorterError so callers can
catch broad or specific exceptions as needed. Transport errors from the
Railway API live in porter.railway.graphql.
"""


class PorterError(Exception):
    """Base exception for all Porter errors."""


class ConfigurationError(PorterError):
    """Raised at startup when required settings are missing or invalid."""


class ValidationError(PorterError, ValueError):
    """Raised when a required argument is empty or out of range, before any I/O."""


class NotFoundError(PorterError, LookupError):
    """Raised when a lookup by id finds nothing."""


class ChatNotFoundError(NotFoundError):
    def __init__(self, chat_id: str) -> None:
        super().__init__("Chat not found")
        self.chat_id = chat_id


class TaskNotFoundError(NotFoundError):
    def __init__(self, chat_id: str, task_id: str) -> None:
        super().__init__("Task not found")
        self.chat_id = chat_id
        self.task_id = task_id


def require(value: object, message: str) -> None:
    """Raise ValidationError if value is empty or None."""
    if not value:
        raise ValidationError(message)
