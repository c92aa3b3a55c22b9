"""Tool dispatcher shared by the Railway and chat tools.

Provides:
- ToolDispatcher: registers tools, dispatches calls by name
- tool_schema: builds a tool's JSON input schema from its pydantic model
- parse_input: validates tool arguments, turning failures into {"error": ...}

Every tool handler is an async callable that takes keyword arguments and
returns a JSON-shaped dict: a success payload or {"error": "..."}.
Handlers never raise to the agent loop; the dispatcher catches anything
that slips through as a last resort.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

logger = logging.getLogger(__name__)

ToolResult = dict[str, Any]
ToolHandler = Callable[..., Awaitable[ToolResult]]
M = TypeVar("M", bound=BaseModel)


def error_result(message: str, **extra: Any) -> ToolResult:
    return {"error": message, **extra}


def tool_schema(model: type[BaseModel], description: str) -> dict[str, Any]:
    """Flat tool schema (type/description/properties/required) from a pydantic model."""
    schema = model.model_json_schema()
    return {
        "type": "object",
        "description": description,
        "properties": schema.get("properties", {}),
        "required": schema.get("required", []),
    }


def parse_input(model: type[M], args: dict[str, Any]) -> M | ToolResult:
    """Validate tool arguments. Returns the model, or an error result."""
    try:
        return model.model_validate(args)
    except SchemaError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first["loc"]) or "input"
        logger.warning("Rejected %s input: %s", model.__name__, e.errors())
        return error_result(f"Invalid input for {field}: {first['msg']}")


class ToolDispatcher:
    """Registers tool handlers and dispatches tool calls from the agent loop."""

    def __init__(self) -> None:
        self._handlers: dict[str, ToolHandler] = {}
        self._schemas: dict[str, dict[str, Any]] = {}

    def register(self, name: str, handler: ToolHandler, schema: dict[str, Any]) -> None:
        """Register a tool handler with its JSON schema."""
        self._handlers[name] = handler
        self._schemas[name] = schema

    def tool_names(self) -> list[str]:
        return list(self._handlers)

    async def dispatch(self, name: str, args: dict[str, Any] | None = None) -> ToolResult:
        """Run a tool by name. Always returns a dict, never raises."""
        handler = self._handlers.get(name)
        if not handler:
            return error_result(f"Unknown tool: {name}")
        try:
            return await handler(**(args or {}))
        except Exception as e:
            logger.exception("Tool dispatch error for %s", name)
            return error_result(f"Tool error: {e}")

    def tool_definitions(self) -> list[dict[str, Any]]:
        """Return all tool definitions in Anthropic API format."""
        return [
            {
                "name": name,
                "description": schema.get("description", ""),
                "input_schema": schema,
            }
            for name, schema in self._schemas.items()
        ]
