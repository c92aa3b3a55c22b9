"""REST API for Porter chats.

Endpoints:
  POST /chats       - Create an empty chat
  GET  /chats/{id}  - Current chat (title, messages, tasks) for the UI poller
  GET  /health      - Health check
"""

from __future__ import annotations

import logging
from typing import Any

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from porter.chat.service import ChatService

logger = logging.getLogger(__name__)


def create_app(chat_service: ChatService, lifespan: Any | None = None) -> Starlette:
    """Create the Starlette ASGI app with all routes."""

    async def create_chat(request: Request) -> JSONResponse:
        """POST /chats - Create an empty chat."""
        try:
            chat = await chat_service.create()
        except Exception as e:
            logger.error("Create chat error: %s", e)
            return JSONResponse({"error": "Failed to create chat."}, status_code=500)
        return JSONResponse({"chat": chat.to_json()}, status_code=201)

    async def get_chat(request: Request) -> JSONResponse:
        """GET /chats/{id} - Current chat state."""
        chat_id = request.path_params.get("chat_id", "")
        if not chat_id:
            return JSONResponse({"error": "Chat ID is required."}, status_code=400)
        try:
            chat = await chat_service.find(chat_id)
        except Exception as e:
            logger.error("Get chat error: %s", e)
            return JSONResponse({"error": "Failed to load chat."}, status_code=500)
        if chat is None:
            return JSONResponse({"error": "Chat not found."}, status_code=404)
        return JSONResponse({"chat": chat.to_json()})

    async def health(request: Request) -> JSONResponse:
        """GET /health - Liveness check."""
        return JSONResponse({"status": "ok"})

    routes = [
        Route("/chats", create_chat, methods=["POST"]),
        Route("/chats/{chat_id}", get_chat, methods=["GET"]),
        Route("/health", health, methods=["GET"]),
    ]

    return Starlette(routes=routes, lifespan=lifespan)
