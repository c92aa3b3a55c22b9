"""Porter entry point.

Initializes all components and starts the server:
  Settings -> Database -> ChatStore -> ChatService -> RailwayClient -> DeploymentWaiter -> App -> Uvicorn

Uses Starlette lifespan to manage component lifecycle on the same
event loop as uvicorn.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from starlette.applications import Starlette

from porter.api.chat_tools import register_chat_tools
from porter.api.railway_tools import register_railway_tools
from porter.api.tools import ToolDispatcher
from porter.chat.service import ChatService
from porter.config import Settings
from porter.railway.client import RailwayClient
from porter.railway.deployments import DeploymentWaiter
from porter.storage.database import Database
from porter.storage.documents import ChatStore

logger = logging.getLogger(__name__)


async def create_components(settings: Settings) -> dict:
    """Initialize all components in dependency order.

    Raises ConfigurationError when RAILWAY_API_TOKEN is missing, before
    anything is served.
    """
    railway_http = httpx.AsyncClient(
        timeout=httpx.Timeout(connect=10, read=60, write=10, pool=10),
    )
    try:
        railway = RailwayClient.from_settings(settings, railway_http)
    except Exception:
        await railway_http.aclose()
        raise

    database = Database(settings)
    await database.connect()

    chat_service = ChatService(ChatStore(database), default_title=settings.default_chat_title)
    waiter = DeploymentWaiter(railway, poll_interval=settings.deployment_poll_interval)

    return {
        "database": database,
        "chat_service": chat_service,
        "railway": railway,
        "railway_http": railway_http,
        "waiter": waiter,
    }


async def shutdown_components(components: dict) -> None:
    """Graceful shutdown in reverse order."""
    logger.info("Shutting down Porter...")

    railway_http = components.get("railway_http")
    if railway_http:
        await railway_http.aclose()

    database = components.get("database")
    if database:
        await database.disconnect()

    logger.info("Porter shutdown complete.")


def build_dispatcher(components: dict, chat_id: str, settings: Settings) -> ToolDispatcher:
    """All tools for one agent run, with chat tools bound to chat_id."""
    dispatcher = ToolDispatcher()
    register_railway_tools(
        dispatcher,
        components["railway"],
        components["waiter"],
        default_max_wait=settings.deployment_max_wait,
    )
    register_chat_tools(dispatcher, components["chat_service"], chat_id)
    return dispatcher


def build_app(settings: Settings) -> Starlette:
    """Build the Starlette app; components start and stop with the lifespan."""
    components: dict = {}

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        components.update(await create_components(settings))
        app.state.components = components
        logger.info("Porter started against %s", settings.railway_api_endpoint)
        yield
        await shutdown_components(components)

    from porter.api.rest import create_app

    return create_app(_lazy_component(components, "chat_service"), lifespan=lifespan)


class _LazyProxy:
    """Proxy that defers attribute access to a dict-backed component.

    Allows create_app() to receive component references before lifespan
    has initialized them.
    """

    def __init__(self, components: dict, key: str) -> None:
        object.__setattr__(self, "_components", components)
        object.__setattr__(self, "_key", key)

    def _resolve(self):
        components = object.__getattribute__(self, "_components")
        key = object.__getattribute__(self, "_key")
        obj = components.get(key)
        if obj is None:
            raise RuntimeError(f"Component '{key}' not yet initialized; lifespan hasn't started")
        return obj

    def __getattr__(self, name):
        return getattr(self._resolve(), name)


def _lazy_component(components: dict, key: str) -> _LazyProxy:
    return _LazyProxy(components, key)


def main() -> None:
    """Entry point: parse settings, build app, run server."""
    settings = Settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    logger.info("Railway API: %s", settings.railway_api_endpoint)
    if not settings.database_url:
        logger.info("Database: %s:%s/%s", settings.db_host, settings.db_port, settings.db_name)

    if not settings.railway_api_token:
        logger.warning("RAILWAY_API_TOKEN is not set, startup will fail")

    app = build_app(settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
