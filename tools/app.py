# =============================================================================
# tools/app.py  -  HTTP Application Factory
# =============================================================================
#
# create_app() assembles the whole server:
#
#   secret store ─┐
#   HTTP client  ─┼─▶ build_catalog() ─▶ ToolRegistry (frozen) ─▶ Dispatcher
#   settings     ─┘                                                  │
#                                      create_server() ◀─────────────┘
#                                             │
#   SessionManager ─▶ SseTransport ◀──────────┘
#
#   Routes:  GET /          docs page
#            GET /sse       session stream
#            POST /message  posted messages
#
# Everything a test wants to swap (store, HTTP client, close hook) is a
# keyword argument.  Objects created here are also exposed on app.state.
# =============================================================================

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse
from starlette.routing import Route

from core.secret_store import SecretStore, SqliteSecretStore
from core.settings import Settings
from tools.catalog import build_catalog
from tools.dispatch import Dispatcher
from tools.docs_page import render_docs_page
from tools.mcp_server import create_server
from tools.registry import ToolRegistry
from tools.sessions import OnClose, Session, SessionManager
from tools.transport import SseEndpoint, SseTransport

logger = logging.getLogger(__name__)

MESSAGE_PATH = "/message"


async def _log_cleanup(session: Session) -> None:
    logger.info("Cleaning up resources of session %s", session.id)


def create_app(
    settings: Settings,
    *,
    store: Optional[SecretStore] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    on_session_close: Optional[OnClose] = None,
) -> Starlette:
    store = store if store is not None else SqliteSecretStore(settings.secret_store_path)
    owns_client = http_client is None
    client = http_client if http_client is not None else httpx.AsyncClient(timeout=settings.http_timeout_seconds)

    registry = ToolRegistry()
    registry.register_all(build_catalog(store, client, settings))
    registry.freeze()

    dispatcher = Dispatcher(registry)
    server = create_server(registry, dispatcher)
    sessions = SessionManager(on_close=on_session_close or _log_cleanup)
    transport = SseTransport(server, sessions, message_path=MESSAGE_PATH)

    async def docs(request: Request) -> HTMLResponse:
        host = request.headers.get("host") or f"localhost:{settings.port}"
        protocol = request.headers.get("x-forwarded-proto") or "https"
        return HTMLResponse(render_docs_page(registry.list_descriptors(), f"{protocol}://{host}"))

    @asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info("Serving %d tools on port %d", len(registry), settings.port)
        try:
            yield
        finally:
            if owns_client:
                await client.aclose()
            logger.info("Server stopped with %d open sessions", len(sessions))

    app = Starlette(
        routes=[
            Route("/", docs, methods=["GET"]),
            Route("/sse", endpoint=SseEndpoint(transport), methods=["GET"]),
            Route(MESSAGE_PATH, endpoint=transport.handle_post_message, methods=["POST"]),
        ],
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.dispatcher = dispatcher
    app.state.sessions = sessions
    app.state.store = store
    return app
