# =============================================================================
# tools/transport.py  -  SSE Transport
# =============================================================================
#
# HOW A CLIENT TALKS TO THE SERVER:
#
#   GET  /sse                      long-lived Server-Sent Events stream
#        first event:  "endpoint"  data = /message?session_id=<id>
#        later events: "message"   data = one JSON-RPC message each
#
#   POST /message?session_id=<id>  one JSON-RPC message per request
#        202 accepted | 400 bad id or body | 404 unknown / closed session
#
# STREAM WIRING (per session):
#
#   POST body ──▶ session.inbox ──▶ read_stream ──▶ MCP server.run()
#   MCP server.run() ──▶ write_stream ──▶ sse_writer ──▶ SSE "message" event
#
# The SSE response and the protocol server run in one task group.  When the
# client disconnects, the response returns and the group is cancelled, which
# ends server.run() and closes the session through SessionManager.open().
# =============================================================================

import logging
from typing import Any
from uuid import UUID

import anyio
from mcp import types
from mcp.server.lowlevel import Server
from mcp.shared.message import SessionMessage
from pydantic import ValidationError
from sse_starlette.sse import EventSourceResponse
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from tools.sessions import SessionClosedError, SessionManager, SessionNotFoundError

logger = logging.getLogger(__name__)


class SseTransport:
    """Serves MCP sessions over SSE with a paired POST endpoint."""

    def __init__(self, server: Server, sessions: SessionManager, message_path: str = "/message") -> None:
        self.server = server
        self.sessions = sessions
        self.message_path = message_path

    async def handle_sse(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI handler for the long-lived stream of one session."""
        read_stream_writer, read_stream = anyio.create_memory_object_stream(0)
        write_stream, write_stream_reader = anyio.create_memory_object_stream(0)
        sse_stream_writer, sse_stream_reader = anyio.create_memory_object_stream(0)

        async with self.sessions.open(read_stream_writer) as session:
            session.resources.push_async_callback(write_stream_reader.aclose)
            endpoint = f"{self.message_path}?session_id={session.id}"

            async def sse_writer() -> None:
                async with sse_stream_writer, write_stream_reader:
                    await sse_stream_writer.send({"event": "endpoint", "data": endpoint})
                    async for session_message in write_stream_reader:
                        await sse_stream_writer.send({
                            "event": "message",
                            "data": session_message.message.model_dump_json(by_alias=True, exclude_none=True),
                        })

            async with anyio.create_task_group() as tg:

                async def run_response() -> None:
                    response = EventSourceResponse(content=sse_stream_reader, data_sender_callable=sse_writer)
                    await response(scope, receive, send)
                    logger.info("Client of session %s disconnected", session.id)
                    tg.cancel_scope.cancel()

                tg.start_soon(run_response)
                await self.server.run(read_stream, write_stream, self.server.create_initialization_options())
                tg.cancel_scope.cancel()

    async def handle_post_message(self, request: Request) -> Response:
        """Route one posted JSON-RPC message to the session named in the query."""
        raw_id = request.query_params.get("session_id")
        if not raw_id:
            return Response("session_id is required", status_code=400)
        try:
            session_id = UUID(hex=raw_id).hex
        except ValueError:
            return Response("Invalid session ID", status_code=400)

        try:
            session = self.sessions.get(session_id)
        except SessionNotFoundError:
            logger.warning("Message posted to unknown session %s", session_id)
            return Response("Could not find session", status_code=404)

        body = await request.body()
        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except ValidationError as exc:
            logger.warning("Unparseable message for session %s: %s", session_id, exc.error_count())
            return Response("Could not parse message", status_code=400)

        try:
            await session.deliver(SessionMessage(message))
        except SessionClosedError:
            return Response("Could not find session", status_code=404)
        return Response("Accepted", status_code=202)


class SseEndpoint:
    """Plain ASGI callable so Starlette hands over the raw scope/receive/send."""

    def __init__(self, transport: SseTransport) -> None:
        self.transport = transport

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> Any:
        await self.transport.handle_sse(scope, receive, send)
