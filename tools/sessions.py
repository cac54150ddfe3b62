# =============================================================================
# tools/sessions.py  -  Session Table & Lifecycle
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Tracks every open streaming connection as a Session, keyed by its id:
#
#       IDLE ──open()──▶ OPEN ──(disconnect / shutdown)──▶ CLOSED
#
#   - open() allocates the id, registers the session and marks it OPEN.
#   - Posted messages are routed with deliver(session_id, message): they can
#     only reach the session whose id they carry.
#   - Leaving open() (normally, by error, or by cancellation) closes the
#     session exactly once: its scoped resources are released, it leaves
#     the table, and the on_close hook runs.  Other sessions and the server
#     process are untouched.
#   - CLOSED is terminal.  A reconnecting client gets a brand-new session.
# =============================================================================

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Optional
from uuid import uuid4

import anyio
from anyio.streams.memory import MemoryObjectSendStream

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    OPEN = "open"
    CLOSED = "closed"


class SessionNotFoundError(LookupError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Could not find session {session_id}")
        self.session_id = session_id


class SessionClosedError(RuntimeError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id} is closed")
        self.session_id = session_id


@dataclass(eq=False)
class Session:
    """One client connection, from stream open to stream close."""

    id: str
    inbox: MemoryObjectSendStream         # Feeds posted messages to the protocol server
    opened_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    state: SessionState = SessionState.IDLE
    resources: AsyncExitStack = field(default_factory=AsyncExitStack, repr=False)

    async def deliver(self, message: Any) -> None:
        if self.state is not SessionState.OPEN:
            raise SessionClosedError(self.id)
        try:
            await self.inbox.send(message)
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            raise SessionClosedError(self.id) from None


OnClose = Callable[[Session], Awaitable[None]]


class SessionManager:
    """Keyed table of open sessions."""

    def __init__(self, on_close: Optional[OnClose] = None) -> None:
        self._sessions: dict[str, Session] = {}
        self._on_close = on_close

    @asynccontextmanager
    async def open(self, inbox: MemoryObjectSendStream) -> AsyncIterator[Session]:
        session = Session(id=uuid4().hex, inbox=inbox)
        session.resources.push_async_callback(inbox.aclose)
        self._sessions[session.id] = session
        session.state = SessionState.OPEN
        logger.info("Session %s opened (%d active)", session.id, len(self._sessions))
        try:
            yield session
        finally:
            # The connection is usually gone because its task was cancelled;
            # shield so the cleanup itself is not cancelled halfway through.
            with anyio.CancelScope(shield=True):
                await self.close(session)

    async def close(self, session: Session) -> None:
        """Move `session` to CLOSED and release its resources (idempotent)."""
        if session.state is SessionState.CLOSED:
            return
        session.state = SessionState.CLOSED
        self._sessions.pop(session.id, None)
        try:
            await session.resources.aclose()
            if self._on_close is not None:
                await self._on_close(session)
        finally:
            lifetime = (datetime.now(timezone.utc) - session.opened_at).total_seconds()
            logger.info("Session %s closed after %.1fs (%d active)", session.id, lifetime, len(self._sessions))

    def get(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    async def deliver(self, session_id: str, message: Any) -> None:
        await self.get(session_id).deliver(message)

    @property
    def active_ids(self) -> list[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)
