# =============================================================================
# core/secret_store.py  -  Persistent Secret Store
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Keeps the handful of credentials the upstream tools need (GitHub token,
#   GitHub repository, Gemini API key).  The admin tools write them; the
#   image tool reads them at invocation time.
#
# THE CONTRACT IS TINY ON PURPOSE:
#   get(key) / set(key, value) on single keys, nothing else.  There is no
#   delete (absence simply means "not configured") and no cross-key
#   transaction: two writers racing on the same key end with whichever
#   finished last.
#
# TWO IMPLEMENTATIONS:
#   - SqliteSecretStore: one row per key in a local SQLite file, so values
#     survive a restart.  sqlite3 is blocking, so every call runs in a worker
#     thread and the event loop keeps serving other sessions.
#   - MemorySecretStore: a dict, for tests and throwaway runs.
# =============================================================================

import asyncio
import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from core.errors import MissingConfigurationError

logger = logging.getLogger(__name__)


class SecretKey(str, Enum):
    """The fixed set of configuration names the server knows about."""

    GITHUB_TOKEN = "github-token"
    GITHUB_REPO = "github-repo"
    GEMINI_API_KEY = "gemini-api-key"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    SecretKey.GITHUB_TOKEN: "GitHub token",
    SecretKey.GITHUB_REPO: "GitHub repository",
    SecretKey.GEMINI_API_KEY: "Gemini API key",
}


class SecretStore(ABC):
    """Single-key get/set storage for credentials and identifiers."""

    @abstractmethod
    async def get(self, key: SecretKey) -> Optional[str]:
        """Return the stored value, or None when the key was never set."""

    @abstractmethod
    async def set(self, key: SecretKey, value: str) -> None:
        """Create or overwrite the value for `key`."""

    async def require(self, key: SecretKey) -> str:
        """Return the value for `key` or raise MissingConfigurationError.

        An empty string counts as "not configured".
        """
        value = await self.get(key)
        if not value:
            raise MissingConfigurationError(key.value, key.label)
        return value


class MemorySecretStore(SecretStore):
    def __init__(self, initial: Optional[dict] = None) -> None:
        self._values: dict[SecretKey, str] = {SecretKey(k): v for k, v in (initial or {}).items()}

    async def get(self, key: SecretKey) -> Optional[str]:
        return self._values.get(SecretKey(key))

    async def set(self, key: SecretKey, value: str) -> None:
        self._values[SecretKey(key)] = value


class SqliteSecretStore(SecretStore):
    """Secrets persisted in a SQLite file, one row per key."""

    _SCHEMA = """
        CREATE TABLE IF NOT EXISTS secrets (
            key        TEXT PRIMARY KEY,
            value      TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        if not self._initialized:
            with conn:
                conn.execute(self._SCHEMA)
            self._initialized = True
        return conn

    def _get_sync(self, key: str) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM secrets WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return row[0] if row else None

    def _set_sync(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    "INSERT INTO secrets (key, value, updated_at) VALUES (?, ?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                    (key, value, datetime.now(timezone.utc).isoformat()),
                )
        finally:
            conn.close()

    async def get(self, key: SecretKey) -> Optional[str]:
        return await asyncio.to_thread(self._get_sync, SecretKey(key).value)

    async def set(self, key: SecretKey, value: str) -> None:
        key = SecretKey(key)
        await asyncio.to_thread(self._set_sync, key.value, value)
        # Never log the value itself.
        logger.info("Secret %s updated", key.value)
