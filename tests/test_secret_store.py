"""Tests for the secret stores."""

import pytest

from core.errors import MissingConfigurationError
from core.secret_store import MemorySecretStore, SecretKey, SqliteSecretStore


@pytest.fixture
def sqlite_path(tmp_path):
    return str(tmp_path / "secrets.db")


class TestSqliteSecretStore:

    @pytest.mark.asyncio
    async def test_missing_key_is_none(self, sqlite_path):
        store = SqliteSecretStore(sqlite_path)

        assert await store.get(SecretKey.GITHUB_TOKEN) is None

    @pytest.mark.asyncio
    async def test_set_then_get(self, sqlite_path):
        store = SqliteSecretStore(sqlite_path)

        await store.set(SecretKey.GITHUB_REPO, "octo/images")

        assert await store.get(SecretKey.GITHUB_REPO) == "octo/images"

    @pytest.mark.asyncio
    async def test_overwrite(self, sqlite_path):
        store = SqliteSecretStore(sqlite_path)

        await store.set(SecretKey.GEMINI_API_KEY, "old")
        await store.set(SecretKey.GEMINI_API_KEY, "new")

        assert await store.get(SecretKey.GEMINI_API_KEY) == "new"

    @pytest.mark.asyncio
    async def test_survives_restart(self, sqlite_path):
        """A fresh store on the same file sees earlier writes."""
        await SqliteSecretStore(sqlite_path).set(SecretKey.GITHUB_TOKEN, "ghp_persisted")

        reopened = SqliteSecretStore(sqlite_path)

        assert await reopened.get(SecretKey.GITHUB_TOKEN) == "ghp_persisted"

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, sqlite_path):
        store = SqliteSecretStore(sqlite_path)

        await store.set(SecretKey.GITHUB_TOKEN, "t")

        assert await store.get(SecretKey.GITHUB_REPO) is None

    @pytest.mark.asyncio
    async def test_value_is_not_logged(self, sqlite_path, caplog):
        caplog.set_level("INFO", logger="core.secret_store")

        await SqliteSecretStore(sqlite_path).set(SecretKey.GITHUB_TOKEN, "ghp_hidden")

        assert "github-token" in caplog.text
        assert "ghp_hidden" not in caplog.text


class TestRequire:

    @pytest.mark.asyncio
    async def test_missing(self):
        with pytest.raises(MissingConfigurationError) as exc_info:
            await MemorySecretStore().require(SecretKey.GEMINI_API_KEY)

        assert exc_info.value.key == "gemini-api-key"
        assert str(exc_info.value) == "Gemini API key is not configured"
        assert exc_info.value.stage == "configuration"

    @pytest.mark.asyncio
    async def test_empty_counts_as_missing(self):
        store = MemorySecretStore({SecretKey.GITHUB_TOKEN: ""})

        with pytest.raises(MissingConfigurationError):
            await store.require(SecretKey.GITHUB_TOKEN)

    @pytest.mark.asyncio
    async def test_present(self):
        store = MemorySecretStore({"github-repo": "octo/images"})

        assert await store.require(SecretKey.GITHUB_REPO) == "octo/images"
