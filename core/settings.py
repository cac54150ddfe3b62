# =============================================================================
# core/settings.py  -  Runtime Configuration
# =============================================================================
#
# Everything the server needs from its environment, in one frozen object.
# main.py calls load_dotenv() first, so a local .env file works the same as
# exported variables.
#
# Only PORT matters for a default deployment; the rest exist so tests and
# self-hosted setups can point the upstream calls somewhere else.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping, Optional


DEFAULT_PORT = 3001


@dataclass(frozen=True)
class Settings:
    """Server configuration resolved from environment variables."""

    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    secret_store_path: str = "toolkit-secrets.db"

    # --- Image generation upstream (Gemini) ---
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_image_model: str = "gemini-2.0-flash-exp-image-generation"

    # --- Upload upstream (GitHub contents API) ---
    github_api_url: str = "https://api.github.com"
    github_upload_branch: str = "master"

    # --- Note publishing upstream ---
    tiny_server_url: str = "https://note.linkof.link"

    http_timeout_seconds: float = 120.0
    log_level: str = "INFO"


def _read_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    return value


def _read_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from `environ` (defaults to os.environ).

    Unset or blank variables fall back to the dataclass defaults.
    """
    env = os.environ if environ is None else environ
    defaults = Settings()

    def text(name: str, default: str) -> str:
        return env.get(name, "").strip() or default

    port = _read_int(env, "PORT", defaults.port)
    if not 0 < port < 65536:
        raise ValueError(f"PORT must be between 1 and 65535, got {port}")

    return Settings(
        port=port,
        host=text("HOST", defaults.host),
        secret_store_path=text("SECRET_STORE_PATH", defaults.secret_store_path),
        gemini_base_url=text("GEMINI_BASE_URL", defaults.gemini_base_url).rstrip("/"),
        gemini_image_model=text("GEMINI_IMAGE_MODEL", defaults.gemini_image_model),
        github_api_url=text("GITHUB_API_URL", defaults.github_api_url).rstrip("/"),
        github_upload_branch=text("GITHUB_UPLOAD_BRANCH", defaults.github_upload_branch),
        tiny_server_url=text("TINY_SERVER_URL", defaults.tiny_server_url).rstrip("/"),
        http_timeout_seconds=_read_float(env, "HTTP_TIMEOUT_SECONDS", defaults.http_timeout_seconds),
        log_level=text("LOG_LEVEL", defaults.log_level).upper(),
    )
