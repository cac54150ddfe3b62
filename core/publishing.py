# =============================================================================
# core/publishing.py  -  Publish Text to the Tiny Server
# =============================================================================
#
# Stores a piece of content under a random short key on the note service and
# returns the public URL.  The suffix (".md", ".html", ...) only changes how
# the note service renders the page; it is not part of the stored key.
# =============================================================================

import logging

import httpx

from core.errors import UpstreamHTTPError
from core.random_values import generate_short_key
from core.settings import Settings

logger = logging.getLogger(__name__)


async def publish_note(client: httpx.AsyncClient, settings: Settings, content: str, suffix: str = "") -> str:
    key = generate_short_key()
    try:
        response = await client.post(f"{settings.tiny_server_url}/set", json={"value": content, "key": key})
    except httpx.HTTPError as exc:
        raise UpstreamHTTPError(f"Publish request failed: {exc}", stage="publish") from exc

    if response.is_error:
        logger.error("Failed to publish: %s", response.text[:500])
        raise UpstreamHTTPError(
            f"Failed to publish: HTTP {response.status_code} {response.reason_phrase}",
            status_code=response.status_code,
            body=response.text,
            stage="publish",
        )

    url = f"{settings.tiny_server_url}/{key}{suffix}"
    logger.info("Published to: %s", url)
    return url
