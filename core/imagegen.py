# =============================================================================
# core/imagegen.py  -  Image Generation -> Upload Pipeline
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns a text prompt into a publicly reachable image URL in two stages:
#
#     prompt ──▶ [generate]  Gemini generateContent  ──▶ base64 PNG
#            ──▶ [upload]    GitHub contents API PUT ──▶ download_url
#            ──▶ "![prompt](download_url)"
#
# FAILURE MODEL:
#   Every failure raises a ToolError whose `stage` names where it broke
#   ("configuration", "generate", "upload").  A failure short-circuits the
#   rest of the pipeline.  There is no compensation: if generation succeeds
#   and the upload fails, the generated image is dropped.  Do not add a
#   blind retry around generate_and_upload(), it would re-spend generation
#   quota for an image that already exists.
#
# SECRETS FIRST:
#   All three secrets are resolved before any request is sent, so a missing
#   GitHub token is reported without burning a Gemini call.
# =============================================================================

import logging
import re
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from core.errors import ExtractionError, UpstreamHTTPError
from core.random_values import generate_short_key
from core.secret_store import SecretKey, SecretStore
from core.settings import Settings

logger = logging.getLogger(__name__)

# The image payload sits somewhere inside a larger JSON document
# (candidates -> content -> parts -> inlineData -> data), next to text parts
# and metadata.  Scan the raw body for the labeled field instead of assuming
# a fixed document shape.
IMAGE_DATA_PATTERN = re.compile(r'"data"\s*:\s*"([^"]*)"')


@dataclass(frozen=True)
class UploadCredentials:
    repo: str
    token: str


def extract_image_data(body: str) -> str:
    """Return the first base64 `"data"` value found in `body`."""
    match = IMAGE_DATA_PATTERN.search(body)
    if match is None or not match.group(1):
        raise ExtractionError("No image data found in the generation response", stage="generate")
    return match.group(1)


async def _send(client: httpx.AsyncClient, request: httpx.Request, stage: str) -> httpx.Response:
    try:
        response = await client.send(request)
    except httpx.HTTPError as exc:
        logger.warning("%s request to %s failed: %s", stage, request.url.host, exc)
        raise UpstreamHTTPError(f"{stage} request failed: {exc}", stage=stage) from exc
    if response.is_error:
        logger.error("%s request returned HTTP %s: %s", stage, response.status_code, response.text[:500])
        raise UpstreamHTTPError(
            f"{stage} request failed: HTTP {response.status_code} {response.reason_phrase}",
            status_code=response.status_code,
            body=response.text,
            stage=stage,
        )
    return response


# =============================================================================
# Stage 1: generate
# =============================================================================

async def generate_image(client: httpx.AsyncClient, settings: Settings, api_key: str, prompt: str) -> str:
    """Ask the generative model for an image and return its base64 payload."""
    request = client.build_request(
        "POST",
        f"{settings.gemini_base_url}/models/{settings.gemini_image_model}:generateContent",
        params={"key": api_key},
        json={
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"responseModalities": ["Text", "Image"]},
        },
    )
    response = await _send(client, request, "generate")
    return extract_image_data(response.text)


# =============================================================================
# Stage 2: upload
# =============================================================================

async def upload_file(
    client: httpx.AsyncClient,
    settings: Settings,
    credentials: UploadCredentials,
    content_b64: str,
    filename: str,
    commit_message: str,
) -> str:
    """Create `filename` in the configured repository and return its download URL."""
    request = client.build_request(
        "PUT",
        f"{settings.github_api_url}/repos/{credentials.repo}/contents/{quote(filename, safe='')}",
        headers={
            "Authorization": f"Bearer {credentials.token}",
            "Accept": "application/vnd.github+json",
        },
        json={
            "message": f"Upload image via MCP tool ({commit_message})",
            "content": content_b64,
            "branch": settings.github_upload_branch,
        },
    )
    response = await _send(client, request, "upload")

    try:
        download_url = response.json()["content"]["download_url"]
    except (ValueError, KeyError, TypeError):
        download_url = None
    if not download_url:
        raise ExtractionError("Upload response did not contain a download URL", stage="upload")
    return download_url


# =============================================================================
# The whole pipeline
# =============================================================================

async def generate_and_upload(
    client: httpx.AsyncClient,
    store: SecretStore,
    settings: Settings,
    prompt: str,
) -> str:
    """Run generate + upload and return a Markdown image reference."""
    api_key = await store.require(SecretKey.GEMINI_API_KEY)
    credentials = UploadCredentials(
        repo=await store.require(SecretKey.GITHUB_REPO),
        token=await store.require(SecretKey.GITHUB_TOKEN),
    )

    image_b64 = await generate_image(client, settings, api_key, prompt)
    logger.info("Generated image (%d base64 chars)", len(image_b64))

    filename = f"{generate_short_key()}.png"
    url = await upload_file(client, settings, credentials, image_b64, filename, prompt)
    logger.info("Uploaded %s to %s", filename, credentials.repo)
    return f"![{prompt}]({url})"
