"""Uploader side: send one image to the kimage server and copy the URL."""

import logging
import mimetypes
import shutil
import subprocess
from pathlib import Path

import httpx
from pydantic import ValidationError

from kimage.config import Config
from kimage.errors import (
    BadResponse,
    ClipboardError,
    NetworkError,
    ServerRejected,
    UploadIoError,
)
from kimage.models import UploadResponse

logger = logging.getLogger(__name__)

TIMEOUT_S = 30.0

# Tried in order; the first one found on PATH wins.
CLIPBOARD_COMMANDS = [
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["clip"],
]


def _error_detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text.strip()
    if isinstance(body, dict) and isinstance(body.get("detail"), str):
        return body["detail"]
    return resp.text.strip()


def upload(path, config: Config, client: httpx.Client | None = None) -> str:
    """Upload the file at ``path`` and return its public URL.

    Raises UploadIoError, NetworkError, ServerRejected or BadResponse. There
    is no retry: every failure is surfaced immediately.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise UploadIoError(f"cannot read {path}: {e}") from e

    mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    endpoint = f"{config.server_url}/upload"
    logger.info("uploading %s (%d bytes) to %s", path, len(data), endpoint)

    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=TIMEOUT_S)
    try:
        resp = client.post(
            endpoint,
            data={"key": config.api_key},
            files={"file": (path.name, data, mime)},
        )
    except httpx.TimeoutException as e:
        raise NetworkError(f"request to {endpoint} timed out") from e
    except httpx.HTTPError as e:
        raise NetworkError(f"cannot reach {endpoint}: {e}") from e
    finally:
        if owns_client:
            client.close()

    if not resp.is_success:
        logger.error("server returned HTTP %s", resp.status_code)
        raise ServerRejected(resp.status_code, _error_detail(resp))

    try:
        url = UploadResponse.model_validate(resp.json()).url
    except (ValueError, ValidationError) as e:
        raise BadResponse(f"unexpected response from server: {resp.text[:200]!r}") from e

    logger.info("uploaded: %s", url)
    return url


def copy_to_clipboard(text: str):
    for cmd in CLIPBOARD_COMMANDS:
        if shutil.which(cmd[0]) is None:
            continue
        try:
            subprocess.run(cmd, input=text.encode("utf-8"), check=True, timeout=5)
        except (OSError, subprocess.SubprocessError) as e:
            raise ClipboardError(f"{cmd[0]} failed: {e}") from e
        logger.info("copied URL to clipboard with %s", cmd[0])
        return
    raise ClipboardError("no clipboard command found (install xclip, xsel or wl-clipboard)")
