"""Imgur API client.

Images are posted as raw bytes to the anonymous upload endpoint, authorized
with an application Client-ID. The body is streamed through a reader that
reports progress after every chunk.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

import requests

log = logging.getLogger(__name__)

API_URL = "https://api.imgur.com/3/image"
CHUNK_SIZE = 64 * 1024
DEFAULT_TIMEOUT = 60

ProgressCallback = Callable[[int, int], None]


class UploadError(Exception):
    """Raised when an Imgur request fails."""
    pass


class _ProgressReader:
    """File-like request body that reports (bytes_sent, total)."""

    def __init__(self, data: bytes, progress: Optional[ProgressCallback] = None):
        self._data = data
        self._offset = 0
        self._progress = progress

    def __len__(self) -> int:
        return len(self._data) - self._offset

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            size = len(self._data)
        size = min(size, CHUNK_SIZE)
        chunk = self._data[self._offset:self._offset + size]
        self._offset += len(chunk)
        if chunk and self._progress:
            self._progress(self._offset, len(self._data))
        return chunk


def _headers(client_id: str) -> dict:
    return {"Authorization": f"Client-ID {client_id}"}


def _check_response(response: requests.Response) -> dict:
    try:
        payload = response.json()
    except ValueError:
        raise UploadError(f"Invalid response from Imgur (HTTP {response.status_code})")

    if not response.ok or not payload.get("success", False):
        data = payload.get("data") or {}
        message = data.get("error") if isinstance(data, dict) else None
        raise UploadError(message or f"Imgur request failed (HTTP {response.status_code})")

    return payload.get("data") or {}


def upload_image(
    path: Path,
    client_id: str,
    progress: Optional[ProgressCallback] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> dict:
    """Upload an image file.

    Args:
        path: Image file to upload
        client_id: Imgur application Client-ID
        progress: Called with (bytes_sent, total) while the body is sent
        timeout: Request timeout in seconds

    Returns:
        Imgur ``data`` object (contains ``link`` and ``deletehash``)

    Raises:
        UploadError: On transport errors or a rejected upload
    """
    body = _ProgressReader(Path(path).read_bytes(), progress)
    log.debug("Uploading %s (%d bytes)", path, len(body))
    try:
        response = requests.post(
            API_URL,
            headers={**_headers(client_id), "Content-Type": "application/octet-stream"},
            data=body,
            timeout=timeout,
        )
    except requests.exceptions.RequestException as e:
        raise UploadError(f"Upload failed: {e}")

    data = _check_response(response)
    if not data.get("link"):
        raise UploadError("Imgur response has no link")
    log.info("Uploaded to %s", data["link"])
    return data


def delete_image(deletehash: str, client_id: str, timeout: int = DEFAULT_TIMEOUT) -> None:
    """Delete an anonymously uploaded image."""
    try:
        response = requests.delete(
            f"{API_URL}/{deletehash}",
            headers=_headers(client_id),
            timeout=timeout,
        )
    except requests.exceptions.RequestException as e:
        raise UploadError(f"Delete failed: {e}")
    _check_response(response)
    log.info("Deleted Imgur image %s", deletehash)
