import pytest
import requests

from gnome_shell_screenshot import imgur
from gnome_shell_screenshot.imgur import UploadError, delete_image, upload_image


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.fixture
def image(tmp_path):
    path = tmp_path / "shot.png"
    path.write_bytes(b"x" * (imgur.CHUNK_SIZE + 10))
    return path


def test_upload_streams_body_and_reports_progress(image, monkeypatch) -> None:
    seen = {}

    def fake_post(url, headers=None, data=None, timeout=None):
        seen["url"] = url
        seen["headers"] = headers
        seen["length"] = len(data)
        body = b""
        while True:
            chunk = data.read(8192 * 16)
            if not chunk:
                break
            body += chunk
        seen["body"] = body
        return FakeResponse(200, {"success": True, "data": {"link": "https://i.imgur.com/a.png", "deletehash": "d1"}})

    monkeypatch.setattr(imgur.requests, "post", fake_post)
    progress = []
    data = upload_image(image, "client", progress=lambda sent, total: progress.append((sent, total)))

    total = imgur.CHUNK_SIZE + 10
    assert data["link"] == "https://i.imgur.com/a.png"
    assert seen["url"] == imgur.API_URL
    assert seen["headers"]["Authorization"] == "Client-ID client"
    assert seen["length"] == total
    assert seen["body"] == image.read_bytes()
    assert progress == [(imgur.CHUNK_SIZE, total), (total, total)]


def test_upload_rejected(image, monkeypatch) -> None:
    response = FakeResponse(400, {"success": False, "data": {"error": "Bad image"}})
    monkeypatch.setattr(imgur.requests, "post", lambda *a, **kw: response)
    with pytest.raises(UploadError, match="Bad image"):
        upload_image(image, "client")


def test_upload_invalid_json(image, monkeypatch) -> None:
    monkeypatch.setattr(imgur.requests, "post", lambda *a, **kw: FakeResponse(502, None))
    with pytest.raises(UploadError, match="HTTP 502"):
        upload_image(image, "client")


def test_upload_transport_error(image, monkeypatch) -> None:
    def fail(*args, **kwargs):
        raise requests.exceptions.ConnectionError("offline")

    monkeypatch.setattr(imgur.requests, "post", fail)
    with pytest.raises(UploadError, match="offline"):
        upload_image(image, "client")


def test_upload_without_link(image, monkeypatch) -> None:
    monkeypatch.setattr(imgur.requests, "post", lambda *a, **kw: FakeResponse(200, {"success": True, "data": {}}))
    with pytest.raises(UploadError, match="no link"):
        upload_image(image, "client")


def test_delete_image(monkeypatch) -> None:
    seen = {}

    def fake_delete(url, headers=None, timeout=None):
        seen["url"] = url
        return FakeResponse(200, {"success": True, "data": True})

    monkeypatch.setattr(imgur.requests, "delete", fake_delete)
    delete_image("d1", "client")
    assert seen["url"] == f"{imgur.API_URL}/d1"
