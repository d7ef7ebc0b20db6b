from pathlib import Path

import pytest

from gnome_shell_screenshot import config as config_module
from gnome_shell_screenshot.config import Config


class FakeService:
    """Stands in for ScreenshotService; records calls and writes the file."""

    def __init__(self, ok=True, filename_used=None, write=True):
        self.ok = ok
        self.filename_used = filename_used
        self.write = write
        self.calls = []

    def _reply(self, filename):
        if self.write:
            Path(filename).write_bytes(b"\x89PNG\r\n\x1a\n")
        used = self.filename_used if self.filename_used is not None else filename
        return self.ok, used

    def screenshot(self, include_cursor, flash, filename):
        self.calls.append(("Screenshot", include_cursor, flash, filename))
        return self._reply(filename)

    def screenshot_window(self, include_frame, include_cursor, flash, filename):
        self.calls.append(("ScreenshotWindow", include_frame, include_cursor, flash, filename))
        return self._reply(filename)

    def screenshot_area(self, x, y, width, height, flash, filename):
        self.calls.append(("ScreenshotArea", x, y, width, height, flash, filename))
        return self._reply(filename)


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv("GNOME_SHELL_SCREENSHOT_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.setenv("GNOME_SHELL_SCREENSHOT_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("GNOME_SHELL_SCREENSHOT_SAVE_LOCATION", str(tmp_path / "Pictures"))
    monkeypatch.setattr(config_module, "_config", None)


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(cache_dir=tmp_path / "cache", save_location=tmp_path / "Pictures")


@pytest.fixture
def fake_service():
    return FakeService()
