import pytest

gi = pytest.importorskip("gi")
try:
    gi.require_version("GdkPixbuf", "2.0")
    from gi.repository import GdkPixbuf
except (ImportError, ValueError):
    pytest.skip("GdkPixbuf typelib not available", allow_module_level=True)

from gnome_shell_screenshot import screenshot as screenshot_module
from gnome_shell_screenshot.screenshot import Screenshot


@pytest.fixture
def png(tmp_path):
    path = tmp_path / "cache" / "shot.png"
    path.parent.mkdir(parents=True)
    pixbuf = GdkPixbuf.Pixbuf.new(GdkPixbuf.Colorspace.RGB, False, 8, 40, 30)
    pixbuf.fill(0x336699FF)
    pixbuf.savev(str(path), "png", [], [])
    return path


def test_reads_size(png, config) -> None:
    shot = Screenshot(png, config)
    assert (shot.width, shot.height) == (40, 30)
    assert shot.uri.startswith("file://")


def test_missing_file(tmp_path, config) -> None:
    with pytest.raises(FileNotFoundError):
        Screenshot(tmp_path / "nope.png", config)


def test_copy_clipboard_dispatch(png, config, monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(screenshot_module, "copy_text_to_clipboard", lambda text, cfg: calls.append(("text", text)) or True)
    monkeypatch.setattr(screenshot_module, "copy_image_to_clipboard", lambda path, cfg: calls.append(("image", path)) or True)
    shot = Screenshot(png, config)

    assert shot.copy_clipboard("copy-path")
    assert shot.copy_clipboard("copy-image")
    assert not shot.copy_clipboard("none")
    assert calls == [("text", str(png)), ("image", png)]


def test_auto_save_uses_template(png, config) -> None:
    config.filename_template = "{N}-{w}x{h}"
    shot = Screenshot(png, config)
    first = shot.auto_save()
    second = shot.auto_save()
    assert first == config.save_location / "Screenshot-40x30.png"
    assert second == config.save_location / "Screenshot-40x30_1.png"
    assert first.read_bytes() == png.read_bytes()


def test_imgur_actions_need_completed_upload(png, config) -> None:
    shot = Screenshot(png, config)
    assert not shot.is_imgur_upload_complete()
    assert shot.imgur_copy_url() is False
    assert shot.imgur_open_url() is False
