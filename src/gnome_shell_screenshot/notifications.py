"""Desktop notifications for screenshots and uploads (libnotify).

Notifications are grouped under the "Screenshot Tool" source. Servers that
do not advertise the ``actions`` capability get the same notifications
without buttons.
"""

import logging
import math
from typing import Optional

log = logging.getLogger(__name__)

SOURCE_NAME = "Screenshot Tool"
NOTIFICATION_ICON = "camera-photo-symbolic"
ERROR_ICON = "dialog-error"

# Shown notifications, held until their "closed" signal
_active: list = []


def _notify_module():
    import gi
    gi.require_version("Notify", "0.7")
    from gi.repository import Notify
    if not Notify.is_initted():
        Notify.init(SOURCE_NAME)
    return Notify


def server_supports_actions() -> bool:
    Notify = _notify_module()
    return "actions" in (Notify.get_server_caps() or [])


def pending() -> bool:
    """True while any shown notification is still open."""
    return bool(_active)


def banner_text(width: int, height: int) -> str:
    return f"Size: {width}x{height}."


def progress_text(sent: int, total: int) -> str:
    if total <= 0:
        return "0%"
    return f"{math.floor(100 * (sent / total))}%"


def screenshot_actions(config) -> list[tuple[str, str]]:
    """(id, label) pairs offered on a new-screenshot notification."""
    actions = [("copy", "Copy"), ("save", "Save")]
    if config.enable_imgur:
        if config.imgur_auto_upload:
            actions.append(("uploading", "Uploading To Imgur..."))
        else:
            actions.append(("upload", "Upload To Imgur"))
    return actions


class _BaseNotification:
    """Keeps a Notify.Notification alive and routes its actions."""

    def __init__(self, title: str, body: Optional[str], icon: str):
        Notify = _notify_module()
        self.notification = Notify.Notification.new(title, body, icon)
        self.notification.connect("closed", self._on_closed)
        self._actions_supported = server_supports_actions()

    def _add_action(self, action_id: str, label: str) -> None:
        if self._actions_supported:
            self.notification.add_action(action_id, label, self._on_action)

    def _on_action(self, notification, action_id, *args) -> None:
        handler = getattr(self, f"_on_{action_id.replace('-', '_')}", None)
        if handler is None:
            log.debug("No handler for action %s", action_id)
            return
        handler()

    def _on_closed(self, notification) -> None:
        if self in _active:
            _active.remove(self)

    def update(self, title: str, body: Optional[str]) -> None:
        self.notification.update(title, body, None)
        self.show()

    def show(self) -> None:
        from gi.repository import GLib
        try:
            self.notification.show()
        except GLib.Error as e:
            log.warning("Could not show notification: %s", e.message)
            return
        if self not in _active:
            _active.append(self)


class ScreenshotNotification(_BaseNotification):
    """New-screenshot notification with Copy, Save and Upload buttons."""

    def __init__(self, screenshot):
        super().__init__(
            "New Screenshot",
            banner_text(screenshot.width, screenshot.height),
            str(screenshot.path),
        )
        self._screenshot = screenshot
        self._add_action("default", "Open")
        for action_id, label in screenshot_actions(screenshot.config):
            self._add_action(action_id, label)

    def _on_default(self):
        self._screenshot.launch_open()

    def _on_copy(self):
        self._screenshot.copy_clipboard(self._screenshot.config.copy_button_action)

    def _on_save(self):
        self._screenshot.launch_save()

    def _on_upload(self):
        self._screenshot.imgur_start_upload()

    def _on_uploading(self):
        pass


class ErrorNotification(_BaseNotification):
    def __init__(self, message: str):
        super().__init__("Error", str(message), ERROR_ICON)


class ImgurNotification(_BaseNotification):
    """Follows an upload: percentage, then failure or the final link."""

    def __init__(self, screenshot):
        super().__init__("Imgur Upload", None, NOTIFICATION_ICON)
        from gi.repository import GLib
        self.notification.set_hint("resident", GLib.Variant("b", True))
        self.notification.set_category("transfer")

        self._screenshot = screenshot
        self._upload = screenshot.imgur_upload
        self._upload.connect("progress", self._on_upload_progress)
        self._upload.connect("error", self._on_upload_error)
        self._upload.connect("done", self._on_upload_done)
        self._update_actions()

    def _update_actions(self) -> None:
        self.notification.clear_actions()
        self._add_action("default", "Open")
        if self._screenshot.is_imgur_upload_complete():
            self._add_action("copy-link", "Copy Link")
            self._add_action("delete", "Delete")

    def _on_upload_progress(self, upload, sent, total):
        self.update("Imgur Upload", progress_text(sent, total))

    def _on_upload_error(self, upload, message):
        self.update("Imgur Upload Failed", message)

    def _on_upload_done(self, upload):
        self._update_actions()
        self.update("Imgur Upload Successful", upload.link)

    def _on_default(self):
        if self._screenshot.is_imgur_upload_complete():
            self._screenshot.imgur_open_url()
        else:
            self._upload.connect("done", lambda upload: self._screenshot.imgur_open_url())

    def _on_copy_link(self):
        self._screenshot.imgur_copy_url()

    def _on_delete(self):
        from .imgur import UploadError
        try:
            self._screenshot.imgur_delete()
        except UploadError as e:
            self.update("Imgur Delete Failed", str(e))
            return
        self._update_actions()
        self.update("Imgur Upload Deleted", None)


def _show(factory, *args):
    # GLib.Error derives from RuntimeError; a missing typelib raises ValueError
    try:
        notification = factory(*args)
    except (ImportError, ValueError, RuntimeError) as e:
        log.warning("Could not show notification: %s", e)
        return None
    notification.show()
    return notification


def notify_screenshot(screenshot) -> Optional[ScreenshotNotification]:
    return _show(ScreenshotNotification, screenshot)


def notify_error(message: str) -> Optional[ErrorNotification]:
    return _show(ErrorNotification, message)


def notify_imgur_upload(screenshot) -> Optional[ImgurNotification]:
    """Follow the screenshot's running upload. Returns None if notifications are unavailable."""
    return _show(ImgurNotification, screenshot)
