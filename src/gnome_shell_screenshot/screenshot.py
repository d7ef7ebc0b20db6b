"""A captured screenshot and the actions available on it."""

import logging
from pathlib import Path
from typing import Optional

import gi
gi.require_version("GdkPixbuf", "2.0")
from gi.repository import GdkPixbuf

from . import notifications
from .config import Config, get_config
from .emit import emit
from .filename import format_filename, unique_path
from .output import copy_file, copy_image_to_clipboard, copy_text_to_clipboard, open_uri
from .upload import Upload

log = logging.getLogger(__name__)


class Screenshot:
    """Image file written by the shell, plus clipboard/save/open/upload actions."""

    def __init__(self, path: Path, config: Optional[Config] = None):
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Screenshot file does not exist: {self.path}")
        self.config = config or get_config()

        info = GdkPixbuf.Pixbuf.get_file_info(str(self.path))
        if info is None or info[0] is None:
            raise ValueError(f"Not an image file: {self.path}")
        _, self.width, self.height = info

        self.imgur_upload: Optional[Upload] = None

    @property
    def uri(self) -> str:
        return self.path.as_uri()

    def default_filename(self) -> str:
        return format_filename(self.config.filename_template, self.width, self.height)

    def copy_clipboard(self, action: str) -> bool:
        """Copy the image (``copy-image``) or its path (``copy-path``)."""
        if action == "copy-path":
            return copy_text_to_clipboard(str(self.path), self.config)
        if action == "copy-image":
            return copy_image_to_clipboard(self.path, self.config)
        log.debug("Clipboard action %r ignored", action)
        return False

    def save_to(self, destination: Path) -> Path:
        result = copy_file(self.path, Path(destination))
        emit("artifact.created", {
            "file_path": str(result),
            "file_type": "screenshot",
            "metadata": {"width": self.width, "height": self.height},
        })
        return result

    def auto_save(self) -> Path:
        """Save into the configured location with the templated name."""
        destination = unique_path(self.config.save_location, self.default_filename())
        return self.save_to(destination)

    def launch_save(self) -> Optional[Path]:
        """Ask for a destination with a file chooser, then save there."""
        gi.require_version("Gtk", "3.0")
        from gi.repository import Gtk

        dialog = Gtk.FileChooserDialog(title="Save Screenshot", action=Gtk.FileChooserAction.SAVE)
        dialog.add_buttons("_Cancel", Gtk.ResponseType.CANCEL, "_Save", Gtk.ResponseType.ACCEPT)
        dialog.set_do_overwrite_confirmation(True)
        self.config.save_location.mkdir(parents=True, exist_ok=True)
        dialog.set_current_folder(str(self.config.save_location))
        dialog.set_current_name(self.default_filename())
        try:
            if dialog.run() != Gtk.ResponseType.ACCEPT:
                return None
            return self.save_to(Path(dialog.get_filename()))
        finally:
            dialog.destroy()

    def launch_open(self) -> bool:
        return open_uri(self.uri)

    # Imgur

    def imgur_start_upload(self) -> Upload:
        """Upload to Imgur and show a progress notification."""
        if self.imgur_upload is not None:
            return self.imgur_upload

        self.imgur_upload = Upload(self.path, self.config.imgur_client_id)
        self.imgur_upload.connect("done", self._on_imgur_done)
        if self.config.enable_notification:
            notifications.notify_imgur_upload(self)
        self.imgur_upload.start()
        return self.imgur_upload

    def _on_imgur_done(self, upload):
        if self.config.imgur_auto_copy_link:
            self.imgur_copy_url()
        if self.config.imgur_auto_open_link:
            self.imgur_open_url()

    def is_imgur_upload_complete(self) -> bool:
        return self.imgur_upload is not None and self.imgur_upload.complete

    def imgur_open_url(self) -> bool:
        if not self.is_imgur_upload_complete():
            log.error("no completed imgur upload")
            return False
        return open_uri(self.imgur_upload.link)

    def imgur_copy_url(self) -> bool:
        if not self.is_imgur_upload_complete():
            log.error("no completed imgur upload")
            return False
        return copy_text_to_clipboard(self.imgur_upload.link, self.config)

    def imgur_delete(self) -> None:
        if not self.is_imgur_upload_complete():
            log.error("no completed imgur upload")
            return
        self.imgur_upload.delete_remote()
        self.imgur_upload = None
