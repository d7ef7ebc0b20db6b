"""Observable Imgur upload.

The HTTP request runs in a worker thread. Signals are re-emitted on the
GLib main loop so handlers can touch notifications directly:

    progress(bytes, total)
    error(message)
    done()
"""

import logging
import threading
from pathlib import Path
from typing import Optional

import gi
gi.require_version("GLib", "2.0")
from gi.repository import GLib, GObject

from . import imgur
from .emit import emit

log = logging.getLogger(__name__)


class Upload(GObject.Object):
    """A single upload of a screenshot file."""

    __gsignals__ = {
        "progress": (GObject.SignalFlags.RUN_FIRST, None, (GObject.TYPE_INT64, GObject.TYPE_INT64)),
        "error": (GObject.SignalFlags.RUN_FIRST, None, (str,)),
        "done": (GObject.SignalFlags.RUN_FIRST, None, ()),
    }

    def __init__(self, path: Path, client_id: str):
        super().__init__()
        self.path = Path(path)
        self.client_id = client_id
        self.response_data: Optional[dict] = None
        self.error_message: Optional[str] = None
        self._thread: Optional[threading.Thread] = None
        self._final_pending = False

    @property
    def link(self) -> Optional[str]:
        if self.response_data:
            return self.response_data.get("link")
        return None

    @property
    def complete(self) -> bool:
        return self.response_data is not None

    @property
    def running(self) -> bool:
        # A queued done/error still counts until handled on the main loop
        return self._thread is not None and (self._thread.is_alive() or self._final_pending)

    def _emit_idle(self, signal: str, *args) -> None:
        final = signal in ("done", "error")
        if final:
            self._final_pending = True

        def dispatch():
            try:
                self.emit(signal, *args)
            finally:
                if final:
                    self._final_pending = False
            return GLib.SOURCE_REMOVE
        GLib.idle_add(dispatch)

    def _on_progress(self, sent: int, total: int) -> None:
        self._emit_idle("progress", sent, total)

    def _run(self) -> None:
        try:
            data = imgur.upload_image(self.path, self.client_id, progress=self._on_progress)
        except (imgur.UploadError, OSError) as e:
            log.warning("Upload of %s failed: %s", self.path, e)
            self.error_message = str(e)
            emit("upload.completed", {
                "file_path": str(self.path),
                "success": False,
                "error_message": self.error_message,
            })
            self._emit_idle("error", self.error_message)
            return

        self.response_data = data
        emit("upload.completed", {
            "file_path": str(self.path),
            "success": True,
            "link": data.get("link"),
        })
        self._emit_idle("done")

    def start(self) -> None:
        """Start the upload in the background."""
        if self.running:
            return
        self._thread = threading.Thread(target=self._run, name="imgur-upload", daemon=True)
        self._thread.start()

    def delete_remote(self) -> None:
        """Delete the uploaded image from Imgur."""
        if not self.response_data or not self.response_data.get("deletehash"):
            raise imgur.UploadError("Nothing to delete: upload not complete")
        imgur.delete_image(self.response_data["deletehash"], self.client_id)
        self.response_data = None
