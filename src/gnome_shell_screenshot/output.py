"""Desktop side effects for captured screenshots.

Handles:
- Copying image data or text to the clipboard (wl-copy)
- Opening files and links with the default application
- Copying a screenshot to its final location
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from .config import Config, get_config

log = logging.getLogger(__name__)


def copy_image_to_clipboard(path: Path, config: Optional[Config] = None) -> bool:
    """Copy PNG image data to the clipboard."""
    config = config or get_config()
    try:
        with open(path, "rb") as f:
            subprocess.run([config.wl_copy, "-t", "image/png"], stdin=f, check=True)
        log.debug("Copied image to clipboard")
        return True
    except (OSError, subprocess.CalledProcessError) as e:
        log.warning("Failed to copy image to clipboard: %s", e)
        return False


def copy_text_to_clipboard(text: str, config: Optional[Config] = None) -> bool:
    """Copy plain text to the clipboard."""
    config = config or get_config()
    try:
        subprocess.run([config.wl_copy], input=text, text=True, check=True)
        log.debug("Copied text to clipboard: %s", text)
        return True
    except (OSError, subprocess.CalledProcessError) as e:
        log.warning("Failed to copy text to clipboard: %s", e)
        return False


def open_uri(uri: str) -> bool:
    """Open a URI with the default handler."""
    try:
        import gi
        gi.require_version("Gio", "2.0")
        from gi.repository import Gio, GLib
    except (ImportError, ValueError) as e:
        log.warning("Cannot open %s: %s", uri, e)
        return False

    try:
        Gio.AppInfo.launch_default_for_uri(uri, None)
        return True
    except GLib.Error as e:
        log.warning("Failed to open %s: %s", uri, e.message)
        return False


def copy_file(source: Path, destination: Path) -> Path:
    """Copy a screenshot to ``destination``, creating parent directories."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)
    log.info("Screenshot saved: %s", destination)
    return destination
