"""Client for the shell's org.gnome.Shell.Screenshot D-Bus service.

Every call is a single blocking request on the session bus and returns
``(success, filename_used)`` exactly as the service reports it. Checking
those values is left to the caller.
"""

import logging

log = logging.getLogger(__name__)

BUS_NAME = "org.gnome.Shell.Screenshot"
OBJECT_PATH = "/org/gnome/Shell/Screenshot"
INTERFACE_NAME = "org.gnome.Shell.Screenshot"

# https://gitlab.gnome.org/GNOME/gnome-shell/blob/main/data/dbus-interfaces/org.gnome.Shell.Screenshot.xml
INTERFACE_XML = """
<node>
  <interface name="org.gnome.Shell.Screenshot">
    <method name="Screenshot">
      <arg type="b" direction="in" name="include_cursor"/>
      <arg type="b" direction="in" name="flash"/>
      <arg type="s" direction="in" name="filename"/>
      <arg type="b" direction="out" name="success"/>
      <arg type="s" direction="out" name="filename_used"/>
    </method>
    <method name="ScreenshotWindow">
      <arg type="b" direction="in" name="include_frame"/>
      <arg type="b" direction="in" name="include_cursor"/>
      <arg type="b" direction="in" name="flash"/>
      <arg type="s" direction="in" name="filename"/>
      <arg type="b" direction="out" name="success"/>
      <arg type="s" direction="out" name="filename_used"/>
    </method>
    <method name="ScreenshotArea">
      <arg type="i" direction="in" name="x"/>
      <arg type="i" direction="in" name="y"/>
      <arg type="i" direction="in" name="width"/>
      <arg type="i" direction="in" name="height"/>
      <arg type="b" direction="in" name="flash"/>
      <arg type="s" direction="in" name="filename"/>
      <arg type="b" direction="out" name="success"/>
      <arg type="s" direction="out" name="filename_used"/>
    </method>
  </interface>
</node>
"""


def _gio():
    """Import Gio and GLib on first use."""
    import gi
    gi.require_version("Gio", "2.0")
    from gi.repository import Gio, GLib
    return Gio, GLib


class ServiceError(Exception):
    """Raised when the D-Bus call itself fails."""
    pass


class ScreenshotService:
    """Synchronous proxy for the shell screenshot interface."""

    def __init__(self, proxy=None):
        self._proxy = proxy

    @property
    def proxy(self):
        if self._proxy is None:
            Gio, GLib = _gio()
            node_info = Gio.DBusNodeInfo.new_for_xml(INTERFACE_XML)
            try:
                self._proxy = Gio.DBusProxy.new_for_bus_sync(
                    Gio.BusType.SESSION,
                    Gio.DBusProxyFlags.DO_NOT_LOAD_PROPERTIES,
                    node_info.lookup_interface(INTERFACE_NAME),
                    BUS_NAME,
                    OBJECT_PATH,
                    INTERFACE_NAME,
                    None,
                )
            except GLib.Error as e:
                raise ServiceError(f"Could not connect to {BUS_NAME}: {e.message}")
        return self._proxy

    def _call(self, method: str, signature: str, args: tuple) -> tuple[bool, str]:
        Gio, GLib = _gio()
        log.debug("Calling %s%s", method, args)
        try:
            reply = self.proxy.call_sync(
                method,
                GLib.Variant(signature, args),
                Gio.DBusCallFlags.NONE,
                -1,
                None,
            )
        except GLib.Error as e:
            raise ServiceError(f"{method} failed: {e.message}")
        success, filename_used = reply.unpack()
        return bool(success), filename_used

    def screenshot(self, include_cursor: bool, flash: bool, filename: str) -> tuple[bool, str]:
        """Capture the whole desktop."""
        return self._call("Screenshot", "(bbs)", (include_cursor, flash, filename))

    def screenshot_window(
        self,
        include_frame: bool,
        include_cursor: bool,
        flash: bool,
        filename: str,
    ) -> tuple[bool, str]:
        """Capture the focused window."""
        return self._call(
            "ScreenshotWindow",
            "(bbbs)",
            (include_frame, include_cursor, flash, filename),
        )

    def screenshot_area(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        flash: bool,
        filename: str,
    ) -> tuple[bool, str]:
        """Capture a rectangle given in screen coordinates."""
        return self._call(
            "ScreenshotArea",
            "(iiiibs)",
            (x, y, width, height, flash, filename),
        )
