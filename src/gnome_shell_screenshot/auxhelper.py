"""Companion helper: one screenshot through the shell's D-Bus service.

Usage:
    gnome-shell-screenshot-auxhelper --desktop --filename /tmp/shot.png
    gnome-shell-screenshot-auxhelper --area 10,20,300,200 --flash --filename /tmp/area.png

Any error is logged and the process exits with status 1.
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Optional

log = logging.getLogger(__name__)

MODE_ERROR = "must use --desktop, --area or --window"


class HelperError(Exception):
    """Raised for invalid arguments or an unusable service reply."""
    pass


class _HelperArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise HelperError(message)


@dataclass
class HelperOptions:
    """Parsed helper command line."""

    desktop: bool = False
    window: bool = False
    area: Optional[tuple[int, int, int, int]] = None
    include_cursor: bool = False
    include_frame: bool = True
    flash: bool = False
    filename: Optional[str] = None
    spawntest: bool = False
    ignore_dbus_ok: bool = False
    debug: bool = False
    argv: list[str] = field(default_factory=list)


def create_argument_parser() -> argparse.ArgumentParser:
    parser = _HelperArgumentParser(
        prog="gnome-shell-screenshot-auxhelper",
        description="Create a screenshot using the org.gnome.Shell.Screenshot D-Bus interface",
        allow_abbrev=False,
    )
    parser.add_argument("--desktop", action="store_true", help="make desktop screenshot")
    parser.add_argument("--window", action="store_true", help="make window screenshot")
    parser.add_argument("--area", metavar="COORDS", help="make area screenshot (x,y,w,h)")
    parser.add_argument("--include-cursor", action="store_true", help="include cursor (desktop only)")
    parser.add_argument("--include-frame", action="store_true", help="include frame (window only)")
    parser.add_argument("--flash", action="store_true", help="flash")
    parser.add_argument("--filename", metavar="FILENAME", help="output file")
    parser.add_argument("--spawntest", action="store_true", help="test GLib spawn call")
    parser.add_argument("--ignore-dbus-ok", action="store_true", help="ignore `ok` result of dbus call")
    parser.add_argument("--debug", action="store_true", help="print debug output")
    return parser


def parse_area(value: str) -> tuple[int, int, int, int]:
    """Parse ``x,y,w,h`` into four integers."""
    parts = value.split(",")
    try:
        coords = tuple(int(p) for p in parts)
    except ValueError:
        raise HelperError("invalid --area coords (must be 'x,y,w,h')")
    if len(coords) != 4:
        raise HelperError("invalid --area coords (must be 'x,y,w,h')")
    return coords


def join_area_value(argv: list[str]) -> list[str]:
    """Rewrite ``--area VALUE`` as ``--area=VALUE``.

    argparse reads a value such as ``-1920,0,800,600`` as an option, but
    negative origins are valid on multi-monitor layouts.
    """
    result = []
    args = iter(argv)
    for arg in args:
        if arg == "--area":
            value = next(args, None)
            if value is None:
                result.append(arg)
            else:
                result.append(f"--area={value}")
        else:
            result.append(arg)
    return result


def parse_options(argv: list[str]) -> HelperOptions:
    parser = create_argument_parser()
    args, unknown = parser.parse_known_args(join_area_value(argv))
    if unknown:
        raise HelperError(f"no such parameter {unknown[0]}")

    return HelperOptions(
        desktop=args.desktop,
        window=args.window,
        area=parse_area(args.area) if args.area is not None else None,
        include_cursor=args.include_cursor,
        # --include-frame restates the default
        include_frame=True,
        flash=args.flash,
        filename=args.filename,
        spawntest=args.spawntest,
        ignore_dbus_ok=args.ignore_dbus_ok,
        debug=args.debug,
        argv=list(argv),
    )


def spawn_helper(argv: list[str]) -> int:
    """Run the helper again as a GLib-spawned child and wait for it.

    Returns:
        Exit status of the child
    """
    import gi
    gi.require_version("GLib", "2.0")
    from gi.repository import GLib

    child_argv = [sys.executable, "-m", "gnome_shell_screenshot.auxhelper", *argv]
    log.debug("Spawning %s", child_argv)
    pid, _, _, _ = GLib.spawn_async(
        child_argv,
        flags=GLib.SpawnFlags.SEARCH_PATH | GLib.SpawnFlags.DO_NOT_REAP_CHILD,
    )

    loop = GLib.MainLoop()
    result = {"status": 1}

    def on_child_exit(child_pid, status):
        result["status"] = os.waitstatus_to_exitcode(status)
        GLib.spawn_close_pid(child_pid)
        loop.quit()

    GLib.child_watch_add(GLib.PRIORITY_DEFAULT, pid, on_child_exit)
    loop.run()
    log.debug("Child exited with status %d", result["status"])
    return result["status"]


def check_reply(opts: HelperOptions, ok: bool, filename_used: str) -> None:
    """Validate a ``(success, filename_used)`` reply against the request."""
    if not ok:
        if opts.ignore_dbus_ok:
            log.error("ok=false - ignore-dbus-ok set, continuing...")
        else:
            raise HelperError("ok=false")

    if opts.filename != filename_used:
        raise HelperError(
            f"path mismatch fileName={opts.filename} fileNameUsed={filename_used}"
        )


def run(opts: HelperOptions, service=None) -> int:
    """Execute a parsed helper invocation.

    Args:
        opts: Parsed options
        service: ScreenshotService-like object; created on demand if None

    Returns:
        Exit code
    """
    if opts.spawntest:
        return spawn_helper([a for a in opts.argv if a.lower() != "--spawntest"])

    filename = opts.filename
    if not filename:
        raise HelperError("required argument --filename")
    if not os.path.isabs(filename):
        raise HelperError("filename path must be absolute")

    modes = [m for m in (opts.desktop, opts.area is not None, opts.window) if m]
    if len(modes) != 1:
        raise HelperError(MODE_ERROR)

    if service is None:
        from .service import ScreenshotService
        service = ScreenshotService()

    if opts.desktop:
        log.debug("creating desktop screenshot...")
        ok, filename_used = service.screenshot(opts.include_cursor, opts.flash, filename)
    elif opts.area is not None:
        log.debug("creating area screenshot...")
        x, y, w, h = opts.area
        ok, filename_used = service.screenshot_area(x, y, w, h, opts.flash, filename)
    else:
        log.debug("creating window screenshot...")
        ok, filename_used = service.screenshot_window(
            opts.include_frame, opts.include_cursor, opts.flash, filename
        )

    check_reply(opts, ok, filename_used)
    log.debug("written %s", filename_used)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the helper.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        opts = parse_options(argv)
        if opts.debug:
            logging.getLogger().setLevel(logging.DEBUG)
        return run(opts)
    except Exception as e:
        log.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
