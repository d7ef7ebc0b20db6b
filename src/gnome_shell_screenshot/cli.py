"""Command-line interface for gnome-shell-screenshot.

Entry point flow:
1. Parse arguments (introspection flags short-circuit)
2. Capture through the shell screenshot service
3. Clipboard action, auto save, notification, optional Imgur upload
4. Keep a GLib main loop running while notifications or uploads are pending
"""

import argparse
import atexit
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Optional

from . import __version__
from .auxhelper import HelperError, join_area_value, parse_area
from .capture import CaptureError, CaptureRequest, capture
from .config import (
    Config,
    config_defaults,
    config_schema,
    config_to_dict,
    load_config,
    validate_config_file,
)
from .emit import EVENT_CATALOG, configure, emit

log = logging.getLogger(__name__)

IDLE_CHECK_SECONDS = 1


def create_argument_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI usage."""
    parser = argparse.ArgumentParser(
        prog="gnome-shell-screenshot",
        description="Screenshot tool for GNOME Shell sessions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                           # Desktop screenshot (default)
  %(prog)s --window                  # Focused window
  %(prog)s --area 100,100,800,600    # Specific area
  %(prog)s --delay 3000 --upload     # Wait 3s, then upload to Imgur
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"gnome-shell-screenshot {__version__}",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to config file (default: platform config dir)",
    )

    # Introspection
    parser.add_argument("--print-defaults", action="store_true", help="Print default configuration as JSON and exit")
    parser.add_argument("--print-config-schema", action="store_true", help="Print configuration schema as JSON and exit")
    parser.add_argument("--validate-config", action="store_true", help="Validate configuration file and exit")
    parser.add_argument("--print-resolved", action="store_true", help="Print resolved configuration as JSON and exit")
    parser.add_argument("--print-event-catalog", action="store_true", help="Print event catalog as JSON and exit")

    # Capture modes
    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument("--desktop", action="store_true", help="Capture the whole desktop (default)")
    mode_group.add_argument("--window", action="store_true", help="Capture the focused window")
    mode_group.add_argument("--area", metavar="X,Y,W,H", help="Capture an area (e.g., 100,100,800,600)")

    # Capture flags
    parser.add_argument("--delay", type=int, default=0, metavar="MS", help="Delay before capture in milliseconds")
    parser.add_argument("--include-cursor", action="store_true", help="Include the mouse cursor")
    parser.add_argument("--no-frame", action="store_true", help="Leave out the window frame (window only)")
    parser.add_argument("--no-flash", action="store_true", help="Do not flash the screen")

    # After capture
    parser.add_argument("--upload", action="store_true", help="Upload to Imgur after capture")
    parser.add_argument("--save", action="store_true", help="Save to the configured location")
    parser.add_argument("--no-notification", action="store_true", help="Do not show notifications")

    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    return parser


def _emit_json(payload: dict) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _handle_introspection(args: argparse.Namespace) -> Optional[int]:
    config_path = Path(args.config).expanduser() if args.config else None

    if args.print_defaults:
        _emit_json(config_defaults())
        return 0

    if args.print_config_schema:
        _emit_json(config_schema())
        return 0

    if args.validate_config:
        try:
            errors = validate_config_file(config_path)
        except ValueError as e:
            errors = [str(e)]
        for error in errors:
            print(error, file=sys.stderr)
        return 1 if errors else 0

    if args.print_resolved:
        _emit_json(config_to_dict(load_config(config_path=config_path)))
        return 0

    if args.print_event_catalog:
        _emit_json({"catalog": EVENT_CATALOG})
        return 0

    return None


def build_request(args: argparse.Namespace) -> CaptureRequest:
    """Build a CaptureRequest from parsed arguments."""
    if args.area:
        mode = "area"
    elif args.window:
        mode = "window"
    else:
        mode = "desktop"

    return CaptureRequest(
        mode=mode,
        area=parse_area(args.area) if args.area else None,
        include_cursor=args.include_cursor,
        include_frame=not args.no_frame,
        flash=not args.no_flash,
        delay_ms=max(0, args.delay),
    )


def build_overrides(args: argparse.Namespace) -> dict:
    overrides = {}
    if args.no_notification:
        overrides["enable_notification"] = False
    if args.save:
        overrides["save_screenshot"] = True
    if args.upload:
        overrides["enable_imgur"] = True
        overrides["imgur_auto_upload"] = True
    return overrides


def handle_capture(request: CaptureRequest, config: Config) -> int:
    """Capture, run post-capture actions and wait for pending notifications."""
    capture_id = str(uuid.uuid4())
    emit("capture.started", {"capture_id": capture_id, "mode": request.mode, "backend": config.backend})

    try:
        path = capture(request, config=config)
    except CaptureError as e:
        emit("error.handled", {"error_type": "CaptureError", "message": str(e)})
        emit("capture.completed", {
            "capture_id": capture_id,
            "mode": request.mode,
            "success": False,
            "error_message": str(e),
        })
        log.error("Capture failed: %s", e)
        if config.enable_notification:
            from .notifications import notify_error
            notify_error(str(e))
        return 1

    emit("capture.completed", {
        "capture_id": capture_id,
        "mode": request.mode,
        "success": True,
        "file_path": str(path),
    })

    from .screenshot import Screenshot
    screenshot = Screenshot(path, config)

    if config.clipboard_action != "none":
        screenshot.copy_clipboard(config.clipboard_action)

    if config.save_screenshot:
        screenshot.auto_save()

    if config.enable_notification:
        from .notifications import notify_screenshot
        notify_screenshot(screenshot)

    if config.enable_imgur and config.imgur_auto_upload:
        screenshot.imgur_start_upload()

    run_main_loop(screenshot)
    return 0


def run_main_loop(screenshot) -> None:
    """Serve notification actions until nothing is pending."""
    from .notifications import pending

    def busy() -> bool:
        upload = screenshot.imgur_upload
        return pending() or (upload is not None and upload.running)

    if not busy():
        return

    import gi
    gi.require_version("GLib", "2.0")
    from gi.repository import GLib

    loop = GLib.MainLoop()

    def check_idle():
        if busy():
            return GLib.SOURCE_CONTINUE
        loop.quit()
        return GLib.SOURCE_REMOVE

    GLib.timeout_add_seconds(IDLE_CHECK_SECONDS, check_idle)
    try:
        loop.run()
    except KeyboardInterrupt:
        log.debug("Interrupted")


def main(args: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_argument_parser()
    args = sys.argv[1:] if args is None else args
    parsed_args = parser.parse_args(join_area_value(args))

    result = _handle_introspection(parsed_args)
    if result is not None:
        return result

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.debug else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    configure("gnome-shell-screenshot")
    atexit.register(lambda: emit("shutdown", {}))

    config_path = Path(parsed_args.config).expanduser() if parsed_args.config else None
    config = load_config(config_path=config_path, overrides=build_overrides(parsed_args))
    emit("config.resolved", {
        "config_path": str(config_path or "default"),
        "source": "cli" if config_path else "default",
    })

    try:
        request = build_request(parsed_args)
    except (HelperError, CaptureError) as e:
        log.error("%s", e)
        return 1

    return handle_capture(request, config)


if __name__ == "__main__":
    sys.exit(main())
