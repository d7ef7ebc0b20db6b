"""Screenshot capture through the shell's D-Bus service.

Two backends are available:
- ``dbus``: calls org.gnome.Shell.Screenshot in-process
- ``auxhelper``: runs the companion helper as a subprocess

Both return the path of a PNG written by the shell. Callers own the file.
"""

import logging
import subprocess
import sys
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .auxhelper import HelperError, HelperOptions, run as run_helper
from .config import Config, get_config

log = logging.getLogger(__name__)

MODES = ("desktop", "window", "area")
CACHE_PREFIX = "screenshot-"


class CaptureError(Exception):
    """Raised when capture fails."""
    pass


@dataclass
class CaptureRequest:
    """What to capture and how."""

    mode: str = "desktop"
    area: Optional[tuple[int, int, int, int]] = None
    include_cursor: bool = False
    include_frame: bool = True
    flash: bool = True
    delay_ms: int = 0

    def __post_init__(self):
        if self.mode not in MODES:
            raise CaptureError(f"Unknown capture mode: {self.mode}")
        if self.mode == "area" and self.area is None:
            raise CaptureError("Area capture requires coordinates")


def helper_arguments(request: CaptureRequest, filename: Path) -> list[str]:
    """Translate a request into auxhelper command-line arguments."""
    if request.mode == "area":
        # Joined with "=" so a negative origin is not taken for a flag
        args = ["--area=" + ",".join(str(c) for c in request.area)]
    else:
        args = [f"--{request.mode}"]
    if request.include_cursor:
        args.append("--include-cursor")
    if request.flash:
        args.append("--flash")
    args += ["--filename", str(filename)]
    return args


def prune_cache(cache_dir: Path, keep: int) -> list[Path]:
    """Delete all but the newest ``keep`` captures in the cache dir.

    Returns:
        The removed paths
    """
    if not cache_dir.is_dir():
        return []
    captures = sorted(
        cache_dir.glob(f"{CACHE_PREFIX}*.png"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )
    removed = []
    for path in captures[max(keep, 0):]:
        try:
            path.unlink()
        except OSError as e:
            log.warning("Could not remove old capture %s: %s", path, e)
            continue
        removed.append(path)
    if removed:
        log.debug("Pruned %d old captures", len(removed))
    return removed


def _new_filename(config: Config) -> Path:
    config.cache_dir.mkdir(parents=True, exist_ok=True)
    prune_cache(config.cache_dir, config.cache_keep - 1)
    tmp = tempfile.NamedTemporaryFile(
        dir=config.cache_dir, prefix=CACHE_PREFIX, suffix=".png", delete=False
    )
    tmp.close()
    path = Path(tmp.name).absolute()
    # The shell must create the file itself
    path.unlink()
    return path


def _capture_dbus(request: CaptureRequest, filename: Path, service=None) -> None:
    from .service import ServiceError

    opts = HelperOptions(
        desktop=request.mode == "desktop",
        window=request.mode == "window",
        area=request.area if request.mode == "area" else None,
        include_cursor=request.include_cursor,
        include_frame=request.include_frame,
        flash=request.flash,
        filename=str(filename),
    )
    try:
        run_helper(opts, service=service)
    except (HelperError, ServiceError) as e:
        raise CaptureError(f"Screenshot service call failed: {e}")


def _capture_auxhelper(request: CaptureRequest, filename: Path, config: Config) -> None:
    cmd = [sys.executable, "-m", "gnome_shell_screenshot.auxhelper"]
    cmd += helper_arguments(request, filename)
    log.debug("Running %s", cmd)
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=config.capture_timeout,
        )
    except subprocess.TimeoutExpired:
        raise CaptureError("Screenshot helper timed out")

    if result.returncode != 0:
        raise CaptureError(f"Screenshot helper failed: {result.stderr.strip()}")


def capture(
    request: CaptureRequest,
    config: Optional[Config] = None,
    filename: Optional[Path] = None,
    service=None,
) -> Path:
    """Take a screenshot.

    Args:
        request: Capture mode and flags
        config: Configuration object. If None, uses global config.
        filename: Absolute output path. Defaults to a new file in the cache dir.
        service: ScreenshotService-like object for the dbus backend

    Returns:
        Path to the PNG file

    Raises:
        CaptureError: If capture fails
    """
    config = config or get_config()
    if filename is None:
        filename = _new_filename(config)
    else:
        filename = Path(filename)
        if not filename.is_absolute():
            raise CaptureError(f"Screenshot filename must be absolute: {filename}")
    # Never remove a file the caller already had
    owned = not filename.exists()

    if request.delay_ms > 0:
        log.debug("Waiting %dms before capture", request.delay_ms)
        time.sleep(request.delay_ms / 1000.0)

    try:
        if config.backend == "auxhelper":
            _capture_auxhelper(request, filename, config)
        else:
            _capture_dbus(request, filename, service=service)
    except CaptureError:
        if owned:
            filename.unlink(missing_ok=True)
        raise

    if not filename.exists():
        raise CaptureError(f"Screenshot file was not written: {filename}")

    log.debug("Captured %s", filename)
    return filename
