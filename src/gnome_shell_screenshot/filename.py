"""Screenshot filename templates.

Placeholders:
    {N}   "Screenshot"
    {Y}   year              {m}  month (01-12)   {d}  day (01-31)
    {H}   hour (00-23)      {M}  minute          {S}  second
    {w}   image width       {h}  image height
    {hn}  host name
"""

import socket
from datetime import datetime
from pathlib import Path
from typing import Optional


def template_parameters(
    width: int,
    height: int,
    now: Optional[datetime] = None,
    hostname: Optional[str] = None,
) -> dict[str, str]:
    now = now or datetime.now()
    return {
        "N": "Screenshot",
        "Y": f"{now.year:04d}",
        "m": f"{now.month:02d}",
        "d": f"{now.day:02d}",
        "H": f"{now.hour:02d}",
        "M": f"{now.minute:02d}",
        "S": f"{now.second:02d}",
        "w": str(width),
        "h": str(height),
        "hn": hostname if hostname is not None else socket.gethostname(),
    }


def format_filename(
    template: str,
    width: int,
    height: int,
    now: Optional[datetime] = None,
    hostname: Optional[str] = None,
) -> str:
    """Expand a template into a ``.png`` file name.

    Unknown placeholders are left as-is; path separators become ``_``.
    """
    result = template
    for key, value in template_parameters(width, height, now, hostname).items():
        result = result.replace("{" + key + "}", value)
    return result.replace("/", "_") + ".png"


def unique_path(directory: Path, name: str) -> Path:
    """Return ``directory / name``, suffixed with _1, _2, ... if taken."""
    candidate = directory / name
    stem, suffix = candidate.stem, candidate.suffix
    n = 1
    while candidate.exists():
        candidate = directory / f"{stem}_{n}{suffix}"
        n += 1
    return candidate
