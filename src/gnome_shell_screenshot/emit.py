"""
Structured events for capture and upload activity.

Each event is a single JSON line on stderr, next to (but distinguishable
from) regular log lines. Extra transports register with add_handler().

Event shape:
    {"event_type": "...", "timestamp": "...", "source": {"tool": "..."}, "data": {...}}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict], None]

EVENT_CATALOG = [
    {"event_type": "config.resolved", "data_fields": ["config_path", "source"]},
    {"event_type": "capture.started", "data_fields": ["capture_id", "mode", "backend"]},
    {"event_type": "capture.completed", "data_fields": ["capture_id", "mode", "success", "file_path", "error_message"]},
    {"event_type": "artifact.created", "data_fields": ["file_path", "file_type", "metadata"]},
    {"event_type": "upload.completed", "data_fields": ["file_path", "success", "link", "error_message"]},
    {"event_type": "error.handled", "data_fields": ["error_type", "message"]},
    {"event_type": "shutdown", "data_fields": []},
]

_handlers: List[EventHandler] = []
_source: str = "gnome-shell-screenshot"
_stderr_enabled: bool = True


def configure(source: str, stderr: bool = True) -> None:
    """Set the source name and whether events go to stderr."""
    global _source, _stderr_enabled
    _source = source
    _stderr_enabled = stderr


def add_handler(handler: EventHandler) -> None:
    _handlers.append(handler)


def remove_handler(handler: EventHandler) -> None:
    if handler in _handlers:
        _handlers.remove(handler)


def emit(event_type: str, data: Dict[str, Any]) -> None:
    """Emit one event to stderr and to every registered handler."""
    event = {
        "event_type": event_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "source": {"tool": _source},
        "data": data,
    }

    if _stderr_enabled:
        print(json.dumps(event, default=str), file=sys.stderr, flush=True)

    for handler in _handlers:
        try:
            handler(event)
        except Exception as exc:
            logger.debug("Event handler error: %s", exc)
