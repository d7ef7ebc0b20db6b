"""Configuration management for gnome-shell-screenshot.

Configuration priority (highest to lowest):
1. CLI overrides (passed to load_config)
2. Environment variables (GNOME_SHELL_SCREENSHOT_*)
3. Config file (~/.config/gnome-shell-screenshot/config.yaml)
4. Built-in defaults
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from platformdirs import user_cache_dir, user_config_dir, user_pictures_dir

APP_NAME = "gnome-shell-screenshot"
ENV_PREFIX = "GNOME_SHELL_SCREENSHOT"
CONFIG_DIR = Path(user_config_dir(APP_NAME))
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.yaml"

BACKENDS = {"dbus", "auxhelper"}
CLIPBOARD_ACTIONS = {"none", "copy-image", "copy-path"}
COPY_BUTTON_ACTIONS = {"copy-image", "copy-path"}

DEFAULT_FILENAME_TEMPLATE = "{N}-{Y}{m}{d}-{H}{M}{S}-{w}x{h}"
DEFAULT_IMGUR_CLIENT_ID = "c5c1369fb46f29e"


@dataclass
class Config:
    """Screenshot tool configuration."""

    # Capture
    backend: str = "dbus"
    capture_timeout: int = 10

    # Paths
    cache_dir: Path = field(default_factory=lambda: Path(user_cache_dir(APP_NAME)))
    cache_keep: int = 20
    save_location: Path = field(default_factory=lambda: Path(user_pictures_dir()))
    filename_template: str = DEFAULT_FILENAME_TEMPLATE

    # After capture
    save_screenshot: bool = False
    clipboard_action: str = "none"
    copy_button_action: str = "copy-image"
    enable_notification: bool = True

    # Imgur
    enable_imgur: bool = True
    imgur_auto_upload: bool = False
    imgur_auto_copy_link: bool = False
    imgur_auto_open_link: bool = False
    imgur_client_id: str = DEFAULT_IMGUR_CLIENT_ID

    # Binaries
    wl_copy: str = "wl-copy"

    def __post_init__(self):
        if isinstance(self.cache_dir, str):
            self.cache_dir = Path(self.cache_dir)
        if isinstance(self.save_location, str):
            self.save_location = Path(self.save_location)


PATH_KEYS = {"cache_dir", "save_location"}
INT_KEYS = {"capture_timeout", "cache_keep"}
BOOL_KEYS = {
    "save_screenshot",
    "enable_notification",
    "enable_imgur",
    "imgur_auto_upload",
    "imgur_auto_copy_link",
    "imgur_auto_open_link",
}


def _env(name: str) -> Optional[str]:
    return os.environ.get(f"{ENV_PREFIX}_{name}")


def _config_path_from_env() -> Optional[Path]:
    value = _env("CONFIG")
    if value:
        return Path(value).expanduser()
    return None


def _load_config_file(path: Path, strict: bool = False) -> dict:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        if strict:
            raise ValueError(f"Failed to parse config file {path}: {exc}")
        return {}

    if not isinstance(data, dict):
        if strict:
            raise ValueError(f"Config file {path} must be a mapping")
        return {}

    return data


def _expand_path(value: Any) -> Any:
    if value is None:
        return value
    return str(Path(value).expanduser())


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "on")


def config_defaults() -> dict:
    return {
        "backend": "dbus",
        "capture_timeout": 10,
        "cache_dir": str(Path(user_cache_dir(APP_NAME))),
        "cache_keep": 20,
        "save_location": str(Path(user_pictures_dir())),
        "filename_template": DEFAULT_FILENAME_TEMPLATE,
        "save_screenshot": False,
        "clipboard_action": "none",
        "copy_button_action": "copy-image",
        "enable_notification": True,
        "enable_imgur": True,
        "imgur_auto_upload": False,
        "imgur_auto_copy_link": False,
        "imgur_auto_open_link": False,
        "imgur_client_id": DEFAULT_IMGUR_CLIENT_ID,
        "wl_copy": "wl-copy",
    }


def _load_env_overrides() -> dict:
    config: dict[str, Any] = {}

    for key in config_defaults():
        value = _env(key.upper())
        if value is None:
            continue
        if key in PATH_KEYS:
            config[key] = _expand_path(value)
        elif key in INT_KEYS:
            try:
                config[key] = int(value)
            except ValueError:
                continue
        elif key in BOOL_KEYS:
            config[key] = _parse_bool(value)
        else:
            config[key] = value

    return config


def resolve_config_path(config_path: Optional[Path] = None) -> Path:
    return config_path or _config_path_from_env() or DEFAULT_CONFIG_PATH


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[dict] = None,
    strict: bool = False,
) -> Config:
    """Load configuration from all sources."""
    resolved_path = resolve_config_path(config_path)

    config_dict = config_defaults()
    file_config = _load_config_file(resolved_path, strict=strict)
    config_dict.update({k: v for k, v in file_config.items() if k in config_dict})
    config_dict.update(_load_env_overrides())

    if overrides:
        for key, value in overrides.items():
            if value is not None:
                config_dict[key] = value

    for key in PATH_KEYS:
        if config_dict.get(key) is not None:
            config_dict[key] = _expand_path(config_dict[key])

    return Config(**config_dict)


# Global config instance (lazy loaded)
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def config_schema() -> dict:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "properties": {
            "backend": {"type": "string", "enum": sorted(BACKENDS)},
            "capture_timeout": {"type": "integer", "minimum": 1},
            "cache_dir": {"type": "string"},
            "cache_keep": {"type": "integer", "minimum": 1},
            "save_location": {"type": "string"},
            "filename_template": {"type": "string"},
            "save_screenshot": {"type": "boolean"},
            "clipboard_action": {"type": "string", "enum": sorted(CLIPBOARD_ACTIONS)},
            "copy_button_action": {"type": "string", "enum": sorted(COPY_BUTTON_ACTIONS)},
            "enable_notification": {"type": "boolean"},
            "enable_imgur": {"type": "boolean"},
            "imgur_auto_upload": {"type": "boolean"},
            "imgur_auto_copy_link": {"type": "boolean"},
            "imgur_auto_open_link": {"type": "boolean"},
            "imgur_client_id": {"type": "string"},
            "wl_copy": {"type": "string"},
        },
        "additionalProperties": False,
    }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config_dict(data: Any) -> list[str]:
    errors: list[str] = []
    if not isinstance(data, dict):
        return ["Config must be a mapping/object"]

    props = config_schema()["properties"]

    for key, value in data.items():
        if key not in props:
            errors.append(f"Unknown config key: {key}")
            continue

        spec = props[key]
        expected = spec["type"]
        if expected == "string" and not isinstance(value, str):
            errors.append(f"{key} must be a string")
            continue
        if expected == "integer" and not _is_int(value):
            errors.append(f"{key} must be an integer")
            continue
        if expected == "boolean" and not isinstance(value, bool):
            errors.append(f"{key} must be a boolean")
            continue

        if "enum" in spec and value not in spec["enum"]:
            errors.append(f"{key} must be one of: {', '.join(spec['enum'])}")
        if "minimum" in spec and value < spec["minimum"]:
            errors.append(f"{key} must be >= {spec['minimum']}")

    return errors


def validate_config_file(config_path: Optional[Path] = None) -> list[str]:
    path = resolve_config_path(config_path)
    if not path.exists():
        return []
    data = _load_config_file(path, strict=True)
    return validate_config_dict(data)


def config_to_dict(config: Config) -> dict:
    result = {}
    for key in config_defaults():
        value = getattr(config, key)
        result[key] = str(value) if isinstance(value, Path) else value
    return result
