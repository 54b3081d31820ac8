from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from markprompter.core import scroll


def _config_dir() -> Path:
    override = os.getenv("MARKPROMPTER_CONFIG_DIR")
    return Path(override) if override else Path.home()


def global_config_path() -> Path:
    return _config_dir() / ".markprompter_config.json"


def themes_path() -> Path:
    return _config_dir() / ".markprompter_themes.json"


def debug_enabled(var_name: str) -> bool:
    """Check if a debug flag is enabled."""
    return os.getenv(var_name, "0") not in ("0", "false", "False", "", None)


def init_settings() -> None:
    global_config_path().parent.mkdir(parents=True, exist_ok=True)


def _read_global_config() -> dict:
    """Return the parsed global config, or an empty dict on error/missing."""
    path = global_config_path()
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError, OSError):
        return {}
    return payload if isinstance(payload, dict) else {}


def _update_global_config(updates: dict) -> None:
    """Merge updates into global config file."""
    existing = _read_global_config()
    existing.update(updates)
    path = global_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(existing, indent=2), encoding="utf-8")


def _load_float(key: str, default: float, low: float, high: float) -> float:
    payload = _read_global_config()
    try:
        value = float(payload.get(key, default))
    except (TypeError, ValueError):
        return default
    return max(low, min(high, value))


def load_scroll_speed() -> float:
    """Return the preferred scroll speed in px/s (default: 50)."""
    return _load_float("scroll_speed", scroll.DEFAULT_SPEED, scroll.MIN_SPEED, scroll.MAX_SPEED)


def save_scroll_speed(speed: float) -> None:
    _update_global_config({"scroll_speed": float(speed)})


def load_font_size() -> float:
    return _load_float("font_size", scroll.DEFAULT_FONT_SIZE, scroll.MIN_FONT_SIZE, scroll.MAX_FONT_SIZE)


def save_font_size(size: float) -> None:
    _update_global_config({"font_size": float(size)})


def load_heading_pause_duration() -> float:
    """Return seconds to hold at each heading (default: 2.0)."""
    return _load_float(
        "heading_pause_duration",
        scroll.DEFAULT_HEADING_PAUSE,
        scroll.MIN_HEADING_PAUSE,
        scroll.MAX_HEADING_PAUSE,
    )


def save_heading_pause_duration(seconds: float) -> None:
    _update_global_config({"heading_pause_duration": float(seconds)})


def load_pause_at_headings() -> bool:
    """Return whether scrolling holds at headings (default: False)."""
    payload = _read_global_config()
    return bool(payload.get("pause_at_headings", False))


def save_pause_at_headings(enabled: bool) -> None:
    _update_global_config({"pause_at_headings": bool(enabled)})


def load_auto_restart() -> bool:
    payload = _read_global_config()
    return bool(payload.get("auto_restart", False))


def save_auto_restart(enabled: bool) -> None:
    _update_global_config({"auto_restart": bool(enabled)})


def load_last_file() -> Optional[str]:
    payload = _read_global_config()
    last = payload.get("last_file")
    return last if isinstance(last, str) else None


def save_last_file(path: Optional[str]) -> None:
    _update_global_config({"last_file": path})
