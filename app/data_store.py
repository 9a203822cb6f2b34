"""Data persistence: editor settings, session config and logging setup."""
import json
import logging
import os
from dataclasses import fields
from typing import Optional

from models import EditorSettings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# ── App-level paths (settings live next to the app, not next to the PDFs) ────

_APP_DIR = os.path.dirname(os.path.abspath(__file__))
_APP_DATA_DIR = os.path.join(os.path.dirname(_APP_DIR), "data")
SETTINGS_PATH = os.path.join(_APP_DATA_DIR, "settings.json")
SESSION_CONFIG_PATH = os.path.join(_APP_DATA_DIR, "session_config.json")


# ── Logging ──────────────────────────────────────────────────────────────────

def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
    )


def set_debug(enabled: bool) -> None:
    """Switch the root logger between DEBUG and INFO."""
    logging.getLogger().setLevel(logging.DEBUG if enabled else logging.INFO)
    logger.debug("Debug logging enabled")


# ── Editor settings ──────────────────────────────────────────────────────────

def settings_from_dict(data: dict) -> EditorSettings:
    """Build EditorSettings from a parsed dict, ignoring unknown keys."""
    defaults = EditorSettings()
    return EditorSettings(
        default_scale=float(data.get("default_scale", defaults.default_scale)),
        scale_step=float(data.get("scale_step", defaults.scale_step)),
        history_capacity=int(data.get("history_capacity", defaults.history_capacity)),
        stroke_width=float(data.get("stroke_width", defaults.stroke_width)),
        stroke_color=str(data.get("stroke_color", defaults.stroke_color)),
        font_family=str(data.get("font_family", defaults.font_family)),
        font_size=float(data.get("font_size", defaults.font_size)),
        rectangle_size=float(data.get("rectangle_size", defaults.rectangle_size)),
        debug_mode=bool(data.get("debug_mode", defaults.debug_mode)),
    )


def load_settings() -> EditorSettings:
    """Read settings.json; missing or unreadable files give the defaults."""
    if not os.path.exists(SETTINGS_PATH):
        return EditorSettings()
    try:
        with open(SETTINGS_PATH, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("settings root must be an object")
        return settings_from_dict(data)
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", SETTINGS_PATH, exc)
        return EditorSettings()


def save_settings(settings: EditorSettings) -> None:
    os.makedirs(os.path.dirname(SETTINGS_PATH), exist_ok=True)
    data = {f.name: getattr(settings, f.name) for f in fields(settings)}
    with open(SETTINGS_PATH, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")


# ── Session config (remembers the last folder a PDF was opened from) ─────────

def load_session_config() -> Optional[dict]:
    if not os.path.exists(SESSION_CONFIG_PATH):
        return None
    with open(SESSION_CONFIG_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


def save_session_config(directory: str) -> None:
    os.makedirs(os.path.dirname(SESSION_CONFIG_PATH), exist_ok=True)
    config = {"last_dir": os.path.abspath(directory)}
    with open(SESSION_CONFIG_PATH, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)


def last_dir() -> str:
    """Return the remembered directory, or the user's home directory."""
    try:
        config = load_session_config() or {}
        path = config.get("last_dir", "")
    except (OSError, ValueError, AttributeError) as exc:
        logger.warning("Ignoring unreadable session config %s: %s", SESSION_CONFIG_PATH, exc)
        path = ""
    if path and os.path.isdir(path):
        return path
    return os.path.expanduser("~")
