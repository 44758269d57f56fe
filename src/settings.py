"""Static configuration for spamscope.

All user-editable settings (database, scoring, notifications, logging) live
in a single JSON file for quick edits without touching Python.
"""

import json
import os

from core.config import (
    DEFAULT_INSTRUCTION_LIMIT,
    DEFAULT_SCRIPT_PATH,
    SCORER_LUA,
    SPAM_THRESHOLD,
    NotificationConfig,
    ScoringConfig,
)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.getenv("SPAMSCOPE_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the SQLite database.
_database = _CONFIG.get("database", {})
DB_PATH = _resolve(_database.get("path", "spamscope.db"))

# Scoring: which scorer to use and how the Lua script is run.
# - scorer: "lua" (script file) or "keywords" (rule table only)
# - script_path: read relative to the working directory, reloaded per message
# - spam_threshold: scores at or above this are spam
_scoring = _CONFIG.get("scoring", {})
SCORING = ScoringConfig(
    scorer=_scoring.get("scorer", SCORER_LUA),
    script_path=_scoring.get("script_path", DEFAULT_SCRIPT_PATH),
    spam_threshold=float(_scoring.get("spam_threshold", SPAM_THRESHOLD)),
    instruction_limit=int(_scoring.get("instruction_limit", DEFAULT_INSTRUCTION_LIMIT)),
)

# Alert snippet size and format used by the admin notifier.
_notifications = _CONFIG.get("notifications", {})
NOTIFICATIONS = NotificationConfig(
    snippet_chars=int(_notifications.get("snippet_chars", 400)),
    format=_notifications.get("format", "markdown"),
)

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
