"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

SPAM_THRESHOLD = 5.0
DEFAULT_SCRIPT_PATH = "rules.lua"
DEFAULT_INSTRUCTION_LIMIT = 1_000_000

SCORER_LUA = "lua"
SCORER_KEYWORDS = "keywords"


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring settings for the orchestrator and scorer selection."""

    scorer: str = SCORER_LUA
    script_path: str = DEFAULT_SCRIPT_PATH
    spam_threshold: float = SPAM_THRESHOLD
    # Lua VM instructions allowed per evaluation; 0 disables the bound.
    instruction_limit: int = DEFAULT_INSTRUCTION_LIMIT


@dataclass(frozen=True)
class NotificationConfig:
    """Notification formatting settings consumed by notifier adapters."""

    snippet_chars: int = 400
    format: str = "markdown"
