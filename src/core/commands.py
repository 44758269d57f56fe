"""Bot command parsing (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

COMMAND_PREFIX = "/"

START = "start"
HELP = "help"
REPORT = "report"
ADD_RULE = "addrule"
REPUTATION = "reputation"

COMMAND_DESCRIPTIONS = {
    START: "Start the bot",
    HELP: "Show available commands",
    REPORT: "Report a message as spam (reply to it)",
    ADD_RULE: "Add a scoring rule: /addrule <keyword> <score>",
    REPUTATION: "Show a sender's spam count (reply to one of their messages)",
}


@dataclass(frozen=True)
class Command:
    name: str
    args: str


def parse_command(text: str, bot_username: Optional[str] = None) -> Optional[Command]:
    """Parse "/name[@bot] args" into a Command, or None for plain text.

    Names are matched case-insensitively. Commands addressed to another bot
    and unknown names are ignored.
    """

    stripped = text.strip()
    if not stripped.startswith(COMMAND_PREFIX):
        return None

    head, _, args = stripped[len(COMMAND_PREFIX):].partition(" ")
    name, _, target = head.partition("@")
    if target and bot_username and target.lower() != bot_username.lower():
        return None

    name = name.lower()
    if name not in COMMAND_DESCRIPTIONS:
        return None
    return Command(name=name, args=args.strip())


def parse_rule_args(args: str) -> Tuple[str, float]:
    """Split "/addrule" arguments into (keyword, score).

    The score is the last token; everything before it is the keyword, so
    multi-word keywords are allowed.
    """

    keyword, _, raw_score = args.strip().rpartition(" ")
    keyword = keyword.strip()
    if not keyword or not raw_score:
        raise ValueError("expected <keyword> <score>")
    try:
        score = float(raw_score)
    except ValueError as exc:
        raise ValueError(f"score must be a number, got {raw_score!r}") from exc
    return keyword, score


def help_text() -> str:
    lines = ["Bot commands"]
    for name, description in COMMAND_DESCRIPTIONS.items():
        lines.append(f"{COMMAND_PREFIX}{name} - {description}")
    return "\n".join(lines)
