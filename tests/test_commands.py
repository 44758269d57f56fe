from __future__ import annotations

import pytest

from core.commands import Command, help_text, parse_command, parse_rule_args


def test_parse_command_basic_and_case() -> None:
    assert parse_command("/start") == Command("start", "")
    assert parse_command("/REPORT  ") == Command("report", "")
    assert parse_command("/addrule spam 10") == Command("addrule", "spam 10")


def test_parse_command_bot_suffix() -> None:
    assert parse_command("/start@ScopeBot", "scopebot") == Command("start", "")
    assert parse_command("/start@OtherBot", "scopebot") is None


def test_parse_command_ignores_plain_and_unknown() -> None:
    assert parse_command("hello /start") is None
    assert parse_command("/unknown") is None
    assert parse_command("") is None


def test_parse_rule_args() -> None:
    assert parse_rule_args("spam 10") == ("spam", 10.0)
    assert parse_rule_args("free money  2.5") == ("free money", 2.5)


@pytest.mark.parametrize("args", ["", "spam", "spam lots", "10"])
def test_parse_rule_args_rejects_bad_input(args: str) -> None:
    with pytest.raises(ValueError):
        parse_rule_args(args)


def test_help_text_lists_commands() -> None:
    text = help_text()
    for name in ("/start", "/help", "/report", "/addrule", "/reputation"):
        assert name in text
