"""Shared spam alert formatting helpers.

Keeping formatting here prevents drift between delivery routes and keeps
alerts consistent regardless of where they are sent.
"""

from __future__ import annotations

import html

from core.models import Evaluation, MessageContext


def escape_md(value: str) -> str:
    for ch in r"*[`_":
        value = value.replace(ch, f"\\{ch}")
    return value


def _format_markdown(
    context: MessageContext,
    evaluation: Evaluation,
    spam_flag_count: int,
    snippet: str,
) -> str:
    lines = [
        f"**Spam detected:** {escape_md(snippet)}",
        f"**Sender ID:** {escape_md(context.sender_id)}",
        f"**Score:** {evaluation.score:g}",
        f"**Spam Score:** {spam_flag_count}",
        f"**Chat:** {context.chat_id}",
    ]
    return "\n".join(lines)


def _format_html(
    context: MessageContext,
    evaluation: Evaluation,
    spam_flag_count: int,
    snippet: str,
) -> str:
    parts = [
        f"<b>Spam detected:</b> {html.escape(snippet)}",
        f"<b>Sender ID:</b> {html.escape(context.sender_id)}",
        f"<b>Score:</b> {evaluation.score:g}",
        f"<b>Spam Score:</b> {spam_flag_count}",
        f"<b>Chat:</b> {context.chat_id}",
    ]
    return "\n".join(parts)


def format_alert(
    context: MessageContext,
    evaluation: Evaluation,
    spam_flag_count: int,
    snippet: str,
    mode: str,
) -> str:
    """Return the alert formatted for the requested mode."""

    if mode == "markdown":
        return _format_markdown(context, evaluation, spam_flag_count, snippet)
    if mode == "html":
        return _format_html(context, evaluation, spam_flag_count, snippet)
    raise ValueError(f"Unsupported notification format: {mode}")


def parse_mode_for(mode: str) -> str:
    """Map a format name onto Telethon's parse_mode argument."""

    if mode == "markdown":
        return "md"
    if mode == "html":
        return "html"
    raise ValueError(f"Unsupported notification format: {mode}")
