"""Core message processing flow.

This module is integration-agnostic. It only relies on ports for
authorization and notifications, enabling other chat adapters without changes
here. Blocking orchestrator calls are pushed to worker threads so one slow
script or store call never stalls the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from core import commands
from core.commands import Command
from core.errors import StorageError
from core.models import Evaluation, MessageContext
from core.orchestrator import ScoringOrchestrator
from core.ports import AuthorizerPort, NotifierPort

LOGGER = logging.getLogger(__name__)

GREETING = "Hello! I'm a spam filter bot."
NON_TEXT_PLACEHOLDER = "(non-text message)"


class MessageProcessor:
    """Orchestrates scoring, reputation bookkeeping, commands, and alerts."""

    def __init__(
        self,
        orchestrator: ScoringOrchestrator,
        notifier: NotifierPort,
        authorizer: AuthorizerPort,
        snippet_chars: int,
    ) -> None:
        self._orchestrator = orchestrator
        self._notifier = notifier
        self._authorizer = authorizer
        self._snippet_chars = snippet_chars

    async def handle_message(self, context: MessageContext) -> Optional[Evaluation]:
        """Score one chat message, count it for the sender, alert on spam."""

        # Media-only messages without captions are ignored
        if not context.text.strip():
            return None

        # Score first, then bookkeeping, then alerting; each step awaits the last.
        evaluation = await asyncio.to_thread(self._orchestrator.evaluate, context.text)
        try:
            await asyncio.to_thread(
                self._orchestrator.record_outcome, context.sender_id, evaluation.is_spam
            )
        except StorageError:
            LOGGER.exception("Failed to update reputation for sender %s", context.sender_id)

        if not evaluation.is_spam:
            return evaluation

        spam_flag_count = await asyncio.to_thread(
            self._orchestrator.get_reputation, context.sender_id
        )
        snippet = context.text[: self._snippet_chars].strip()
        LOGGER.info(
            "Spam detected in chat %s from %s (score %.2f)",
            context.chat_id,
            context.sender_id,
            evaluation.score,
        )
        await self._notifier.notify(context, evaluation, spam_flag_count, snippet)
        return evaluation

    async def handle_command(self, context: MessageContext, command: Command) -> Optional[str]:
        """Run a bot command and return the reply text, if any."""

        if command.name == commands.START:
            return GREETING
        if command.name == commands.HELP:
            return commands.help_text()
        if command.name == commands.REPORT:
            return await self._report(context)
        if command.name == commands.ADD_RULE:
            return await self._add_rule(context, command.args)
        if command.name == commands.REPUTATION:
            return await self._reputation(context)
        return None

    async def _report(self, context: MessageContext) -> str:
        if not context.has_reply:
            return "Please reply to a message to report it."
        if not context.reply_text:
            return f"Reported: {NON_TEXT_PLACEHOLDER}"

        evaluation = await asyncio.to_thread(self._orchestrator.evaluate, context.reply_text)
        LOGGER.info(
            "Message reported in chat %s by %s (score %.2f)",
            context.chat_id,
            context.sender_id,
            evaluation.score,
        )
        verdict = "spam" if evaluation.is_spam else "not spam"
        return f"Reported: {context.reply_text}\nScore: {evaluation.score:g} ({verdict})"

    async def _add_rule(self, context: MessageContext, args: str) -> str:
        try:
            allowed = await self._authorizer.is_authorized(context)
        except Exception:
            LOGGER.exception("Admin check failed for %s in chat %s", context.sender_id, context.chat_id)
            allowed = False
        if not allowed:
            return "Only chat administrators can add rules."

        try:
            keyword, score = commands.parse_rule_args(args)
        except ValueError as exc:
            return f"Usage: /addrule <keyword> <score> ({exc})"

        try:
            rule = await asyncio.to_thread(self._orchestrator.add_rule, keyword, score)
        except ValueError as exc:
            return f"Invalid rule: {exc}"
        except StorageError:
            LOGGER.exception("Failed to add rule %r", keyword)
            return "Failed to add rule, please try again later."
        return f"Rule added: {rule.keyword} = {rule.score:g}"

    async def _reputation(self, context: MessageContext) -> str:
        sender_id = context.reply_sender_id if context.has_reply and context.reply_sender_id else context.sender_id
        spam_flag_count = await asyncio.to_thread(self._orchestrator.get_reputation, sender_id)
        return f"Sender {sender_id} spam score: {spam_flag_count}"
