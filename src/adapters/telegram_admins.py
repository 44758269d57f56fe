"""Telegram administrator adapters.

Provides the admin check used before rule changes and the notifier that
routes spam alerts to chat administrators.
"""

from __future__ import annotations

import logging
from typing import List

from telethon.tl.types import ChannelParticipantsAdmins

from adapters.notification_formatting import format_alert, parse_mode_for
from core.models import Evaluation, MessageContext

LOGGER = logging.getLogger(__name__)


class TelegramAdminAuthorizer:
    """Authorizes private chat users and group administrators."""

    def __init__(self, client) -> None:
        self._client = client

    async def is_authorized(self, context: MessageContext) -> bool:
        # In a private chat the only other party is the requester.
        if context.is_private:
            return True
        LOGGER.info("Checking admin status for user %s in chat %s", context.sender_id, context.chat_id)
        permissions = await self._client.get_permissions(context.chat_id, int(context.sender_id))
        return bool(permissions.is_admin or permissions.is_creator)


class TelegramAdminNotifier:
    """Sends spam alerts to every human admin, falling back to the chat."""

    def __init__(self, client, mode: str = "markdown") -> None:
        self._client = client
        self._mode = mode
        self._parse_mode = parse_mode_for(mode)

    async def _send(self, target, text: str) -> None:
        await self._client.send_message(target, text, parse_mode=self._parse_mode)

    async def _admin_ids(self, chat_id: int) -> List[int]:
        admin_ids: List[int] = []
        async for user in self._client.iter_participants(chat_id, filter=ChannelParticipantsAdmins):
            # Bots cannot receive messages from other bots.
            if getattr(user, "bot", False):
                continue
            admin_ids.append(user.id)
        return admin_ids

    async def notify(
        self,
        context: MessageContext,
        evaluation: Evaluation,
        spam_flag_count: int,
        snippet: str,
    ) -> None:
        """Deliver the alert for one spam message."""

        message = format_alert(context, evaluation, spam_flag_count, snippet, self._mode)
        LOGGER.info("Attempting to notify admins in chat %s", context.chat_id)
        if context.is_private:
            await self._send(context.chat_id, message)
            return

        try:
            admin_ids = await self._admin_ids(context.chat_id)
        except Exception as exc:
            LOGGER.error(
                "Failed to fetch admins for chat %s: %s. Sending fallback notification in group.",
                context.chat_id,
                exc,
            )
            await self._send(context.chat_id, message)
            return

        if not admin_ids:
            LOGGER.warning(
                "No admins found in chat %s. Sending fallback notification in group.",
                context.chat_id,
            )
            await self._send(context.chat_id, message)
            return

        LOGGER.info("Found %s admins: %s", len(admin_ids), admin_ids)
        for admin_id in admin_ids:
            try:
                await self._send(admin_id, message)
                LOGGER.info("Notification sent to admin %s", admin_id)
            except Exception as exc:
                LOGGER.error("Failed to send notification to admin %s: %s", admin_id, exc)
