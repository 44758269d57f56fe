"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the core processor.
"""

from __future__ import annotations

from typing import Optional

from telethon.tl.custom import Message

from core.models import MessageContext


def sender_key(sender_id: Optional[int]) -> str:
    """Normalize a sender id into the reputation ledger key."""

    if sender_id is None:
        return "unknown"
    return str(sender_id)


async def build_context(message: Message) -> MessageContext:
    """Build a core MessageContext from a Telethon Message."""

    reply_text: Optional[str] = None
    reply_sender_id: Optional[str] = None
    has_reply = bool(getattr(message, "is_reply", False))
    if has_reply:
        reply = await message.get_reply_message()
        if reply is None:
            # The replied-to message was deleted.
            has_reply = False
        else:
            reply_text = reply.raw_text or None
            reply_sender_id = sender_key(reply.sender_id)

    return MessageContext(
        chat_id=message.chat_id,
        message_id=message.id,
        sender_id=sender_key(message.sender_id),
        date=message.date,
        text=message.raw_text or "",
        is_private=bool(getattr(message, "is_private", False)),
        reply_text=reply_text,
        reply_sender_id=reply_sender_id,
        has_reply=has_reply,
    )
