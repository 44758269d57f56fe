"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Rule:
    """A single (keyword, score) scoring rule. Duplicate keywords are allowed."""

    keyword: str
    score: float


@dataclass(frozen=True)
class ReputationRecord:
    """Durable per-sender counters."""

    sender_id: str
    spam_flag_count: int
    message_count: int


@dataclass(frozen=True)
class Evaluation:
    """Result of scoring one message."""

    score: float
    is_spam: bool


@dataclass(frozen=True)
class MessageContext:
    """Minimal message context used by the core message processor."""

    chat_id: int
    message_id: int
    sender_id: str
    date: Optional[datetime]
    text: str
    is_private: bool
    reply_text: Optional[str] = None
    reply_sender_id: Optional[str] = None
    has_reply: bool = False
