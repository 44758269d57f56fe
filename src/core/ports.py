"""Ports (interfaces) used by the core.

Ports define the minimal contracts for storage, scoring, and chat adapters so
that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from core.models import Evaluation, MessageContext, ReputationRecord, Rule


class ScoringFunction(Protocol):
    """Maps message text to a spam score."""

    def score(self, text: str) -> float:
        ...


class StoragePort(Protocol):
    """Durable rule store and reputation ledger operations."""

    def insert_rule(self, keyword: str, score: float) -> None:
        ...

    def load_all_rules(self) -> List[Rule]:
        ...

    def upsert_sender(self, sender_id: str, flagged: bool) -> None:
        ...

    def get_spam_score(self, sender_id: str) -> int:
        ...

    def get_record(self, sender_id: str) -> Optional[ReputationRecord]:
        ...


class AuthorizerPort(Protocol):
    """Decides whether the author of a message may administer rules."""

    async def is_authorized(self, context: MessageContext) -> bool:
        ...


class NotifierPort(Protocol):
    """Delivers spam alerts to moderators."""

    async def notify(
        self,
        context: MessageContext,
        evaluation: Evaluation,
        spam_flag_count: int,
        snippet: str,
    ) -> None:
        ...
