"""Scoring orchestrator: the single entry point callers use.

The orchestrator ties the scorer, the durable store, and the rule cache
together. It runs no threads of its own; every operation is safe to call from
many worker threads at once because the store and the cache guard themselves.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import List, Optional

from core.config import SPAM_THRESHOLD
from core.errors import ScriptError
from core.models import Evaluation, ReputationRecord, Rule
from core.ports import ScoringFunction, StoragePort
from core.rule_cache import RuleCache

LOGGER = logging.getLogger(__name__)


class ScoringOrchestrator:
    """Evaluate messages, record outcomes, add rules, and read reputation."""

    def __init__(
        self,
        storage: StoragePort,
        scorer: ScoringFunction,
        cache: Optional[RuleCache] = None,
        threshold: float = SPAM_THRESHOLD,
    ) -> None:
        self._storage = storage
        self._scorer = scorer
        self._cache = cache if cache is not None else RuleCache()
        self._threshold = float(threshold)
        # Serializes rule writes so cache order follows store insertion order.
        self._rules_lock = threading.Lock()
        self._cache.replace(storage.load_all_rules())
        LOGGER.info("%s rules are loaded", len(self._cache))

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def cache(self) -> RuleCache:
        return self._cache

    def evaluate(self, message: str) -> Evaluation:
        """Score a message and classify it against the inclusive threshold."""

        try:
            score = float(self._scorer.score(message))
        except ScriptError as exc:
            LOGGER.error("Scoring failed, treating message as clean: %s", exc)
            score = 0.0
        except Exception:
            LOGGER.exception("Scorer raised unexpectedly, treating message as clean")
            score = 0.0
        return Evaluation(score=score, is_spam=score >= self._threshold)

    def record_outcome(self, sender_id: str, is_spam: bool) -> None:
        """Count one message for the sender. Raises StorageError on failure.

        A clean message never lowers the sender's spam-flag count.
        """

        self._storage.upsert_sender(sender_id, is_spam)

    def add_rule(self, keyword: str, score: float) -> Rule:
        """Persist a rule, then expose it through the cache.

        The store write happens first; if it raises StorageError the cache is
        left untouched.
        """

        keyword = keyword.strip()
        if not keyword:
            raise ValueError("keyword must not be blank")
        score = float(score)
        if not math.isfinite(score):
            raise ValueError("score must be a finite number")

        rule = Rule(keyword=keyword, score=score)
        with self._rules_lock:
            self._storage.insert_rule(keyword, score)
            self._cache.append(rule)
        LOGGER.info("Rule added: %r (%s)", keyword, score)
        return rule

    def get_reputation(self, sender_id: str) -> int:
        """Return the sender's spam-flag count, 0 when unknown or unreadable."""

        return self._storage.get_spam_score(sender_id)

    def get_record(self, sender_id: str) -> Optional[ReputationRecord]:
        """Return the full record, None when absent. Raises StorageError."""

        return self._storage.get_record(sender_id)

    def snapshot_rules(self) -> List[Rule]:
        return self._cache.snapshot()

    def reload_rules(self) -> int:
        """Rebuild the cache from the store and return the rule count."""

        with self._rules_lock:
            self._cache.replace(self._storage.load_all_rules())
        return len(self._cache)
