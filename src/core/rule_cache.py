"""In-memory mirror of the durable rule table."""

from __future__ import annotations

import threading
from typing import Iterable, List

from core.models import Rule


class RuleCache:
    """Lock-protected, append-only list of rules shared across evaluations.

    The cache is never the source of truth: it is rebuilt from the store at
    startup and only appended to after the store accepted a rule.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._lock = threading.Lock()
        self._rules: List[Rule] = list(rules)

    def append(self, rule: Rule) -> None:
        with self._lock:
            self._rules.append(rule)

    def replace(self, rules: Iterable[Rule]) -> None:
        """Swap the whole content, used when resynchronizing with the store."""

        fresh = list(rules)
        with self._lock:
            self._rules = fresh

    def snapshot(self) -> List[Rule]:
        """Return a copy that callers may keep without holding the lock."""

        with self._lock:
            return list(self._rules)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)
