"""Keyword rule matching and the in-process scorer (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from core.models import Rule
from core.rule_cache import RuleCache


@dataclass(frozen=True)
class RuleMatch:
    """A single rule hit with the score it contributes."""

    keyword: str
    score: float


def match_rules(text: str, rules: Iterable[Rule]) -> List[RuleMatch]:
    """Return all rule matches for the given text.

    Matching logic:
    - Keywords match case-insensitively as substrings.
    - Every rule is checked once per message, so duplicate rules each count.
    - Blank keywords never match.
    """

    lowered = text.lower()
    matches: List[RuleMatch] = []
    for rule in rules:
        keyword = rule.keyword.strip().lower()
        if not keyword:
            continue
        if keyword in lowered:
            matches.append(RuleMatch(keyword=rule.keyword, score=rule.score))
    return matches


class KeywordRuleScorer:
    """Scores messages from the rule cache without any external interpreter."""

    def __init__(self, cache: RuleCache) -> None:
        self._cache = cache

    def explain(self, text: str) -> List[RuleMatch]:
        return match_rules(text, self._cache.snapshot())

    def score(self, text: str) -> float:
        return float(sum(match.score for match in self.explain(text)))
