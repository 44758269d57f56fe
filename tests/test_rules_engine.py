from __future__ import annotations

from core.models import Rule
from core.rule_cache import RuleCache
from core.rules_engine import KeywordRuleScorer, RuleMatch, match_rules


def test_match_rules_is_case_insensitive() -> None:
    matches = match_rules("This is SPAM", [Rule("spam", 10.0), Rule("hello", 1.0)])
    assert matches == [RuleMatch(keyword="spam", score=10.0)]


def test_match_rules_ignores_blank_keywords() -> None:
    assert match_rules("anything", [Rule("  ", 3.0), Rule("", 3.0)]) == []


def test_keyword_scorer_sums_duplicate_rules() -> None:
    cache = RuleCache([Rule("spam", 3.0), Rule("spam", 3.0), Rule("Free", 1.5)])
    scorer = KeywordRuleScorer(cache)
    assert scorer.score("free spam here") == 7.5
    assert scorer.score("hello") == 0.0


def test_keyword_scorer_sees_rules_appended_later() -> None:
    cache = RuleCache()
    scorer = KeywordRuleScorer(cache)
    assert scorer.score("buy crypto") == 0.0
    cache.append(Rule("crypto", 6.0))
    assert scorer.score("buy crypto") == 6.0
    assert scorer.explain("buy crypto") == [RuleMatch(keyword="crypto", score=6.0)]
