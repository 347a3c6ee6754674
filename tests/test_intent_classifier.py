# tests/test_intent_classifier.py
"""
Tests for the ordered intent cascade and its ranking sub-table.
"""

import pytest

from nlp_engine.intent_classifier import (
    INTENT_AVERAGE,
    INTENT_COUNT,
    INTENT_FALLBACK,
    INTENT_LIST,
    INTENT_STATISTICS,
    INTENT_SUPERLATIVE,
    INTENT_WHAT,
    INTENT_WHO,
    MAX_TOP_N,
    RANK_ENGINEER_LEAST,
    RANK_ENGINEER_MOST,
    RANK_HINT,
    RANK_MONTH_MOST,
    RANK_SERVICE_LEAST,
    RANK_SERVICE_MOST,
    RANK_TOP_ENGINEERS,
    RANK_TOP_SERVICES,
    IntentClassifier,
    is_top_n,
    top_n_limit,
)


@pytest.fixture
def classifier():
    return IntentClassifier()


class TestIntentCascade:

    @pytest.mark.parametrize("question, intent", [
        ("What service has the most tasks?", INTENT_SUPERLATIVE),
        ("Who did the most tasks?", INTENT_SUPERLATIVE),
        ("Show me statistics for 2025", INTENT_STATISTICS),
        ("Give me an overview", INTENT_STATISTICS),
        ("Who worked on SOC Alerts in January?", INTENT_WHO),
        ("Which engineer handled Threat Intel?", INTENT_WHO),
        ("What did Carol work on?", INTENT_WHAT),
        ("How many completed tasks?", INTENT_COUNT),
        ("List tasks for Bob", INTENT_LIST),
        ("Average tasks per engineer in 2025", INTENT_AVERAGE),
        ("hello", INTENT_FALLBACK),
    ])
    def test_first_matching_rule_wins(self, classifier, question, intent):
        assert classifier.classify(question) == intent

    def test_superlative_beats_statistics(self, classifier):
        assert classifier.classify("top services total") == INTENT_SUPERLATIVE

    def test_what_beats_average(self, classifier):
        assert classifier.classify("what is the average per engineer") == INTENT_WHAT


class TestRankingCascade:

    @pytest.mark.parametrize("question, rank", [
        ("top 3 services", RANK_TOP_SERVICES),
        ("top services this year", RANK_TOP_SERVICES),
        ("top 3 engineers", RANK_TOP_ENGINEERS),
        ("what service has the most tasks", RANK_SERVICE_MOST),
        ("the top service", RANK_SERVICE_MOST),
        ("who did the most tasks", RANK_ENGINEER_MOST),
        ("engineer with highest count", RANK_ENGINEER_MOST),
        ("which month had the most tasks", RANK_MONTH_MOST),
        ("service with the least tasks", RANK_SERVICE_LEAST),
        ("which engineer has the lowest count", RANK_ENGINEER_LEAST),
        ("best one", RANK_HINT),
    ])
    def test_sub_intents(self, classifier, question, rank):
        assert classifier.classify_ranking(question) == rank


class TestTopN:

    def test_detection(self):
        assert is_top_n("top 10 services")
        assert is_top_n("top5 engineers")
        assert is_top_n("top engineers")
        assert not is_top_n("the top service")

    def test_limit(self):
        assert top_n_limit("top 3 engineers") == 3
        assert top_n_limit("top engineers") == 5
        assert top_n_limit("top engineers", default=7) == 7

    def test_zero_falls_back_to_default(self):
        assert top_n_limit("top 0 services") == 5

    def test_oversized_n_is_clamped(self):
        assert top_n_limit("top 99999999999999999999 engineers") == MAX_TOP_N
        assert top_n_limit("top 1000 engineers") == 1000
