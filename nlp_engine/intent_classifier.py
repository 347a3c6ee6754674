# nlp_engine/intent_classifier.py
"""
Intent classification for chatbot questions.

Both cascades are ordered tables of (intent, predicate) pairs evaluated
against the lower-cased question; the first predicate that holds decides.
Matching is plain substring containment.
"""

import re
from typing import Callable, List, Optional, Tuple

# -----------------------------------------
# Intent constants
# -----------------------------------------
INTENT_SUPERLATIVE = "SUPERLATIVE"
INTENT_STATISTICS = "STATISTICS"
INTENT_WHO = "WHO"
INTENT_WHAT = "WHAT"
INTENT_COUNT = "COUNT"
INTENT_LIST = "LIST"
INTENT_AVERAGE = "AVERAGE"
INTENT_FALLBACK = "FALLBACK"

# Sub-intents of INTENT_SUPERLATIVE
RANK_TOP_SERVICES = "TOP_SERVICES"
RANK_TOP_ENGINEERS = "TOP_ENGINEERS"
RANK_SERVICE_MOST = "SERVICE_MOST"
RANK_ENGINEER_MOST = "ENGINEER_MOST"
RANK_MONTH_MOST = "MONTH_MOST"
RANK_SERVICE_LEAST = "SERVICE_LEAST"
RANK_ENGINEER_LEAST = "ENGINEER_LEAST"
RANK_HINT = "HINT"

SUPERLATIVE_WORDS = [
    "highest", "most", "top", "lowest", "least",
    "best", "worst", "largest", "smallest",
]
MOST_WORDS = ["most", "highest", "top"]
LEAST_WORDS = ["least", "lowest"]
STATISTICS_WORDS = ["statistics", "stats", "summary", "overview", "total"]

TOP_N_PATTERN = re.compile(r"top\s*(\d+)")
# Larger requests are clamped; SQLite LIMIT only takes 64-bit integers
MAX_TOP_N = 1000

Predicate = Callable[[str], bool]


def _has(q: str, words: List[str]) -> bool:
    return any(w in q for w in words)


def _mentions_engineer(q: str) -> bool:
    return "engineer" in q or "who" in q


def is_top_n(q: str) -> bool:
    """
    True for ranking-list questions: "top 3 ..." or "top services/engineers".

    A bare singular "top" ("the top service") asks for a single winner.
    """
    if TOP_N_PATTERN.search(q):
        return True
    return "top" in q and ("services" in q or "engineers" in q)


def top_n_limit(q: str, default: int = 5) -> int:
    """Integer following "top" (at most MAX_TOP_N), or ``default`` when absent or zero."""
    match = TOP_N_PATTERN.search(q)
    if match:
        value = int(match.group(1))
        if value > 0:
            return min(value, MAX_TOP_N)
    return default


INTENT_RULES: List[Tuple[str, Predicate]] = [
    (INTENT_SUPERLATIVE, lambda q: _has(q, SUPERLATIVE_WORDS)),
    (INTENT_STATISTICS, lambda q: _has(q, STATISTICS_WORDS)),
    (INTENT_WHO, lambda q: _has(q, ["who", "which engineer"])),
    (INTENT_WHAT, lambda q: _has(q, ["what", "which tasks"])),
    (INTENT_COUNT, lambda q: _has(q, ["how many", "count"])),
    (INTENT_LIST, lambda q: _has(q, ["list", "show"])),
    (INTENT_AVERAGE, lambda q: _has(q, ["average", "avg"])),
]

RANKING_RULES: List[Tuple[str, Predicate]] = [
    (RANK_TOP_SERVICES, lambda q: is_top_n(q) and "service" in q),
    (RANK_TOP_ENGINEERS, lambda q: is_top_n(q) and _mentions_engineer(q)),
    (RANK_SERVICE_MOST, lambda q: "service" in q and _has(q, MOST_WORDS)),
    (RANK_ENGINEER_MOST, lambda q: _mentions_engineer(q) and _has(q, MOST_WORDS)),
    (RANK_MONTH_MOST, lambda q: "month" in q and _has(q, MOST_WORDS)),
    (RANK_SERVICE_LEAST, lambda q: "service" in q and _has(q, LEAST_WORDS)),
    (RANK_ENGINEER_LEAST, lambda q: _mentions_engineer(q) and _has(q, LEAST_WORDS)),
]


def _first_match(rules: List[Tuple[str, Predicate]], q: str) -> Optional[str]:
    for intent, predicate in rules:
        if predicate(q):
            return intent
    return None


class IntentClassifier:
    """
    Classifies chatbot questions into an intent and, for superlative
    questions, a ranking sub-intent.
    """

    def classify(self, question: str) -> str:
        q = question.lower().strip()
        return _first_match(INTENT_RULES, q) or INTENT_FALLBACK

    def classify_ranking(self, question: str) -> str:
        q = question.lower().strip()
        return _first_match(RANKING_RULES, q) or RANK_HINT
