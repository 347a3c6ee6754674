# nlp_engine/entity_extractor.py
"""
==============================================================
ENTITY EXTRACTOR - Pull task filters out of a chatbot question
==============================================================

Extracts at most one value per entity:
- Month (full names and abbreviations, "sept" -> "September")
- Year (4-digit, 20xx; defaults to the current year)
- Engineer (matched against the engineers table)
- Service (matched against the services table)
- Status (synonyms for pending / in-progress / completed)

Engineer and service names are matched through a ``NameMatcher`` so the
plain substring strategy can be replaced without touching the intent
cascade.
"""

import re
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, List, Optional

# Calendar order matters: the first month whose variation appears wins
MONTH_VARIATIONS = {
    "january": ["january", "jan"],
    "february": ["february", "feb"],
    "march": ["march", "mar"],
    "april": ["april", "apr"],
    "may": ["may"],
    "june": ["june", "jun"],
    "july": ["july", "jul"],
    "august": ["august", "aug"],
    "september": ["september", "sep", "sept"],
    "october": ["october", "oct"],
    "november": ["november", "nov"],
    "december": ["december", "dec"],
}

MONTH_NAMES = [m.capitalize() for m in MONTH_VARIATIONS]

# Evaluated in this order: completed beats in-progress beats pending
STATUS_SYNONYMS = [
    ("completed", ["completed", "done", "finished"]),
    ("in-progress", ["in progress", "in-progress", "progress"]),
    ("pending", ["pending", "not started"]),
]

YEAR_PATTERN = re.compile(r"\b(20\d{2})\b")


def extract_month(text: str) -> Optional[str]:
    """Return the canonical month name mentioned in ``text`` or None."""
    lower = text.lower()
    for month, variations in MONTH_VARIATIONS.items():
        for variation in variations:
            if variation in lower:
                return month.capitalize()
    return None


def find_year(text: str) -> Optional[int]:
    """Return the explicit 20xx year in ``text`` or None."""
    match = YEAR_PATTERN.search(text)
    if match:
        return int(match.group(1))
    return None


def extract_year(text: str, today: Optional[date] = None) -> int:
    """Return the year mentioned in ``text``, else the current year."""
    year = find_year(text)
    if year is not None:
        return year
    return (today or date.today()).year


def extract_status(text: str) -> Optional[str]:
    """Map status synonyms in ``text`` to a canonical status value."""
    lower = text.lower()
    for status, synonyms in STATUS_SYNONYMS:
        if any(s in lower for s in synonyms):
            return status
    return None


# -----------------------------------------
# Known-name matching
# -----------------------------------------

class NameMatcher(object):
    """Strategy for finding one of ``names`` inside free text."""

    def match(self, text: str, names: List[str]) -> Optional[str]:
        raise NotImplementedError


class ContainmentMatcher(NameMatcher):
    """
    Case-insensitive substring test; the first name found wins.

    Names that are substrings of other names (or of ordinary words) can
    produce false positives.
    """

    def match(self, text: str, names: List[str]) -> Optional[str]:
        lower = text.lower()
        for name in names:
            if name and name.lower() in lower:
                return name
        return None


class KnownNameExtractor(object):
    """Fetches the names of one table and matches them against a query."""

    def __init__(self, db, table: str, matcher: Optional[NameMatcher] = None):
        if table not in ("engineers", "services"):
            raise ValueError("Unsupported name table: {0}".format(table))
        self.db = db
        self.table = table
        self.matcher = matcher or ContainmentMatcher()

    def known_names(self) -> List[str]:
        rows = self.db.query("SELECT name FROM {0} ORDER BY id".format(self.table))
        return [r["name"] for r in rows]

    def extract(self, text: str) -> Optional[str]:
        return self.matcher.match(text, self.known_names())


@dataclass
class ChatEntities:
    """Everything the extractors found in one question."""
    month: Optional[str]
    year: int
    engineer: Optional[str]
    service: Optional[str]
    status: Optional[str]
    year_explicit: bool = False

    def has_criteria(self) -> bool:
        """True when the question named anything beyond the default year."""
        return bool(
            self.month or self.engineer or self.service or self.status or self.year_explicit
        )

    def to_filters(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("year_explicit")
        return data


class EntityExtractor(object):
    """
    Runs every extractor over a question.

    Engineer and service names are re-read from storage on each call; there
    is no caching between questions.
    """

    def __init__(self, db, matcher: Optional[NameMatcher] = None):
        self.engineers = KnownNameExtractor(db, "engineers", matcher)
        self.services = KnownNameExtractor(db, "services", matcher)

    def extract(self, query: str, today: Optional[date] = None) -> ChatEntities:
        explicit_year = find_year(query)
        return ChatEntities(
            month=extract_month(query),
            year=explicit_year if explicit_year is not None else extract_year(query, today),
            engineer=self.engineers.extract(query),
            service=self.services.extract(query),
            status=extract_status(query),
            year_explicit=explicit_year is not None,
        )
