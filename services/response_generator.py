# -*- coding: utf-8 -*-
"""
Response Generator - Generates natural language answers for chatbot intents

Each intent (and each ranking sub-intent) maps to one handler. Handlers
either reuse the filtered task rows or run their own aggregate query, and
return the answer text.
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from nlp_engine.entity_extractor import ChatEntities
from nlp_engine.intent_classifier import (
    INTENT_AVERAGE,
    INTENT_COUNT,
    INTENT_FALLBACK,
    INTENT_LIST,
    INTENT_STATISTICS,
    INTENT_SUPERLATIVE,
    INTENT_WHAT,
    INTENT_WHO,
    RANK_ENGINEER_LEAST,
    RANK_ENGINEER_MOST,
    RANK_HINT,
    RANK_MONTH_MOST,
    RANK_SERVICE_LEAST,
    RANK_SERVICE_MOST,
    RANK_TOP_ENGINEERS,
    RANK_TOP_SERVICES,
    IntentClassifier,
    top_n_limit,
)
from nlp_engine.query_builder import period_scope

HELP_MESSAGE = (
    "I can help you find information about tasks. Try asking questions like:\n\n"
    "• \"What service has the most tasks?\"\n"
    "• \"Who did the most tasks?\"\n"
    "• \"Show me statistics for 2025\"\n"
    "• \"Average tasks per engineer in 2025\""
)

RANKING_HINT = (
    "I can help you find the service or engineer with the most/least tasks. "
    "Try asking \"What service has the most tasks?\" or \"Who did the most tasks?\""
)

NO_MATCH = "No tasks found matching your criteria."


@dataclass
class ChatContext:
    """Inputs shared by every handler for one question."""
    query: str
    entities: ChatEntities
    tasks: List[Dict[str, Any]]
    db: Any


def pluralize(count: int, word: str = "task") -> str:
    return "{0} {1}{2}".format(count, word, "" if count == 1 else "s")


def describe_period(year: int, month: Optional[str] = None) -> str:
    if month:
        return "in {0} {1}".format(month, year)
    return "in {0}".format(year)


def unique(values: List[str]) -> List[str]:
    """Distinct values in first-seen order."""
    seen = []
    for v in values:
        if v not in seen:
            seen.append(v)
    return seen


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ResponseGenerator:
    """Generates chatbot answers from the classified intent"""

    def __init__(self, classifier: Optional[IntentClassifier] = None, top_n_default: int = 5):
        self.classifier = classifier or IntentClassifier()
        self.top_n_default = top_n_default
        self.handlers: Dict[str, Callable[[ChatContext], str]] = {
            INTENT_SUPERLATIVE: self._ranking_response,
            INTENT_STATISTICS: self._statistics_response,
            INTENT_WHO: self._who_response,
            INTENT_WHAT: self._what_response,
            INTENT_COUNT: self._count_response,
            INTENT_LIST: self._list_response,
            INTENT_AVERAGE: self._average_response,
            INTENT_FALLBACK: self._fallback_response,
        }
        self.ranking_handlers: Dict[str, Callable[[ChatContext], str]] = {
            RANK_TOP_SERVICES: lambda ctx: self._top_n(ctx, "service"),
            RANK_TOP_ENGINEERS: lambda ctx: self._top_n(ctx, "engineer"),
            RANK_SERVICE_MOST: lambda ctx: self._extreme(ctx, "service", "DESC"),
            RANK_ENGINEER_MOST: lambda ctx: self._extreme(ctx, "engineer", "DESC"),
            RANK_MONTH_MOST: self._month_most,
            RANK_SERVICE_LEAST: lambda ctx: self._extreme(ctx, "service", "ASC"),
            RANK_ENGINEER_LEAST: lambda ctx: self._extreme(ctx, "engineer", "ASC"),
            RANK_HINT: lambda ctx: RANKING_HINT,
        }

    def generate(self, intent: str, ctx: ChatContext) -> str:
        handler = self.handlers.get(intent, self._fallback_response)
        return handler(ctx) or HELP_MESSAGE

    # =====================================================
    # RANKINGS
    # =====================================================

    def _ranking_response(self, ctx: ChatContext) -> str:
        rank = self.classifier.classify_ranking(ctx.query)
        return self.ranking_handlers[rank](ctx)

    def _grouped_counts(self, ctx: ChatContext, column: str, direction: str,
                        limit: int, month: Optional[str]) -> List[Dict[str, Any]]:
        where, params = period_scope(ctx.entities.year, month)
        sql = (
            "SELECT {col}, COUNT(*) AS count FROM tasks {where} "
            "GROUP BY {col} ORDER BY count {direction}, {col} LIMIT ?"
        ).format(col=column, where=where, direction=direction)
        return ctx.db.query(sql, params + [limit])

    def _extreme(self, ctx: ChatContext, column: str, direction: str) -> str:
        month, year = ctx.entities.month, ctx.entities.year
        rows = self._grouped_counts(ctx, column, direction, 1, month)
        period = describe_period(year, month)
        if not rows:
            return "No tasks found {0}.".format(period)

        name, count = rows[0][column], rows[0]["count"]
        if column == "service":
            which = "most" if direction == "DESC" else "least"
            return 'The service with the {0} tasks {1} is "{2}" with {3}.'.format(
                which, period, name, pluralize(count)
            )
        if direction == "DESC":
            return "{0} completed the most tasks {1} with {2}.".format(name, period, pluralize(count))
        return "{0} has the least tasks {1} with {2}.".format(name, period, pluralize(count))

    def _month_most(self, ctx: ChatContext) -> str:
        year = ctx.entities.year
        rows = self._grouped_counts(ctx, "month", "DESC", 1, None)
        if not rows:
            return "No tasks found in {0}.".format(year)
        return "The month with the most tasks in {0} is {1} with {2}.".format(
            year, rows[0]["month"], pluralize(rows[0]["count"])
        )

    def _top_n(self, ctx: ChatContext, column: str) -> str:
        month, year = ctx.entities.month, ctx.entities.year
        limit = top_n_limit(ctx.query, self.top_n_default)
        rows = self._grouped_counts(ctx, column, "DESC", limit, month)
        period = describe_period(year, month)
        if not rows:
            return "No tasks found {0}.".format(period)

        lines = ["Top {0} {1}:".format(pluralize(len(rows), column), period), ""]
        for index, row in enumerate(rows, start=1):
            lines.append("{0}. {1}: {2}".format(index, row[column], pluralize(row["count"])))
        return "\n".join(lines)

    # =====================================================
    # STATISTICS
    # =====================================================

    def _statistics_response(self, ctx: ChatContext) -> str:
        month, year = ctx.entities.month, ctx.entities.year
        where, params = period_scope(year, month)
        total = ctx.db.scalar("SELECT COUNT(*) FROM tasks {0}".format(where), params)
        by_status = ctx.db.query(
            "SELECT status, COUNT(*) AS count FROM tasks {0} GROUP BY status ORDER BY status".format(where),
            params,
        )
        services = ctx.db.scalar("SELECT COUNT(DISTINCT service) FROM tasks {0}".format(where), params)
        engineers = ctx.db.scalar("SELECT COUNT(DISTINCT engineer) FROM tasks {0}".format(where), params)

        header = "Statistics for {0} {1}:".format(month, year) if month else "Statistics for {0}:".format(year)
        lines = [
            header,
            "",
            "Total Tasks: {0}".format(total or 0),
            "Services: {0}".format(services or 0),
            "Engineers: {0}".format(engineers or 0),
            "",
            "Status Breakdown:",
        ]
        for row in by_status:
            lines.append("• {0}: {1}".format(row["status"], row["count"]))
        return "\n".join(lines)

    # =====================================================
    # WHO / WHAT
    # =====================================================

    def _who_response(self, ctx: ChatContext) -> str:
        e, tasks = ctx.entities, ctx.tasks
        if not e.service:
            return "Please specify a service or month to find out who worked on it."

        period = describe_period(e.year, e.month)
        engineers = unique([t["engineer"] for t in tasks])
        if not engineers:
            return 'No engineers worked on "{0}" {1}.'.format(e.service, period)
        if len(engineers) == 1 and e.month:
            return '{0} worked on "{1}" {2} ({3}).'.format(
                engineers[0], e.service, period, pluralize(len(tasks))
            )
        return 'The following engineers worked on "{0}" {1}: {2}. Total: {3}.'.format(
            e.service, period, ", ".join(engineers), pluralize(len(tasks))
        )

    def _what_response(self, ctx: ChatContext) -> str:
        e, tasks = ctx.entities, ctx.tasks
        period = describe_period(e.year, e.month)

        if e.engineer:
            if not tasks:
                return "{0} had no tasks {1}.".format(e.engineer, period)
            services = unique([t["service"] for t in tasks])
            if e.month:
                return "{0} worked on {1} {2}: {3}.".format(
                    e.engineer, pluralize(len(tasks)), period, ", ".join(services)
                )
            return "{0} worked on {1} {2} across {3}: {4}.".format(
                e.engineer, pluralize(len(tasks)), period,
                pluralize(len(services), "service"), ", ".join(services)
            )

        if e.service and e.month:
            if not tasks:
                return 'No tasks for "{0}" {1}.'.format(e.service, period)
            verb = "was" if len(tasks) == 1 else "were"
            return 'There {0} {1} for "{2}" {3}.'.format(verb, pluralize(len(tasks)), e.service, period)

        return "Please specify an engineer, service, or month to find tasks."

    # =====================================================
    # COUNT / LIST
    # =====================================================

    def _count_response(self, ctx: ChatContext) -> str:
        if not ctx.tasks:
            return NO_MATCH
        e = ctx.entities
        details = [
            "{0}: {1}".format(label, value)
            for label, value in (
                ("engineer", e.engineer),
                ("service", e.service),
                ("month", e.month),
                ("year", e.year),
                ("status", e.status),
            )
            if value
        ]
        return "Found {0} ({1}).".format(pluralize(len(ctx.tasks)), ", ".join(details))

    def _list_response(self, ctx: ChatContext) -> str:
        if not ctx.tasks:
            return NO_MATCH

        groups: Dict[str, List[Dict[str, Any]]] = {}
        for task in ctx.tasks:
            key = "{0} - {1} - {2}".format(task["engineer"], task["service"], task["month"])
            groups.setdefault(key, []).append(task)

        lines = ["Found {0}:".format(pluralize(len(ctx.tasks))), ""]
        for key, grouped in groups.items():
            lines.append("• {0}: {1} ({2})".format(key, pluralize(len(grouped)), grouped[0]["status"]))
        return "\n".join(lines)

    # =====================================================
    # AVERAGE
    # =====================================================

    def _average_response(self, ctx: ChatContext) -> str:
        if "engineer" in ctx.query:
            column = "engineer"
        elif "service" in ctx.query:
            column = "service"
        else:
            return "Please specify if you want average tasks per engineer or per service."

        month, year = ctx.entities.month, ctx.entities.year
        where, params = period_scope(year, month)
        avg = ctx.db.scalar(
            "SELECT AVG(task_count) FROM "
            "(SELECT {col}, COUNT(*) AS task_count FROM tasks {where} GROUP BY {col})".format(
                col=column, where=where
            ),
            params,
        )
        period = describe_period(year, month)
        if avg is None:
            return "No tasks found {0}.".format(period)
        return "The average number of tasks per {0} {1} is {2}.".format(
            column, period, round_half_up(float(avg))
        )

    # =====================================================
    # FALLBACK
    # =====================================================

    def _fallback_response(self, ctx: ChatContext) -> str:
        e = ctx.entities
        if not ctx.tasks:
            return NO_MATCH if e.has_criteria() else HELP_MESSAGE

        parts = ["Found {0} matching your query.".format(pluralize(len(ctx.tasks)))]
        for label, value in (
            ("Engineer", e.engineer),
            ("Service", e.service),
            ("Month", e.month),
            ("Status", e.status),
        ):
            if value:
                parts.append("{0}: {1}.".format(label, value))
        return " ".join(parts)
