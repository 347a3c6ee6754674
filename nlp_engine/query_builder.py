# nlp_engine/query_builder.py
"""
Query Builder - turns extracted entities into parameterized SQL.

Every query is scoped to one year (explicit or the current one); month,
engineer, service and status narrow it further when present.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from nlp_engine.entity_extractor import ChatEntities

TASK_ORDER = "ORDER BY year DESC, month, engineer, service"


@dataclass
class FilterQuery:
    sql: str
    params: List[Any] = field(default_factory=list)


def build_task_query(entities: ChatEntities) -> FilterQuery:
    """
    Build the filtered task listing for a question.

    The statement always carries the year; other filters are appended in a
    fixed order (month, engineer, service, status).
    """
    clauses = ["year = ?"]
    params = [entities.year]

    for column, value in (
        ("month", entities.month),
        ("engineer", entities.engineer),
        ("service", entities.service),
        ("status", entities.status),
    ):
        if value:
            clauses.append("{0} = ?".format(column))
            params.append(value)

    sql = "SELECT * FROM tasks WHERE {0} {1}".format(" AND ".join(clauses), TASK_ORDER)
    return FilterQuery(sql=sql, params=params)


def period_scope(year: int, month: Optional[str] = None) -> Tuple[str, List[Any]]:
    """WHERE fragment for aggregate queries over a year and optional month."""
    if month:
        return "WHERE year = ? AND month = ?", [year, month]
    return "WHERE year = ?", [year]
