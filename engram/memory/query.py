"""Composite search query construction.

Filters are ANDed in a fixed order and every value is bound as a parameter;
only the query vector is inlined, as a validated constant literal. Ranking
is cosine similarity when a usable query vector is supplied and recency
otherwise, with ``id`` as the tie-breaker in both cases.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

from engram.memory.codec import SELECT_COLUMNS, format_vector_literal
from engram.memory.models import SearchParams
from engram.observability.logging import get_logger

logger = get_logger(__name__)

Ranking = Literal["semantic", "recency"]


@dataclass
class SearchQuery:
    """A ready-to-execute search statement."""

    sql: str
    parameters: list[Any] = field(default_factory=list)
    ranking: Ranking = "recency"


def build_conditions(params: SearchParams) -> tuple[list[str], list[Any]]:
    """Return the WHERE conditions and their bound parameters."""
    conditions: list[str] = []
    parameters: list[Any] = []

    if params.query:
        conditions.append("embedding IS NOT NULL")

    if params.group_id:
        conditions.append("group_id = ?")
        parameters.append(params.group_id)

    if params.source:
        conditions.append("source = ?")
        parameters.append(params.source)

    if params.before is not None:
        conditions.append("created_at < ?")
        parameters.append(params.before)

    if params.after is not None:
        conditions.append("created_at > ?")
        parameters.append(params.after)

    if not params.include_expired:
        conditions.append("(expired_at IS NULL OR expired_at > CURRENT_TIMESTAMP)")

    for tag in params.tags:
        conditions.append("list_contains(tags, ?)")
        parameters.append(tag)

    return conditions, parameters


def build_order_by(params: SearchParams, dimensions: int) -> tuple[str, Ranking]:
    """Return the ORDER BY clause and the ranking mode it implements.

    A query vector that cannot be encoded degrades to recency ordering.
    """
    if params.query_embedding:
        try:
            literal = format_vector_literal(params.query_embedding, dimensions)
        except ValueError as e:
            logger.warning("query_vector_unusable_falling_back_to_recency", error=str(e))
        else:
            return f"array_cosine_similarity(embedding, {literal}) DESC, id ASC", "semantic"

    return "created_at DESC, id ASC", "recency"


def build_search_query(params: SearchParams, dimensions: int) -> SearchQuery:
    """Build the full SELECT statement for a composite search."""
    conditions, parameters = build_conditions(params)
    order_by, ranking = build_order_by(params, dimensions)

    sql = f"SELECT {SELECT_COLUMNS} FROM episodes"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += f" ORDER BY {order_by} LIMIT ?"
    parameters.append(params.limit)

    return SearchQuery(sql=sql, parameters=parameters, ranking=ranking)
