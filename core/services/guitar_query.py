# =============================================================================
# core/services/guitar_query.py - Guitar Filter/Search Query Construction
# =============================================================================
# Turns validated filters into PostgREST predicates:
# - Structured filters become one condition per supplied field, ANDed
#   together by chaining them on the query builder.
# - A search string becomes one `or` expression: case-insensitive literal
#   substring match on brand, model, color, or description.
#
# The conditions are plain data so they can be inspected in tests without
# a database.
# =============================================================================

from dataclasses import dataclass
from typing import Any

from core.models.guitar import GuitarFilters

# Columns matched by free-text search, in the order they are ORed
SEARCH_COLUMNS = ("brand", "model", "color", "description")


@dataclass(frozen=True)
class Condition:
    """One predicate: `column <operator> value` (operator is eq, gte, or lte)."""

    column: str
    operator: str
    value: str


def build_filter_conditions(filters: GuitarFilters) -> list[Condition]:
    """
    Build the conjunctive conditions for a set of filters.

    Only supplied fields produce a condition; an empty filter set produces
    no conditions, which selects every row.

    Example:
        build_filter_conditions(GuitarFilters(type="bass", max_price=500))
        # -> [Condition("type", "eq", "bass"), Condition("price", "lte", "500")]
    """
    conditions: list[Condition] = []

    if filters.type is not None:
        conditions.append(Condition("type", "eq", filters.type))
    if filters.brand is not None:
        conditions.append(Condition("brand", "eq", filters.brand))
    if filters.status is not None:
        conditions.append(Condition("status", "eq", filters.status))

    # Bounds are compared as numerics by Postgres, sent as decimal strings
    if filters.min_price is not None:
        conditions.append(Condition("price", "gte", str(filters.min_price)))
    if filters.max_price is not None:
        conditions.append(Condition("price", "lte", str(filters.max_price)))

    return conditions


def apply_conditions(query: Any, conditions: list[Condition]) -> Any:
    """Chain each condition onto a PostgREST query builder (implicit AND)."""
    for condition in conditions:
        query = getattr(query, condition.operator)(condition.column, condition.value)
    return query


def escape_regex(text: str) -> str:
    """
    Escape text so a Postgres regex matches it literally.

    Every character that is not a letter, digit, or whitespace gets a
    backslash (in Postgres AREs a backslash before such a character is
    always a literal).
    """
    return "".join(ch if ch.isalnum() or ch.isspace() else f"\\{ch}" for ch in text)


def _quote(value: str) -> str:
    # PostgREST logic trees need reserved characters (, . : ()) inside quotes
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_search_expression(text: str) -> str:
    """
    Build the PostgREST `or` expression for a free-text search.

    Uses `imatch` (case-insensitive regex) on the escaped text rather than
    `ilike`, because PostgREST rewrites `*` to `%` in like patterns.
    NULL descriptions never match.

    Example:
        build_search_expression("gibson")
        # -> 'brand.imatch."gibson",model.imatch."gibson",...'
    """
    pattern = _quote(escape_regex(text))
    return ",".join(f"{column}.imatch.{pattern}" for column in SEARCH_COLUMNS)
