from __future__ import annotations

from enum import Enum


class FilterOperator(str, Enum):
    """Operators understood by the ``$filter`` compiler."""

    # Comparison
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"
    IN = "in"
    NOT_IN = "not_in"
    BETWEEN = "between"

    # String functions
    CONTAINS = "contains"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"

    # Null checks
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"

    # Logical operators
    AND = "and"
    OR = "or"
    NOT = "not"


# Symbolic and long-form spellings accepted in addition to the enum values
OPERATOR_ALIASES: dict[str, FilterOperator] = {
    "=": FilterOperator.EQ,
    "==": FilterOperator.EQ,
    "!=": FilterOperator.NE,
    ">": FilterOperator.GT,
    ">=": FilterOperator.GE,
    "gte": FilterOperator.GE,
    "<": FilterOperator.LT,
    "<=": FilterOperator.LE,
    "lte": FilterOperator.LE,
    "starts_with": FilterOperator.STARTSWITH,
    "ends_with": FilterOperator.ENDSWITH,
    "null": FilterOperator.IS_NULL,
    "not_null": FilterOperator.IS_NOT_NULL,
}

LOGICAL_OPERATORS: frozenset[FilterOperator] = frozenset(
    {FilterOperator.AND, FilterOperator.OR, FilterOperator.NOT}
)


def resolve_operator(op: FilterOperator | str) -> FilterOperator | None:
    """Map an operator or one of its spellings to ``FilterOperator``."""
    if isinstance(op, FilterOperator):
        return op
    key = str(op).strip().lower()
    if key in OPERATOR_ALIASES:
        return OPERATOR_ALIASES[key]
    try:
        return FilterOperator(key)
    except ValueError:
        return None
