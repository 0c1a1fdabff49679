"""
Fluent builder and compiler for ``$filter`` predicates.

Conditions are collected as small ``op/attr/val`` dictionaries and compiled
into OData filter text on ``build()``.

Example::

    expr = (
        FilterBuilder()
        .where("City", "eq", "Austin")
        .where("ListPrice", "gt", 300000)
        .build()
    )
    # → City eq 'Austin' and ListPrice gt 300000

    expr = (
        FilterBuilder()
        .or_group()
            .where("City", "eq", "Austin")
            .where("City", "eq", "Dallas")
        .end_group()
        .where("StandardStatus", "eq", "Active")
        .build()
    )
    # → (City eq 'Austin' or City eq 'Dallas') and StandardStatus eq 'Active'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .exceptions import FilterCompileError, InvalidFilterError
from .expressions import format_literal
from .operators import LOGICAL_OPERATORS, FilterOperator, resolve_operator

_COMPARISONS = frozenset(
    {
        FilterOperator.EQ,
        FilterOperator.NE,
        FilterOperator.GT,
        FilterOperator.GE,
        FilterOperator.LT,
        FilterOperator.LE,
    }
)
_FUNCTIONS = frozenset(
    {FilterOperator.CONTAINS, FilterOperator.STARTSWITH, FilterOperator.ENDSWITH}
)


@dataclass(frozen=True)
class FilterExpression:
    """A compiled ``$filter`` predicate."""

    text: str

    def render(self) -> str:
        return self.text

    def __str__(self) -> str:
        return self.text

    def __and__(self, other: FilterExpression | str) -> FilterExpression:
        return FilterExpression(f"({self.text}) and ({_text_of(other)})")

    def __or__(self, other: FilterExpression | str) -> FilterExpression:
        return FilterExpression(f"({self.text}) or ({_text_of(other)})")

    def __invert__(self) -> FilterExpression:
        return FilterExpression(f"not ({self.text})")


def _text_of(value: FilterExpression | str) -> str:
    return value.text if isinstance(value, FilterExpression) else value


# -- compilation --------------------------------------------------------------


def _compile_leaf(data: dict[str, Any]) -> str:
    attr = data.get("attr")
    if not attr or not str(attr).strip():
        raise FilterCompileError(f"Filter condition missing 'attr': {data}")
    attr = str(attr).strip()
    op = resolve_operator(data.get("op", ""))
    val = data.get("val")

    if op in _COMPARISONS:
        return f"{attr} {op.value} {format_literal(val)}"
    if op in _FUNCTIONS:
        return f"{op.value}({attr},{format_literal(val)})"
    if op is FilterOperator.IS_NULL:
        return f"{attr} eq null"
    if op is FilterOperator.IS_NOT_NULL:
        return f"{attr} ne null"
    if op in (FilterOperator.IN, FilterOperator.NOT_IN):
        values = _as_list(val, op)
        rendered = f"{attr} in ({','.join(format_literal(v) for v in values)})"
        return rendered if op is FilterOperator.IN else f"not ({rendered})"
    if op is FilterOperator.BETWEEN:
        if not isinstance(val, (list, tuple)) or len(val) != 2:
            raise FilterCompileError("between requires a list of two values")
        lo, hi = val
        return f"{attr} ge {format_literal(lo)} and {attr} le {format_literal(hi)}"
    raise FilterCompileError(f"Unknown filter operator: {data.get('op')!r}")


def _as_list(val: Any, op: FilterOperator) -> list[Any]:
    values = list(val) if isinstance(val, (list, tuple, set, frozenset)) else [val]
    if not values:
        raise FilterCompileError(f"{op.value} requires at least one value")
    return values


def _compile_logical(
    op: FilterOperator,
    conditions: list[dict[str, Any]],
    *,
    nested: bool,
) -> str:
    if op is FilterOperator.NOT:
        if len(conditions) != 1:
            raise FilterCompileError("'not' node must contain exactly one condition")
        return f"not ({_compile_node(conditions[0], nested=False)})"
    if not conditions:
        raise FilterCompileError(f"'{op.value}' node has no conditions")
    if len(conditions) == 1:
        return _compile_node(conditions[0], nested=nested)
    joined = f" {op.value} ".join(_compile_node(c, nested=True) for c in conditions)
    return f"({joined})" if nested else joined


def _compile_node(data: dict[str, Any], *, nested: bool) -> str:
    if not isinstance(data, dict):
        raise FilterCompileError("Filter node must be a dict")
    if "raw" in data:
        text = str(data["raw"]).strip()
        if not text:
            raise FilterCompileError("Raw filter text is blank")
        return f"({text})" if nested else text

    op = resolve_operator(data.get("op", ""))
    if op is not None and op in LOGICAL_OPERATORS:
        return _compile_logical(op, data.get("conditions") or [], nested=nested)

    text = _compile_leaf(data)
    if nested and op is FilterOperator.BETWEEN:
        return f"({text})"
    return text


def compile_filter(data: dict[str, Any]) -> FilterExpression:
    """
    Compile a filter AST into a ``FilterExpression``.

    Leaves are ``{"op": ..., "attr": ..., "val": ...}``; composites are
    ``{"op": "and"|"or"|"not", "conditions": [...]}``; ``{"raw": "..."}``
    embeds pre-written filter text.
    """
    return FilterExpression(_compile_node(data, nested=False))


# -- builder ------------------------------------------------------------------


class FilterBuilder:
    """
    Fluent builder for ``$filter`` predicates.

    Conditions added at the same level are combined with AND. Use
    ``or_group()`` / ``and_group()`` / ``not_group()`` for explicit grouping
    and ``end_group()`` to close the current group.
    """

    def __init__(self) -> None:
        self._nodes: list[dict[str, Any]] = []
        self._stack: list[tuple[str, list[dict[str, Any]]]] = []

    def where(
        self,
        attr: str,
        op: FilterOperator | str,
        val: Any = None,
    ) -> FilterBuilder:
        """Add a single field condition to the current group."""
        operator = resolve_operator(op)
        if operator is None:
            raise FilterCompileError(f"Unknown filter operator: {op!r}")
        self._current().append({"op": operator.value, "attr": attr, "val": val})
        return self

    def raw(self, expression: str) -> FilterBuilder:
        """Add pre-written filter text to the current group."""
        if not expression or not expression.strip():
            raise InvalidFilterError("Filter expression must not be blank")
        self._current().append({"raw": expression})
        return self

    def and_group(self) -> FilterBuilder:
        self._stack.append(("and", []))
        return self

    def or_group(self) -> FilterBuilder:
        self._stack.append(("or", []))
        return self

    def not_group(self) -> FilterBuilder:
        self._stack.append(("not", []))
        return self

    def end_group(self) -> FilterBuilder:
        """Close the current group and add it to the parent."""
        if not self._stack:
            raise FilterCompileError("No open group to close")
        op, nodes = self._stack.pop()
        if not nodes:
            raise FilterCompileError("Cannot close an empty group")
        self._current().append({"op": op, "conditions": nodes})
        return self

    def to_dict(self) -> dict[str, Any]:
        """Return the collected AST (top level combined with AND)."""
        if self._stack:
            raise FilterCompileError(
                f"{len(self._stack)} group(s) still open; "
                f"call end_group() before build()"
            )
        if not self._nodes:
            raise FilterCompileError("No conditions added to builder")
        if len(self._nodes) == 1:
            return self._nodes[0]
        return {"op": "and", "conditions": list(self._nodes)}

    def build(self) -> FilterExpression:
        return compile_filter(self.to_dict())

    def reset(self) -> FilterBuilder:
        self._nodes.clear()
        self._stack.clear()
        return self

    def _current(self) -> list[dict[str, Any]]:
        if self._stack:
            return self._stack[-1][1]
        return self._nodes
