"""
Fluent builders for ``Query`` and ``ReplicationQuery``.

Example::

    query = (
        QueryBuilder("Property")
        .filter("City eq 'Austin'")
        .select("ListingKey", "City", "ListPrice")
        .order_by("ListPrice", "desc")
        .top(5)
        .build()
    )
    query.query_string()
    # → $filter=City eq 'Austin'&$select=ListingKey,City,ListPrice&$orderby=ListPrice desc&$top=5

Setters only record intent. Every rule about which clauses may be combined
is checked in ``build()``, so the order of calls never matters.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .exceptions import (
    ConflictingClauseError,
    InvalidFieldError,
    InvalidFilterError,
    InvalidLimitError,
    MissingResourceError,
)
from .expressions import OrderBy, OrderDirection
from .filters import FilterExpression
from .query import Query, ReplicationQuery

if TYPE_CHECKING:
    from collections.abc import Iterable


def _flatten(values: tuple[Any, ...]) -> list[str]:
    """Accept both ``select("A", "B")`` and ``select(["A", "B"])``."""
    if len(values) == 1 and not isinstance(values[0], str):
        return list(values[0])
    return list(values)


def _filter_text(expr: FilterExpression | str | None) -> str | None:
    if expr is None:
        return None
    text = expr.render() if isinstance(expr, FilterExpression) else expr
    if not isinstance(text, str) or not text.strip():
        raise InvalidFilterError("Filter expression must not be blank")
    return text.strip()


def _require_resource(resource: str | None) -> str:
    if resource is None or not str(resource).strip():
        raise MissingResourceError()
    return str(resource).strip()


def _check_names(clause: str, names: Iterable[str]) -> None:
    for name in names:
        if not isinstance(name, str) or not name.strip():
            raise InvalidFieldError(clause, name)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class QueryBuilder:
    """
    Mutable accumulator for a ``Query``.

    Not meant to be shared between tasks while it is being filled in; the
    ``Query`` it builds is immutable and may be shared freely.
    """

    def __init__(self, resource: str | None = None) -> None:
        self._resource = resource
        self._filter: FilterExpression | str | None = None
        self._select: list[str] = []
        self._order_by: tuple[str, OrderDirection | str] | None = None
        self._expand: list[str] = []
        self._top: int | None = None
        self._skip: int | None = None
        self._count = False
        self._key: str | None = None

    @classmethod
    def by_key(cls, resource: str, key: str) -> QueryBuilder:
        """Start a single-record lookup: ``Resource('key')``."""
        return cls(resource).key(key)

    # -- clauses -------------------------------------------------------------

    def filter(self, expr: FilterExpression | str) -> QueryBuilder:
        self._filter = expr
        return self

    def select(self, *fields: str | Iterable[str]) -> QueryBuilder:
        """Add fields to ``$select``. Repeats are dropped when rendering."""
        self._select.extend(_flatten(fields))
        return self

    def order_by(
        self,
        field: str,
        direction: OrderDirection | str = OrderDirection.ASC,
    ) -> QueryBuilder:
        """Set the ``$orderby`` term; a later call replaces an earlier one."""
        self._order_by = (field, direction)
        return self

    def expand(self, *navigation: str | Iterable[str]) -> QueryBuilder:
        self._expand.extend(_flatten(navigation))
        return self

    def top(self, limit: int) -> QueryBuilder:
        self._top = limit
        return self

    def skip(self, offset: int) -> QueryBuilder:
        self._skip = offset
        return self

    def count(self, enabled: bool = True) -> QueryBuilder:
        """Turn the query into a count-only request."""
        self._count = enabled
        return self

    def key(self, value: str) -> QueryBuilder:
        self._key = value
        return self

    def reset(self) -> QueryBuilder:
        """Clear every clause except the resource and return ``self``."""
        self._filter = None
        self._select.clear()
        self._order_by = None
        self._expand.clear()
        self._top = None
        self._skip = None
        self._count = False
        self._key = None
        return self

    # -- build ---------------------------------------------------------------

    def build(self) -> Query:
        """
        Validate the accumulated clauses and return an immutable ``Query``.

        Raises:
            MissingResourceError: No resource name.
            ConflictingClauseError: Key/count combined with incompatible clauses.
            InvalidLimitError: ``top`` not positive or ``skip`` negative.
            InvalidDirectionError: Sort direction other than asc/desc.
            InvalidFilterError: Blank filter.
            InvalidFieldError: Blank field, navigation property or key.
        """
        resource = _require_resource(self._resource)
        filter_text = _filter_text(self._filter)

        _check_names("select", self._select)
        _check_names("expand", self._expand)

        order_by = None
        if self._order_by is not None:
            field, direction = self._order_by
            _check_names("order_by", [field])
            order_by = OrderBy(field.strip(), OrderDirection.parse(direction))

        if self._top is not None and (not _is_int(self._top) or self._top <= 0):
            raise InvalidLimitError("top", self._top)
        if self._skip is not None and (not _is_int(self._skip) or self._skip < 0):
            raise InvalidLimitError("skip", self._skip)

        if self._key is not None:
            _check_names("key", [self._key])
            self._check_keyed(filter_text, order_by)
        if self._count:
            self._check_count_only(order_by)

        return Query(
            resource=resource,
            filter=filter_text,
            select=tuple(f.strip() for f in self._select),
            order_by=order_by,
            expand=tuple(n.strip() for n in self._expand),
            top=self._top,
            skip=self._skip,
            count_only=self._count,
            key=self._key,
        )

    def _check_keyed(self, filter_text: str | None, order_by: OrderBy | None) -> None:
        if filter_text is not None:
            raise ConflictingClauseError(
                "key-based lookup cannot be combined with a filter",
                ("key", "filter"),
            )
        for clause, value in (("skip", self._skip), ("top", self._top)):
            if value is not None:
                raise ConflictingClauseError(
                    f"key-based lookup cannot be combined with {clause}",
                    ("key", clause),
                )
        if order_by is not None:
            raise ConflictingClauseError(
                "key-based lookup cannot be combined with order_by",
                ("key", "order_by"),
            )
        if self._count:
            raise ConflictingClauseError(
                "key-based lookup cannot be combined with a count",
                ("key", "count"),
            )

    def _check_count_only(self, order_by: OrderBy | None) -> None:
        present = [
            name
            for name, is_set in (
                ("select", bool(self._select)),
                ("order_by", order_by is not None),
                ("expand", bool(self._expand)),
                ("top", self._top is not None),
                ("skip", self._skip is not None),
            )
            if is_set
        ]
        if present:
            raise ConflictingClauseError(
                f"count-only query cannot be combined with {', '.join(present)}",
                ("count", *present),
            )


class ReplicationQueryBuilder:
    """
    Builder for a ``ReplicationQuery``.

    Only a filter can be added: replication pages are addressed by the
    server's continuation link, so selection, ordering and offsets do not
    exist on this type.
    """

    def __init__(self, resource: str | None = None) -> None:
        self._resource = resource
        self._filter: FilterExpression | str | None = None

    def filter(self, expr: FilterExpression | str) -> ReplicationQueryBuilder:
        self._filter = expr
        return self

    def build(self) -> ReplicationQuery:
        return ReplicationQuery(
            resource=_require_resource(self._resource),
            filter=_filter_text(self._filter),
        )
