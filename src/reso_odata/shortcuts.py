"""One-call helpers for the most common query shapes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .builder import QueryBuilder, ReplicationQueryBuilder

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .client import ResoClient
    from .expressions import OrderDirection
    from .query import Query, ReplicationQuery


def _base(resource: str, filter: str | None) -> QueryBuilder:
    builder = QueryBuilder(resource)
    if filter is not None:
        builder.filter(filter)
    return builder


def build_query(
    resource: str,
    filter: str | None = None,
    top: int | None = None,
) -> Query:
    """Collection query with an optional filter and ``$top``."""
    builder = _base(resource, filter)
    if top is not None:
        builder.top(top)
    return builder.build()


def build_query_with_select(
    resource: str,
    filter: str | None,
    fields: Sequence[str],
    top: int | None = None,
) -> Query:
    builder = _base(resource, filter).select(fields)
    if top is not None:
        builder.top(top)
    return builder.build()


def build_query_by_key(
    resource: str,
    key: str,
    fields: Sequence[str] | None = None,
) -> Query:
    builder = QueryBuilder.by_key(resource, key)
    if fields:
        builder.select(fields)
    return builder.build()


def build_query_with_order(
    resource: str,
    filter: str | None,
    order_field: str,
    direction: OrderDirection | str,
    top: int | None = None,
) -> Query:
    builder = _base(resource, filter).order_by(order_field, direction)
    if top is not None:
        builder.top(top)
    return builder.build()


def build_query_with_pagination(
    resource: str,
    filter: str | None,
    fields: Sequence[str],
    skip: int,
    top: int,
) -> Query:
    """One page of an offset-paged listing: ``$skip=skip&$top=top``."""
    return _base(resource, filter).select(fields).skip(skip).top(top).build()


def build_query_with_expand(
    resource: str,
    filter: str | None,
    fields: Sequence[str],
    expand: Sequence[str],
    top: int | None = None,
) -> Query:
    builder = _base(resource, filter).select(fields).expand(expand)
    if top is not None:
        builder.top(top)
    return builder.build()


def build_count_query(resource: str, filter: str | None = None) -> Query:
    return _base(resource, filter).count().build()


def build_replication_query(
    resource: str,
    filter: str | None = None,
) -> ReplicationQuery:
    builder = ReplicationQueryBuilder(resource)
    if filter is not None:
        builder.filter(filter)
    return builder.build()


async def count_records(
    client: ResoClient,
    resource: str,
    filter: str | None = None,
) -> int:
    """Total number of ``resource`` records matching ``filter``."""
    return await client.execute_count(build_count_query(resource, filter))
