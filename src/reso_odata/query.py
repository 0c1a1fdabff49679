"""
Immutable query values.

``Query`` and ``ReplicationQuery`` are produced by their builders and know
how to render themselves into a resource path and an ordered list of
system query options. The parameter order is fixed (``$filter``,
``$select``, ``$orderby``, ``$expand``, ``$skip``, ``$top``, ``$count``) so
that equal queries always render to byte-identical strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from .expressions import OrderBy, render_field_list, render_key_segment

# Characters left unescaped in encoded parameter values
_SAFE_CHARS = "',()*:@/"


def _join(params: list[tuple[str, str]]) -> str:
    return "&".join(f"{name}={value}" for name, value in params)


def _encode(params: list[tuple[str, str]]) -> str:
    return "&".join(
        f"{name}={quote(value, safe=_SAFE_CHARS)}" for name, value in params
    )


def _relative_url(path: str, encoded_query: str) -> str:
    path = quote(path, safe=_SAFE_CHARS)
    return f"{path}?{encoded_query}" if encoded_query else path


@dataclass(frozen=True)
class Query:
    """
    A fully specified request against one resource.

    Attributes:
        resource: Entity collection name, e.g. ``"Property"``.
        filter: ``$filter`` predicate text.
        select: Fields to return; empty means the server default.
        order_by: Single ``$orderby`` term.
        expand: Navigation properties to expand.
        top: Result cap (positive).
        skip: Offset for offset-based paging.
        count_only: Request only the ``@odata.count`` aggregate.
        key: Primary key for a single-record lookup.
    """

    resource: str
    filter: str | None = None
    select: tuple[str, ...] = ()
    order_by: OrderBy | None = None
    expand: tuple[str, ...] = ()
    top: int | None = None
    skip: int | None = None
    count_only: bool = False
    key: str | None = None

    @property
    def is_keyed(self) -> bool:
        return self.key is not None

    def path(self) -> str:
        """Resource path relative to the service root."""
        if self.key is not None:
            return render_key_segment(self.resource, self.key)
        return self.resource

    def to_params(self) -> list[tuple[str, str]]:
        """Rendered system query options, in canonical order."""
        params: list[tuple[str, str]] = []
        if self.count_only:
            if self.filter:
                params.append(("$filter", self.filter))
            params.append(("$count", "true"))
            return params

        if self.filter and self.key is None:
            params.append(("$filter", self.filter))
        if self.select:
            params.append(("$select", render_field_list(self.select)))
        if self.order_by is not None and self.key is None:
            params.append(("$orderby", self.order_by.render()))
        if self.expand:
            params.append(("$expand", render_field_list(self.expand)))
        if self.key is None:
            if self.skip is not None:
                params.append(("$skip", str(self.skip)))
            if self.top is not None:
                params.append(("$top", str(self.top)))
        return params

    def query_string(self) -> str:
        """Unencoded query string, e.g. ``$filter=City eq 'Austin'&$top=5``."""
        return _join(self.to_params())

    def encoded_query_string(self) -> str:
        """Percent-encoded query string as sent on the wire."""
        return _encode(self.to_params())

    def relative_url(self) -> str:
        """Encoded path and query string, relative to the service root."""
        if self.key is not None:
            path = render_key_segment(self.resource, self.key, encoded=True)
            query = self.encoded_query_string()
            return f"{path}?{query}" if query else path
        return _relative_url(self.path(), self.encoded_query_string())

    def __str__(self) -> str:
        rendered = self.query_string()
        return f"{self.path()}?{rendered}" if rendered else self.path()


@dataclass(frozen=True)
class ReplicationQuery:
    """
    A bulk replication request: a resource and an optional filter.

    Paging is driven by the server's continuation link, never by offsets.
    """

    resource: str
    filter: str | None = None

    def path(self) -> str:
        return f"{self.resource}/replication"

    def to_params(self) -> list[tuple[str, str]]:
        return [("$filter", self.filter)] if self.filter else []

    def query_string(self) -> str:
        return _join(self.to_params())

    def encoded_query_string(self) -> str:
        return _encode(self.to_params())

    def relative_url(self) -> str:
        return _relative_url(self.path(), self.encoded_query_string())

    def __str__(self) -> str:
        rendered = self.query_string()
        return f"{self.path()}?{rendered}" if rendered else self.path()
