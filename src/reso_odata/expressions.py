"""
Clause rendering for OData system query options.

Each helper turns one piece of query intent into the exact text that goes
after ``$select=``, ``$orderby=`` and so on. Rendering is pure: the same
input always yields the same string.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from .exceptions import FilterCompileError, InvalidDirectionError

if TYPE_CHECKING:
    from collections.abc import Iterable


# Only the literal's quotes stay unescaped in an encoded key segment
_KEY_SAFE = "'"


class OrderDirection(str, Enum):
    """Sort direction for ``$orderby``."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: OrderDirection | str) -> OrderDirection:
        """Normalise ``"ASC"``, ``"Asc"``, ``"asc"`` etc. to a member."""
        if isinstance(value, OrderDirection):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidDirectionError(value)


@dataclass(frozen=True)
class OrderBy:
    """A single ``$orderby`` term."""

    field: str
    direction: OrderDirection = OrderDirection.ASC

    def render(self) -> str:
        return f"{self.field} {self.direction.value}"


def dedupe(names: Iterable[str]) -> tuple[str, ...]:
    """Strip names and drop repeats, keeping first-seen order."""
    return tuple(dict.fromkeys(name.strip() for name in names))


def render_field_list(fields: Iterable[str]) -> str:
    """Render a ``$select`` / ``$expand`` list: ``A,B,C``."""
    return ",".join(dedupe(fields))


def quote_string(value: str) -> str:
    """Quote a string literal, doubling embedded single quotes."""
    return "'" + value.replace("'", "''") + "'"


def render_key_segment(resource: str, key: str, *, encoded: bool = False) -> str:
    """
    Render the path of a keyed lookup: ``Property('12345')``.

    With ``encoded`` the key literal is percent-encoded for the wire, so a
    ``/`` inside the key does not split the path.
    """
    literal = quote_string(key)
    if encoded:
        return f"{quote(resource, safe='')}({quote(literal, safe=_KEY_SAFE)})"
    return f"{resource}({literal})"


def format_literal(value: Any) -> str:
    """
    Format a Python value as an OData literal.

    Strings are single-quoted, ``None`` becomes ``null`` and booleans are
    lower-case. Naive datetimes are taken to be UTC.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return format_literal(value.value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise FilterCompileError(f"Cannot render non-finite number {value!r}")
        return repr(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise FilterCompileError(f"Cannot render non-finite number {value!r}")
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        text = value.isoformat()
        return text[:-6] + "Z" if text.endswith("+00:00") else text
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        return quote_string(value)
    raise FilterCompileError(
        f"Unsupported literal type {type(value).__name__}: {value!r}"
    )
