"""
Typed wrappers over OData JSON response documents.

Records are not indexable: fields are read through ``get_field()``, which
returns ``None`` when a field is absent and a ``FieldValue`` (possibly of
kind ``NULL``) when it is present. Typed accessors raise
``FieldTypeError`` instead of silently coercing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .exceptions import FieldTypeError, MalformedResponseError

if TYPE_CHECKING:
    from collections.abc import Iterator

COUNT_FIELD = "@odata.count"
NEXT_LINK_FIELD = "@odata.nextLink"
CONTEXT_FIELD = "@odata.context"


class JsonKind(Enum):
    """The six JSON value types."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    OBJECT = "object"
    ARRAY = "array"

    @classmethod
    def of(cls, value: Any) -> JsonKind:
        if value is None:
            return cls.NULL
        if isinstance(value, bool):
            return cls.BOOLEAN
        if isinstance(value, (int, float)):
            return cls.NUMBER
        if isinstance(value, str):
            return cls.STRING
        if isinstance(value, dict):
            return cls.OBJECT
        if isinstance(value, list):
            return cls.ARRAY
        raise MalformedResponseError(
            f"Not a JSON value: {type(value).__name__}"
        )


@dataclass(frozen=True)
class FieldValue:
    """A field value tagged with its JSON type."""

    name: str
    kind: JsonKind
    value: Any

    @classmethod
    def of(cls, name: str, value: Any) -> FieldValue:
        return cls(name=name, kind=JsonKind.of(value), value=value)

    @property
    def is_null(self) -> bool:
        return self.kind is JsonKind.NULL

    def _expect(self, kind: JsonKind) -> Any:
        if self.kind is not kind:
            raise FieldTypeError(self.name, kind.value, self.kind.value)
        return self.value

    def as_str(self) -> str:
        return self._expect(JsonKind.STRING)

    def as_number(self) -> int | float:
        return self._expect(JsonKind.NUMBER)

    def as_int(self) -> int:
        number = self.as_number()
        if isinstance(number, float):
            if not number.is_integer():
                raise FieldTypeError(self.name, "integer", "fractional number")
            return int(number)
        return number

    def as_bool(self) -> bool:
        return self._expect(JsonKind.BOOLEAN)

    def as_record(self) -> Record:
        """Nested object, e.g. an expanded navigation property."""
        return Record(self._expect(JsonKind.OBJECT))

    def as_list(self) -> list[Any]:
        return list(self._expect(JsonKind.ARRAY))


class Record:
    """One entity from a response, keyed by field name."""

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, Any]) -> None:
        self._data = data
        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"Record must be a JSON object, got {JsonKind.of(data).value}"
            )

    def get_field(self, name: str) -> FieldValue | None:
        if name not in self._data:
            return None
        return FieldValue.of(name, self._data[name])

    def field_names(self) -> list[str]:
        return list(self._data)

    def to_dict(self) -> dict[str, Any]:
        """Shallow copy of the underlying JSON object."""
        return dict(self._data)

    def __contains__(self, name: object) -> bool:
        return name in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"Record({self._data!r})"


def parse_count(field: FieldValue) -> int:
    """
    Read an ``@odata.count`` aggregate.

    Accepts a non-negative integer, an integral float or a string of ASCII
    digits; anything else raises ``MalformedResponseError``.
    """
    value = field.value
    if field.kind is JsonKind.NUMBER:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, int) and value >= 0:
            return value
    elif field.kind is JsonKind.STRING:
        text = value.strip()
        if text.isascii() and text.isdecimal():
            return int(text)
    raise MalformedResponseError(
        f"'{COUNT_FIELD}' is not a non-negative integer: {value!r}"
    )


def records_from(items: Any) -> tuple[Record, ...]:
    if not isinstance(items, list):
        raise MalformedResponseError(
            f"'value' must be an array, got {JsonKind.of(items).value}"
        )
    return tuple(Record(item) for item in items)


class ODataEnvelope:
    """
    A parsed response document.

    The raw document is always kept so callers can inspect bodies that do
    not follow the collection shape (single entities, error payloads).
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: Any) -> None:
        self._raw = raw

    @property
    def raw(self) -> Any:
        return self._raw

    @property
    def has_value(self) -> bool:
        return isinstance(self._raw, dict) and "value" in self._raw

    @property
    def records(self) -> tuple[Record, ...]:
        """Entities of the ``value`` array; empty when there is none."""
        if not self.has_value:
            return ()
        return records_from(self._raw["value"])

    def as_record(self) -> Record:
        """The whole document as one entity (keyed lookups)."""
        return Record(self._raw)

    def get_field(self, name: str) -> FieldValue | None:
        if not isinstance(self._raw, dict) or name not in self._raw:
            return None
        return FieldValue.of(name, self._raw[name])

    @property
    def count(self) -> int | None:
        """``@odata.count`` when present."""
        field = self.get_field(COUNT_FIELD)
        return None if field is None else parse_count(field)

    @property
    def next_link(self) -> str | None:
        field = self.get_field(NEXT_LINK_FIELD)
        if field is None or field.is_null:
            return None
        return field.as_str()

    @property
    def context(self) -> str | None:
        field = self.get_field(CONTEXT_FIELD)
        return None if field is None or field.is_null else field.as_str()

    def __len__(self) -> int:
        return len(self.records)

    def __repr__(self) -> str:
        return f"ODataEnvelope({self._raw!r})"


@dataclass(frozen=True)
class ReplicationResponse:
    """One page of a replication stream."""

    records: tuple[Record, ...]
    next_link: str | None = None

    @property
    def is_last(self) -> bool:
        return self.next_link is None

    def __len__(self) -> int:
        return len(self.records)
