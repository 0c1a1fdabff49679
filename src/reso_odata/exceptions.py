"""
Exception hierarchy for query construction, execution and replication.

All exceptions inherit from ``ResoError`` and provide ``to_dict()`` for
API-friendly error responses.
"""

from __future__ import annotations

from typing import Any


class ResoError(Exception):
    """Root exception for the whole reso-odata package."""

    code = "RESO_ERROR"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": str(self),
        }


class ConfigurationError(ResoError):
    """Client configuration is missing or invalid."""

    code = "CONFIGURATION_ERROR"


# ── Builder-time validation ──────────────────────────────────────────


class QueryValidationError(ResoError):
    """Base class for failures raised by ``build()`` on a query builder."""

    code = "QUERY_VALIDATION_ERROR"


class MissingResourceError(QueryValidationError):
    """No resource (entity collection) name was supplied."""

    code = "MISSING_RESOURCE"

    def __init__(self, message: str = "A resource name is required") -> None:
        super().__init__(message)


class ConflictingClauseError(QueryValidationError):
    """
    Two clauses that cannot be combined were both set.

    ``clauses`` names the offending pair (or group) for the caller.
    """

    code = "CONFLICTING_CLAUSE"

    def __init__(self, message: str, clauses: tuple[str, ...] = ()) -> None:
        self.clauses = clauses
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": str(self),
            "clauses": list(self.clauses),
        }


class InvalidLimitError(QueryValidationError):
    """``$top`` or ``$skip`` is out of range."""

    code = "INVALID_LIMIT"

    def __init__(self, clause: str, value: object) -> None:
        self.clause = clause
        self.value = value
        if clause == "top":
            message = f"top must be a positive integer, got {value!r}"
        else:
            message = f"{clause} must be a non-negative integer, got {value!r}"
        super().__init__(message)


class InvalidDirectionError(QueryValidationError):
    """Sort direction is not ``asc`` or ``desc``."""

    code = "INVALID_DIRECTION"

    def __init__(self, direction: object) -> None:
        self.direction = direction
        super().__init__(
            f"Invalid sort direction {direction!r}: expected 'asc' or 'desc'"
        )


class InvalidFilterError(QueryValidationError):
    """Filter expression is blank."""

    code = "INVALID_FILTER"


class InvalidFieldError(QueryValidationError):
    """A field, navigation property or key is blank."""

    code = "INVALID_FIELD"

    def __init__(self, clause: str, value: object) -> None:
        self.clause = clause
        self.value = value
        super().__init__(f"Blank name in {clause}: {value!r}")


class FilterCompileError(QueryValidationError):
    """A filter AST node could not be rendered to an OData predicate."""

    code = "FILTER_COMPILE_ERROR"


# ── Execution ────────────────────────────────────────────────────────


class TransportError(ResoError):
    """The request never produced an HTTP response (network failure)."""

    code = "TRANSPORT_ERROR"

    def __init__(self, message: str, url: str | None = None) -> None:
        self.url = url
        super().__init__(message)


class RequestTimeoutError(TransportError):
    """The request exceeded the configured timeout."""

    code = "TIMEOUT"

    def __init__(self, url: str, timeout: float | None = None) -> None:
        self.timeout = timeout
        message = f"Request to {url} timed out"
        if timeout is not None:
            message += f" after {timeout}s"
        super().__init__(message, url=url)


class HttpStatusError(ResoError):
    """The server answered with a non-2xx status."""

    code = "HTTP_STATUS"

    def __init__(self, status_code: int, url: str, body: str = "") -> None:
        self.status_code = status_code
        self.url = url
        self.body = body
        message = f"HTTP {status_code} for {url}"
        if body:
            message += f": {body[:200]}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": str(self),
            "status_code": self.status_code,
            "url": self.url,
        }


class NotFoundError(HttpStatusError):
    """
    A keyed lookup answered 404.

    Servers without direct key access also answer 404, so this cannot tell
    "no such record" apart from "key access unsupported"; only the response
    body (server-dependent) may help.
    """

    code = "NOT_FOUND"

    def __init__(self, url: str, body: str = "") -> None:
        super().__init__(404, url, body)


class MalformedResponseError(ResoError):
    """The response body did not have the shape the operation expects."""

    code = "MALFORMED_RESPONSE"


class FieldTypeError(MalformedResponseError):
    """A record field holds a different JSON type than the one requested."""

    code = "FIELD_TYPE_MISMATCH"

    def __init__(self, name: str, expected: str, actual: str) -> None:
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(f"Field {name!r} is {actual}, not {expected}")


class PaginationStalledError(ResoError):
    """The replication cursor did not advance."""

    code = "PAGINATION_STALLED"

    def __init__(self, link: str | None, message: str | None = None) -> None:
        self.link = link
        super().__init__(
            message or f"Server returned the same next link twice in a row: {link}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": str(self),
            "link": self.link,
        }
