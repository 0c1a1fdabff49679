"""Transport port consumed by the execution layer."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from .exceptions import MalformedResponseError


@dataclass(frozen=True)
class TransportResponse:
    """Status, body and headers of one HTTP exchange."""

    url: str
    status_code: int
    text: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        lowered = {k.lower(): v for k, v in self.headers.items()}
        object.__setattr__(self, "headers", lowered)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def json(self) -> Any:
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(
                f"Response from {self.url} is not valid JSON: {e}"
            ) from e


@runtime_checkable
class ITransport(Protocol):
    """
    Async GET against a RESO service.

    Implementations resolve ``url`` against their service root when it is
    relative, attach credentials and apply their timeout. They raise
    ``TransportError`` / ``RequestTimeoutError`` for failures that produced
    no HTTP response and return every HTTP response, whatever its status.
    """

    @property
    def service_root(self) -> str:
        """Absolute URL that relative request paths are resolved against."""
        ...

    async def get(
        self,
        url: str,
        *,
        accept: str = "application/json",
    ) -> TransportResponse:
        """Issue a GET and return the response."""
        ...
