"""
Execution adapter: turns query values into requests and interprets the
JSON envelopes that come back.

``QueryExecutor`` keeps no state between calls, so one instance can serve
any number of concurrent executions against the same transport. It never
retries and never follows continuation links by itself; see
``ReplicationPaginator`` for that.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .envelope import (
    COUNT_FIELD,
    NEXT_LINK_FIELD,
    ODataEnvelope,
    ReplicationResponse,
    records_from,
)
from .exceptions import HttpStatusError, MalformedResponseError, NotFoundError

if TYPE_CHECKING:
    from .ports import ITransport, TransportResponse
    from .query import Query, ReplicationQuery

logger = logging.getLogger(__name__)

METADATA_PATH = "$metadata"
NEXT_LINK_HEADER = "next"


def _raise_for_status(response: TransportResponse, *, keyed: bool = False) -> None:
    if response.is_success:
        return
    if keyed and response.status_code == 404:
        raise NotFoundError(response.url, response.text)
    raise HttpStatusError(response.status_code, response.url, response.text)


def _require_count(envelope: ODataEnvelope) -> int:
    count = envelope.count
    if count is None:
        raise MalformedResponseError(f"Response has no '{COUNT_FIELD}' field")
    return count


class QueryExecutor:
    """Issues ``Query`` / ``ReplicationQuery`` requests through an ``ITransport``."""

    async def execute(self, transport: ITransport, query: Query) -> ODataEnvelope:
        """
        Run a collection, count or keyed query and return the parsed envelope.

        The envelope is returned even when it has no ``value`` array, so the
        caller can inspect single entities and error payloads.

        Raises:
            NotFoundError: A keyed lookup answered 404.
            HttpStatusError: Any other non-2xx status.
            MalformedResponseError: The body is not JSON.
            TransportError: No response was received.
        """
        response = await transport.get(query.relative_url())
        _raise_for_status(response, keyed=query.is_keyed)
        envelope = ODataEnvelope(response.json())
        value = envelope.raw.get("value") if isinstance(envelope.raw, dict) else None
        logger.debug(
            "%s returned %d item(s)",
            query.path(),
            len(value) if isinstance(value, list) else 0,
        )
        return envelope

    async def execute_count(self, transport: ITransport, query: Query) -> int:
        """
        Run a count-only query and return ``@odata.count``.

        Raises:
            ValueError: ``query`` is not count-only.
            MalformedResponseError: The aggregate is missing or not an integer.
        """
        if not query.count_only:
            raise ValueError("execute_count requires a count-only query")
        response = await transport.get(query.relative_url())
        _raise_for_status(response)
        count = _require_count(ODataEnvelope(response.json()))
        logger.debug("%s count=%d", query.path(), count)
        return count

    async def execute_replication(
        self,
        transport: ITransport,
        query: ReplicationQuery,
    ) -> ReplicationResponse:
        """Fetch the first page of a replication stream."""
        return await self.execute_link(transport, query.relative_url())

    async def execute_link(
        self,
        transport: ITransport,
        link: str,
    ) -> ReplicationResponse:
        """
        Fetch one replication page from a continuation link.

        ``link`` may be absolute or relative to the service root. The next
        link is read from ``@odata.nextLink``, falling back to a ``next``
        response header.
        """
        response = await transport.get(link)
        _raise_for_status(response)

        envelope = ODataEnvelope(response.json())
        if not envelope.has_value:
            raise MalformedResponseError(
                f"Replication response from {response.url} has no 'value' array"
            )
        records = records_from(envelope.raw["value"])

        next_link = envelope.next_link
        if next_link is None:
            next_link = response.header(NEXT_LINK_HEADER)
        next_link = next_link.strip() if next_link else None

        logger.debug(
            "Replication page: %d record(s), %s %s",
            len(records),
            NEXT_LINK_FIELD,
            next_link or "none",
        )
        return ReplicationResponse(records=records, next_link=next_link or None)

    async def fetch_metadata(self, transport: ITransport) -> str:
        """Return the service's ``$metadata`` XML document, unparsed."""
        response = await transport.get(METADATA_PATH, accept="application/xml")
        _raise_for_status(response)
        logger.debug("Fetched metadata (%d bytes)", len(response.text))
        return response.text
