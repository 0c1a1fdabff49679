"""
Replication pagination driver.

Follows continuation links page by page until the server stops sending
one. Each stream is sequential (a page's link comes from the previous
page); independent streams may run concurrently.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urljoin

from .exceptions import PaginationStalledError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from .envelope import Record, ReplicationResponse
    from .executor import QueryExecutor
    from .ports import ITransport
    from .query import ReplicationQuery

logger = logging.getLogger(__name__)


class ReplicationPaginator:
    """
    Drives ``QueryExecutor.execute_link`` across a replication stream.

    A server that hands back the link it was just called with would make a
    naive loop spin forever; that case raises ``PaginationStalledError``.
    ``max_pages`` optionally bounds the total number of pages fetched.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        transport: ITransport,
        max_pages: int | None = None,
    ) -> None:
        if max_pages is not None and max_pages <= 0:
            raise ValueError("max_pages must be positive")
        self._executor = executor
        self._transport = transport
        self.max_pages = max_pages

    def _absolute(self, link: str) -> str:
        return urljoin(f"{self._transport.service_root}/", link)

    async def pages(
        self,
        query: ReplicationQuery | None = None,
        *,
        start_link: str | None = None,
    ) -> AsyncIterator[ReplicationResponse]:
        """
        Yield every page of the stream, first to last.

        Start either from a ``ReplicationQuery`` or from a link saved from an
        earlier run (``start_link``), not both.

        Raises:
            PaginationStalledError: The cursor did not advance, or
                ``max_pages`` was exceeded.
        """
        if (query is None) == (start_link is None):
            raise ValueError("Provide exactly one of query or start_link")

        link = query.relative_url() if query is not None else str(start_link)
        fetched = 0

        while True:
            if self.max_pages is not None and fetched >= self.max_pages:
                raise PaginationStalledError(
                    link,
                    f"Replication exceeded max_pages={self.max_pages}; next link: {link}",
                )
            page = await self._executor.execute_link(self._transport, link)
            fetched += 1
            logger.debug("Replication page %d: %d record(s)", fetched, len(page))
            yield page

            if page.next_link is None:
                logger.debug("Replication finished after %d page(s)", fetched)
                return
            if self._absolute(page.next_link) == self._absolute(link):
                raise PaginationStalledError(page.next_link)
            link = page.next_link

    async def collect_pages(
        self,
        query: ReplicationQuery | None = None,
        *,
        start_link: str | None = None,
    ) -> list[ReplicationResponse]:
        return [page async for page in self.pages(query, start_link=start_link)]

    async def collect_records(
        self,
        query: ReplicationQuery | None = None,
        *,
        start_link: str | None = None,
    ) -> list[Record]:
        """All records of the stream, concatenated in page order."""
        records: list[Record] = []
        async for page in self.pages(query, start_link=start_link):
            records.extend(page.records)
        return records
