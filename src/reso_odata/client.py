"""
ResoClient: configuration, transport and executor wired together.

Typical usage::

    async with ResoClient.from_env() as client:
        query = QueryBuilder("Property").filter("City eq 'Austin'").top(10).build()
        envelope = await client.execute(query)
        for record in envelope.records:
            print(record.get_field("ListingKey"))

        records = await client.replicate_all(
            ReplicationQueryBuilder("Property").build()
        )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .config import ENV_PREFIX, ClientConfig, load_env
from .executor import QueryExecutor
from .pagination import ReplicationPaginator
from .transport import HttpTransport

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path
    from types import TracebackType

    from .envelope import ODataEnvelope, Record, ReplicationResponse
    from .ports import ITransport
    from .query import Query, ReplicationQuery

logger = logging.getLogger(__name__)


class ResoClient:
    """
    Facade over one RESO Web API service.

    Safe to use from many tasks at once: it holds no per-request state.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: ITransport | None = None,
        executor: QueryExecutor | None = None,
    ) -> None:
        self.config = config
        self._owns_transport = transport is None
        self.transport: ITransport = (
            transport if transport is not None else HttpTransport.from_config(config)
        )
        self.executor = executor if executor is not None else QueryExecutor()

    @classmethod
    def from_env(
        cls,
        env_file: str | Path | None = None,
        prefix: str = ENV_PREFIX,
    ) -> ResoClient:
        """
        Build a client from ``RESO_*`` environment variables.

        ``env_file`` (or a ``.env`` found from the working directory) is
        loaded first; variables already set in the environment win.
        """
        loaded = load_env(env_file)
        logger.debug("Env file loaded: %s", loaded)
        return cls(ClientConfig.from_env(prefix=prefix))

    # -- queries -------------------------------------------------------------

    async def execute(self, query: Query) -> ODataEnvelope:
        return await self.executor.execute(self.transport, query)

    async def execute_count(self, query: Query) -> int:
        return await self.executor.execute_count(self.transport, query)

    async def fetch_metadata(self) -> str:
        return await self.executor.fetch_metadata(self.transport)

    # -- replication ---------------------------------------------------------

    async def execute_replication(self, query: ReplicationQuery) -> ReplicationResponse:
        """Fetch only the first page; see ``replicate`` for the full stream."""
        return await self.executor.execute_replication(self.transport, query)

    async def execute_link(self, link: str) -> ReplicationResponse:
        return await self.executor.execute_link(self.transport, link)

    def paginator(self, max_pages: int | None = None) -> ReplicationPaginator:
        return ReplicationPaginator(self.executor, self.transport, max_pages=max_pages)

    def replicate(
        self,
        query: ReplicationQuery | None = None,
        *,
        start_link: str | None = None,
        max_pages: int | None = None,
    ) -> AsyncIterator[ReplicationResponse]:
        """Iterate over every page of a replication stream."""
        return self.paginator(max_pages).pages(query, start_link=start_link)

    async def replicate_all(
        self,
        query: ReplicationQuery | None = None,
        *,
        start_link: str | None = None,
        max_pages: int | None = None,
    ) -> list[Record]:
        return await self.paginator(max_pages).collect_records(
            query, start_link=start_link
        )

    # -- lifecycle -----------------------------------------------------------

    async def aclose(self) -> None:
        if self._owns_transport and isinstance(self.transport, HttpTransport):
            await self.transport.aclose()

    async def __aenter__(self) -> ResoClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
