"""Tests for ReplicationPaginator."""

from __future__ import annotations

import pytest
from fakes import SERVICE_ROOT, FakeTransport, json_response

from reso_odata import (
    PaginationStalledError,
    QueryExecutor,
    ReplicationPaginator,
    ReplicationQueryBuilder,
)


def _page(*keys: str, next_link: str | None = None) -> dict:
    body: dict = {"value": [{"ListingKey": key} for key in keys]}
    if next_link is not None:
        body["@odata.nextLink"] = next_link
    return body


@pytest.fixture
def query():
    return ReplicationQueryBuilder("Property").build()


# -- Happy path ---------------------------------------------------------------


@pytest.mark.asyncio
async def test_two_pages_two_requests(executor: QueryExecutor, query):
    link = f"{SERVICE_ROOT}/Property/replication?cursor=2"
    transport = FakeTransport(
        json_response(_page("A1", "A2", next_link=link)),
        json_response(_page("A3")),
    )
    paginator = ReplicationPaginator(executor, transport)

    pages = await paginator.collect_pages(query)

    assert [len(page) for page in pages] == [2, 1]
    assert transport.requests == ["Property/replication", link]
    assert pages[-1].is_last


@pytest.mark.asyncio
async def test_collect_records_keeps_page_order(executor: QueryExecutor, query):
    transport = FakeTransport(
        json_response(_page("A1", next_link="Property/replication?cursor=2")),
        json_response(_page("A2", next_link="Property/replication?cursor=3")),
        json_response(_page("A3")),
    )
    paginator = ReplicationPaginator(executor, transport)

    records = await paginator.collect_records(query)

    assert [r.get_field("ListingKey").as_str() for r in records] == ["A1", "A2", "A3"]
    assert len(transport.requests) == 3


@pytest.mark.asyncio
async def test_single_empty_page(executor: QueryExecutor, query):
    transport = FakeTransport(json_response(_page()))
    paginator = ReplicationPaginator(executor, transport)

    assert await paginator.collect_records(query) == []
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_resume_from_start_link(executor: QueryExecutor):
    transport = FakeTransport(json_response(_page("A9")))
    paginator = ReplicationPaginator(executor, transport)

    pages = await paginator.collect_pages(start_link="Property/replication?cursor=9")

    assert transport.requests == ["Property/replication?cursor=9"]
    assert len(pages) == 1


@pytest.mark.asyncio
async def test_pages_are_streamed_lazily(executor: QueryExecutor, query):
    transport = FakeTransport(
        json_response(_page("A1", next_link="Property/replication?cursor=2")),
    )
    paginator = ReplicationPaginator(executor, transport)

    async for page in paginator.pages(query):
        assert len(page) == 1
        break

    assert len(transport.requests) == 1


# -- Guards -------------------------------------------------------------------


@pytest.mark.asyncio
async def test_repeated_link_stalls(executor: QueryExecutor):
    link = "Property/replication?cursor=1"
    transport = FakeTransport(json_response(_page("A1", next_link=link)))
    paginator = ReplicationPaginator(executor, transport)

    with pytest.raises(PaginationStalledError) as exc_info:
        await paginator.collect_pages(start_link=link)
    assert exc_info.value.link == link
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_relative_and_absolute_forms_of_same_link_stall(executor: QueryExecutor):
    relative = "Property/replication?cursor=1"
    transport = FakeTransport(
        json_response(_page("A1", next_link=f"{SERVICE_ROOT}/{relative}"))
    )
    paginator = ReplicationPaginator(executor, transport)

    with pytest.raises(PaginationStalledError):
        await paginator.collect_pages(start_link=relative)


@pytest.mark.asyncio
async def test_max_pages(executor: QueryExecutor, query):
    transport = FakeTransport(
        json_response(_page("A1", next_link="Property/replication?cursor=2")),
        json_response(_page("A2", next_link="Property/replication?cursor=3")),
    )
    paginator = ReplicationPaginator(executor, transport, max_pages=2)

    with pytest.raises(PaginationStalledError, match="max_pages=2"):
        await paginator.collect_pages(query)
    assert len(transport.requests) == 2


def test_max_pages_must_be_positive(executor: QueryExecutor):
    with pytest.raises(ValueError):
        ReplicationPaginator(executor, FakeTransport(), max_pages=0)


@pytest.mark.asyncio
@pytest.mark.parametrize("with_query", [True, False])
async def test_exactly_one_starting_point(executor: QueryExecutor, query, with_query):
    paginator = ReplicationPaginator(executor, FakeTransport())
    kwargs = {"start_link": "Property/replication"} if with_query else {}

    with pytest.raises(ValueError):
        await paginator.collect_pages(query if with_query else None, **kwargs)
