"""Tests for the ResoClient facade."""

from __future__ import annotations

import pytest
from fakes import SERVICE_ROOT, FakeTransport, json_response

from reso_odata import (
    ClientConfig,
    HttpTransport,
    QueryBuilder,
    ReplicationQueryBuilder,
    ResoClient,
)

ENV_VARS = ("RESO_BASE_URL", "RESO_TOKEN", "RESO_DATASET_ID", "RESO_TIMEOUT")


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(base_url="https://api.example.com/odata", token="t", dataset_id="test_ds")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv first so that values loaded from a .env file are removed on teardown
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


# -- Queries ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_execute(config: ClientConfig, austin_page):
    transport = FakeTransport(json_response(austin_page))
    client = ResoClient(config, transport=transport)

    envelope = await client.execute(QueryBuilder("Property").top(1).build())

    assert len(envelope) == 1
    assert transport.requests == ["Property?$top=1"]


@pytest.mark.asyncio
async def test_execute_count(config: ClientConfig):
    transport = FakeTransport(json_response({"@odata.count": 9}))
    client = ResoClient(config, transport=transport)

    assert await client.execute_count(QueryBuilder("Member").count().build()) == 9


@pytest.mark.asyncio
async def test_fetch_metadata(config: ClientConfig):
    transport = FakeTransport(json_response("ignored"))
    client = ResoClient(config, transport=transport)

    await client.fetch_metadata()
    assert transport.requests == ["$metadata"]


# -- Replication --------------------------------------------------------------


@pytest.mark.asyncio
async def test_replicate_streams_pages(config: ClientConfig):
    transport = FakeTransport(
        json_response(
            {"value": [{"ListingKey": "A1"}], "@odata.nextLink": f"{SERVICE_ROOT}/p2"}
        ),
        json_response({"value": [{"ListingKey": "A2"}]}),
    )
    client = ResoClient(config, transport=transport)
    query = ReplicationQueryBuilder("Property").build()

    sizes = [len(page) async for page in client.replicate(query)]

    assert sizes == [1, 1]
    assert transport.requests == ["Property/replication", f"{SERVICE_ROOT}/p2"]


@pytest.mark.asyncio
async def test_replicate_all(config: ClientConfig):
    transport = FakeTransport(
        json_response({"value": [{"ListingKey": "A1"}], "@odata.nextLink": "p2"}),
        json_response({"value": [{"ListingKey": "A2"}]}),
    )
    client = ResoClient(config, transport=transport)

    records = await client.replicate_all(ReplicationQueryBuilder("Property").build())

    assert [r.get_field("ListingKey").as_str() for r in records] == ["A1", "A2"]


@pytest.mark.asyncio
async def test_execute_replication_and_link(config: ClientConfig):
    transport = FakeTransport(
        json_response({"value": [], "@odata.nextLink": "p2"}),
        json_response({"value": []}),
    )
    client = ResoClient(config, transport=transport)

    first = await client.execute_replication(ReplicationQueryBuilder("Property").build())
    second = await client.execute_link(first.next_link)

    assert first.next_link == "p2"
    assert second.is_last


# -- Construction and lifecycle -----------------------------------------------


def test_default_transport_uses_config(config: ClientConfig):
    client = ResoClient(config)
    assert isinstance(client.transport, HttpTransport)
    assert client.transport.service_root == SERVICE_ROOT


@pytest.mark.asyncio
async def test_owned_transport_closed(config: ClientConfig):
    async with ResoClient(config) as client:
        transport = client.transport
    assert transport._client.is_closed  # type: ignore[attr-defined]


@pytest.mark.asyncio
async def test_injected_transport_left_open(config: ClientConfig):
    transport = HttpTransport(SERVICE_ROOT, "t")
    async with ResoClient(config, transport=transport):
        pass
    assert not transport._client.is_closed
    await transport.aclose()


def test_from_env(clean_env, monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.setenv("RESO_BASE_URL", "https://api.example.com/odata")
    monkeypatch.setenv("RESO_TOKEN", "t")
    monkeypatch.setenv("RESO_DATASET_ID", "test_ds")

    client = ResoClient.from_env(env_file=tmp_path / "absent.env")

    assert client.config.service_root == SERVICE_ROOT


def test_from_env_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "RESO_BASE_URL=https://api.example.com/odata\n"
        "RESO_TOKEN=from-file\n"
        "RESO_TIMEOUT=10\n"
    )

    client = ResoClient.from_env(env_file=env_file)

    assert client.config.token == "from-file"
    assert client.config.timeout == 10
    assert client.config.dataset_id is None
