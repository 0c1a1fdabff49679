"""Shared fixtures for reso-odata tests."""

from __future__ import annotations

from typing import Any

import pytest

from reso_odata.executor import QueryExecutor

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def executor() -> QueryExecutor:
    return QueryExecutor()


@pytest.fixture
def austin_page() -> dict[str, Any]:
    return {
        "@odata.context": "$metadata#Property",
        "value": [{"ListingKey": "A1", "City": "Austin", "ListPrice": 300000}],
    }
