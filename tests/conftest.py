"""
Shared pytest fixtures and configuration for Pagantic tests.

This module provides common fixtures used across the unit tests,
including a mocked boto3 client, sample entities and paging-capable sources.
"""

from typing import Any
from unittest.mock import MagicMock

import pytest
from pydantic import BaseModel

from pagantic import PageRequest, PageResult, SupportsPagination
from pagantic.sources import SequenceSource


class Item(BaseModel):
    """Entity used across the test suite."""

    id: int
    name: str
    active: bool = True


class RecordingSource(SupportsPagination[Any]):
    """
    Capability implementation that records calls and serves a fixed slice,
    regardless of the page requested.
    """

    entity_type = "Recorded"

    def __init__(self, results: list[Any], total: int = 0) -> None:
        self.results = results
        self.total = total
        self.count_calls: list[Any] = []
        self.page_calls: list[tuple[PageRequest, Any]] = []

    async def count(self, filter=None) -> int:
        self.count_calls.append(filter)
        return self.total

    async def get_page(self, page_request, filter=None) -> PageResult[Any]:
        self.page_calls.append((page_request, filter))
        return PageResult(request=page_request, results=self.results)


class PlainRepository:
    """A data source without the pagination capability."""

    entity_type = "Item"

    def __init__(self) -> None:
        self.count = MagicMock(name="count")
        self.get_page = MagicMock(name="get_page")


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")


@pytest.fixture
def mock_client():
    """
    Creates a fully mocked boto3 DynamoDB client.

    Tests set `client.scan.side_effect` to the sequence of Scan responses.
    """
    return MagicMock()


@pytest.fixture
def sample_items() -> list[Item]:
    """Twenty-five items with ids 1..25; every third one is inactive."""
    return [Item(id=i, name=f"item-{i:02d}", active=i % 3 != 0) for i in range(1, 26)]


@pytest.fixture
def memory_source(sample_items) -> SequenceSource[Item]:
    return SequenceSource(sample_items, entity_type=Item)


@pytest.fixture
def recording_source():
    """Factory for RecordingSource instances."""

    def _make(results: list[Any] | None = None, total: int = 0) -> RecordingSource:
        return RecordingSource(results if results is not None else [], total=total)

    return _make


@pytest.fixture
def plain_repository() -> PlainRepository:
    return PlainRepository()
