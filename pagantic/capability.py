from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from .pagination import PageRequest, PageResult

T = TypeVar("T")

# Opaque caller-supplied transform over a source's queryable representation
# (an iterable for in-memory sources, scan kwargs for DynamoDB, ...).
# Sources apply it; the pagination layer only forwards it.
QueryFilter = Callable[[Any], Any]


class SupportsPagination(ABC, Generic[T]):
    """
    Capability contract for data sources that can be paged by offset.

    Sources opt in by subclassing, or by registering as a virtual subclass
    with `SupportsPagination.register(SourceClass)`.

    Cancellation is asyncio task cancellation: implementations let
    `asyncio.CancelledError` propagate and never hand back a partial page
    as a successful result.
    """

    # Name (or class) of the entity served, used in errors and logs
    entity_type: str | type | None = None

    @abstractmethod
    async def count(self, filter: QueryFilter | None = None) -> int:
        """
        Returns the number of entities matching the optional filter.

        Args:
            filter: Transform applied with the same semantics as get_page()
        """

    @abstractmethod
    async def get_page(
        self, page_request: PageRequest, filter: QueryFilter | None = None
    ) -> PageResult[T]:
        """
        Returns the slice at offset (page - 1) * page_size after the filter.

        A page past the end yields an empty result, not an error.

        Args:
            page_request: Normalized page number and size
            filter: Transform applied to the source before slicing
        """


def entity_name(source: object, entity_type: str | type | None = None) -> str:
    """Best available name for the entity served by `source`."""
    named = entity_type if entity_type is not None else getattr(source, "entity_type", None)
    if isinstance(named, type):
        return named.__name__
    if named:
        return str(named)
    return type(source).__name__
