import asyncio
from collections.abc import Iterable
from itertools import islice
from typing import Any, TypeVar

from .._logging import describe_filter, logger
from ..capability import QueryFilter, SupportsPagination
from ..pagination import PageRequest, PageResult

T = TypeVar("T")


class SequenceSource(SupportsPagination[T]):
    """
    Paging-capable source over an in-memory collection.

    The filter receives an iterable of the stored items and returns the
    iterable to page over, so it can both select and order.

    Usage:
        source = SequenceSource(users, entity_type=User)
        by_name = lambda items: sorted(items, key=lambda u: u.name)
        page = await source.get_page(PageRequest(2, 10), filter=by_name)
    """

    def __init__(self, items: Iterable[T], entity_type: str | type | None = None) -> None:
        self.items = list(items)
        self.entity_type = entity_type

    def _select(self, filter: QueryFilter | None) -> Iterable[T]:
        if filter is None:
            return self.items
        selected: Iterable[T] = filter(iter(self.items))
        return selected

    async def count(self, filter: QueryFilter | None = None) -> int:
        # Yield once so a pending cancellation is raised before any work
        await asyncio.sleep(0)
        return sum(1 for _ in self._select(filter))

    async def get_page(
        self, page_request: PageRequest, filter: QueryFilter | None = None
    ) -> PageResult[T]:
        await asyncio.sleep(0)
        window: list[Any] = list(
            islice(
                self._select(filter),
                page_request.offset,
                page_request.offset + page_request.page_size,
            )
        )
        logger.debug(
            "Sliced in-memory page",
            extra={
                "page": page_request.page,
                "page_size": page_request.page_size,
                "returned": len(window),
                "filter": describe_filter(filter),
            },
        )
        return PageResult(request=page_request, results=window)
