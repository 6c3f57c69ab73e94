"""
FastAPI integration for Pagantic.

Reads page requests from incoming requests, builds next-page links from the
request's own URL and provides a response model for paged endpoints.
"""

from collections.abc import Awaitable
from typing import Any, Generic, TypeVar

from fastapi import Request
from pydantic import BaseModel, ConfigDict, Field

from .bridge import get_page_with_next, parse_page_request
from .capability import QueryFilter
from .config import DEFAULT_OPTIONS, PaginationOptions
from .pagination import PageRequest, PageResultWithNext

T = TypeVar("T")


def request_base_uri(request: Request) -> str:
    """The request's scheme, host, port and path, without query or fragment."""
    return str(request.url.replace(query="", fragment=""))


class PageParams:
    """
    FastAPI dependency returning the PageRequest carried by the query string.

    Usage:
        @app.get("/users")
        async def list_users(page_request: PageRequest = Depends(PageParams())):
            ...
    """

    def __init__(self, options: PaginationOptions = DEFAULT_OPTIONS) -> None:
        self.options = options

    def __call__(self, request: Request) -> PageRequest:
        return parse_page_request(request.query_params, self.options)


def get_page_with_next_from_request(
    source: object,
    request: Request,
    filter: QueryFilter | None = None,
    options: PaginationOptions = DEFAULT_OPTIONS,
) -> Awaitable[PageResultWithNext[Any]]:
    """
    Fetches the page named by the request's query string from `source`,
    linked to the following page at the same URL.

    Raises:
        CapabilityNotSupportedError: Immediately, if the source cannot be paged
    """
    return get_page_with_next(
        source,
        parse_page_request(request.query_params, options),
        request_base_uri(request),
        filter,
        options,
    )


class PageEnvelope(BaseModel, Generic[T]):
    """JSON body for a page of results: {page, pagesize, results, next}."""

    model_config = ConfigDict(populate_by_name=True)

    page: int
    page_size: int = Field(alias="pagesize")
    results: list[T]
    next: str | None = None

    @classmethod
    def from_result(cls, result: PageResultWithNext[T]) -> "PageEnvelope[T]":
        return cls(
            page=result.page,
            page_size=result.page_size,
            results=list(result.results),
            next=result.next,
        )
