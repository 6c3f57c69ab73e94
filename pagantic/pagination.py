"""
Pagination value types for Pagantic.

This module provides the immutable values exchanged between callers and
paging-capable data sources: the normalized page request, the page of
results returned for it, and the same page decorated with a next-page link.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar
from urllib.parse import urlencode, urlsplit, urlunsplit

from .config import DEFAULT_OPTIONS, PaginationOptions

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageRequest:
    """
    A normalized, 1-based (page, page_size) pair.

    A page or page size of None, 0 or below is replaced by its default,
    so both fields are always positive after construction.

    Attributes:
        page: 1-based page number
        page_size: Maximum number of items on the page
    """

    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        # Frozen dataclass: normalization has to bypass __setattr__
        if not self.page or self.page < 1:
            object.__setattr__(self, "page", DEFAULT_PAGE)
        if not self.page_size or self.page_size < 1:
            object.__setattr__(self, "page_size", DEFAULT_PAGE_SIZE)

    @property
    def offset(self) -> int:
        """Number of items to skip before this page starts."""
        return (self.page - 1) * self.page_size

    def next(self) -> "PageRequest":
        """Returns the request for the following page, keeping the size."""
        return PageRequest(self.page + 1, self.page_size)


def build_next_link(
    base_uri: str, page_request: PageRequest, options: PaginationOptions = DEFAULT_OPTIONS
) -> str:
    """
    Builds the absolute link to the page after `page_request`.

    Scheme, host, port and path of `base_uri` are kept. Its query string is
    replaced entirely by the paging parameters and any fragment is dropped.

    Usage:
        build_next_link("http://test.test", PageRequest(123, 2))
        # -> "http://test.test?page=124&pagesize=2"
    """
    following = page_request.next()
    parts = urlsplit(base_uri)
    query = urlencode(
        {
            options.page_param: following.page,
            options.page_size_param: following.page_size,
        }
    )
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """
    A single page of entities returned for a PageRequest.

    The data source is trusted to respect the requested size; results are
    never truncated here. A non-sequence iterable is consumed once into a
    list so its length can be read and the results reused.

    Attributes:
        request: The PageRequest these results were computed for
        results: Entities on this page, in source order
    """

    request: PageRequest
    results: Sequence[T]

    def __post_init__(self) -> None:
        if not isinstance(self.results, Sequence):
            object.__setattr__(self, "results", list(self.results))

    @property
    def page(self) -> int:
        return self.request.page

    @property
    def page_size(self) -> int:
        return self.request.page_size

    @property
    def count(self) -> int:
        """Number of items on this page."""
        return len(self.results)

    @property
    def is_full(self) -> bool:
        """
        Returns True if the page is filled to its requested size.

        A full page may be followed by more data; a short page is the last.
        """
        return self.count >= self.page_size

    def get_with_next(
        self, base_uri: str, options: PaginationOptions = DEFAULT_OPTIONS
    ) -> "PageResultWithNext[T]":
        """
        Decorates this page with a link to the following page.

        The link is only present when the page is full. When the total number
        of items is an exact multiple of the page size, the last full page
        still links to a trailing empty page.

        Args:
            base_uri: Absolute URI whose scheme, host and path the link reuses
            options: Query parameter names to write into the link
        """
        if self.count < self.page_size:
            return PageResultWithNext(result=self, next=None)
        return PageResultWithNext(
            result=self, next=build_next_link(base_uri, self.request, options)
        )


@dataclass(frozen=True)
class PageResultWithNext(Generic[T]):
    """
    A PageResult together with an optional link to the next page.

    Attributes:
        result: The wrapped page of results
        next: Absolute link to the next page, or None on the last page
    """

    result: PageResult[T]
    next: str | None = None

    @property
    def request(self) -> PageRequest:
        return self.result.request

    @property
    def page(self) -> int:
        return self.result.page

    @property
    def page_size(self) -> int:
        return self.result.page_size

    @property
    def results(self) -> Sequence[T]:
        return self.result.results

    @property
    def count(self) -> int:
        return self.result.count

    @property
    def has_next(self) -> bool:
        """Returns True if a next-page link is available."""
        return self.next is not None
