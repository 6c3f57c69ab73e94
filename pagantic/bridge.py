"""
Glue between callers and paging-capable data sources.

Plain functions here accept any source and check for the pagination
capability at call time, for registries holding heterogeneous sources.
PaginationActions wraps a source already known to be paging-capable.
"""

import re
from collections.abc import Awaitable, Mapping, Sequence
from typing import Any, Generic, TypeVar

from ._logging import describe_filter, logger
from .capability import QueryFilter, SupportsPagination, entity_name
from .config import DEFAULT_OPTIONS, PaginationOptions
from .exceptions import CapabilityNotSupportedError
from .pagination import PageRequest, PageResult, PageResultWithNext

T = TypeVar("T")

# Query maps come from web frameworks: single values or lists of values per key
QueryParams = Mapping[str, str] | Mapping[str, Sequence[str]]

# Paging values are unsigned 32-bit integers written in ASCII digits
_DIGITS = re.compile(r"[0-9]+")
MAX_PARAM_VALUE = 2**32 - 1


def _first_value(query_params: Any, key: str) -> Any:
    if hasattr(query_params, "getlist"):
        # Starlette QueryParams / MultiDict: indexing returns the last value
        values = query_params.getlist(key)
    else:
        raw = query_params.get(key)
        if raw is None:
            return None
        if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
            values = [raw]
        else:
            values = list(raw)
    return values[0] if values else None


def _parse_count(query_params: Any, key: str) -> int:
    """Unsigned decimal value of `key`, or 0 when absent or unparseable."""
    raw = _first_value(query_params, key)
    if raw is None:
        return 0
    text = raw.strip() if isinstance(raw, str) else ""
    digits = text.lstrip("0") or "0"
    # Length check first: int() refuses very long digit strings
    if (
        not _DIGITS.fullmatch(text)
        or len(digits) > len(str(MAX_PARAM_VALUE))
        or int(digits) > MAX_PARAM_VALUE
    ):
        logger.debug("Ignoring unparseable paging parameter", extra={"param": key})
        return 0
    return int(digits)


def parse_page_request(
    query_params: QueryParams, options: PaginationOptions = DEFAULT_OPTIONS
) -> PageRequest:
    """
    Reads a PageRequest from a string-keyed query map.

    Missing or malformed values fall back to the defaults; this never raises.

    Usage:
        parse_page_request({"page": "46", "pagesize": "5"})  # PageRequest(46, 5)
        parse_page_request({"page": "abc"})                   # PageRequest(1, 100)
    """
    return PageRequest(
        _parse_count(query_params, options.page_param),
        _parse_count(query_params, options.page_size_param),
    )


def with_capability(
    source: object, entity_type: str | type | None = None
) -> SupportsPagination[Any]:
    """
    Returns `source` as a paging capability, or fails immediately.

    Raises:
        CapabilityNotSupportedError: If the source does not implement
            SupportsPagination. No method of the source is called.
    """
    if isinstance(source, SupportsPagination):
        return source
    raise CapabilityNotSupportedError(
        entity_type=entity_name(source, entity_type),
        capability=SupportsPagination.__name__,
    )


def count(source: object, filter: QueryFilter | None = None) -> Awaitable[int]:
    """
    Counts the entities of `source` matching the filter.

    The capability check happens when this is called, before anything is awaited.
    """
    return with_capability(source).count(filter)


def get_page(
    source: object, page_request: PageRequest, filter: QueryFilter | None = None
) -> Awaitable[PageResult[Any]]:
    """
    Fetches one page from `source`.

    The capability check happens when this is called, before anything is awaited.
    """
    capability = with_capability(source)
    logger.info(
        "Fetching page",
        extra={
            "entity": entity_name(capability),
            "page": page_request.page,
            "page_size": page_request.page_size,
            "has_filter": filter is not None,
            "filter": describe_filter(filter),
        },
    )
    return capability.get_page(page_request, filter)


async def _decorate(
    pending: Awaitable[PageResult[T]], base_uri: str, options: PaginationOptions
) -> PageResultWithNext[T]:
    result = await pending
    return result.get_with_next(base_uri, options)


def get_page_with_next(
    source: object,
    page_request: PageRequest,
    base_uri: str,
    filter: QueryFilter | None = None,
    options: PaginationOptions = DEFAULT_OPTIONS,
) -> Awaitable[PageResultWithNext[Any]]:
    """
    Fetches one page from `source` and links it to the following page.

    The capability check happens when this is called, before anything is awaited.

    Usage:
        result = await get_page_with_next(users, PageRequest(2, 20), "https://api/users")
        result.next  # "https://api/users?page=3&pagesize=20" when the page is full
    """
    return _decorate(get_page(source, page_request, filter), base_uri, options)


def get_page_from_query(
    source: object,
    query_params: QueryParams,
    filter: QueryFilter | None = None,
    options: PaginationOptions = DEFAULT_OPTIONS,
) -> Awaitable[PageResult[Any]]:
    """Fetches the page described by a query map from `source`."""
    return get_page(source, parse_page_request(query_params, options), filter)


class PaginationActions(Generic[T]):
    """
    Paging operations bound to a source and the URI its pages are served at.

    The source must already implement SupportsPagination, so wiring mistakes
    are caught by the type checker rather than at call time.

    Usage:
        actions = PaginationActions(user_source, "https://api.example.com/users")
        page = await actions.get_page(PageRequest(1, 50))
    """

    def __init__(
        self,
        source: SupportsPagination[T],
        base_uri: str,
        options: PaginationOptions = DEFAULT_OPTIONS,
    ) -> None:
        self.source = source
        self.base_uri = base_uri
        self.options = options

    async def count(self, filter: QueryFilter | None = None) -> int:
        return await self.source.count(filter)

    async def get_page(
        self, page_request: PageRequest, filter: QueryFilter | None = None
    ) -> PageResultWithNext[T]:
        logger.info(
            "Fetching page",
            extra={
                "entity": entity_name(self.source),
                "page": page_request.page,
                "page_size": page_request.page_size,
                "has_filter": filter is not None,
                "filter": describe_filter(filter),
            },
        )
        result = await self.source.get_page(page_request, filter)
        return result.get_with_next(self.base_uri, self.options)

    async def get_page_from_query(
        self, query_params: QueryParams, filter: QueryFilter | None = None
    ) -> PageResultWithNext[T]:
        return await self.get_page(parse_page_request(query_params, self.options), filter)


class SourceRegistry:
    """
    Registry of data sources keyed by entity name.

    Sources of any kind can be registered; only paging() requires the
    pagination capability, and checks for it when asked.
    """

    def __init__(self) -> None:
        self._sources: dict[str, object] = {}

    def register(self, entity_type: str, source: object) -> None:
        """
        Register a data source under an entity name.

        Raises:
            ValueError: If the entity name is already registered
        """
        if entity_type in self._sources:
            existing = self._sources[entity_type]
            raise ValueError(
                f"Entity '{entity_type}' is already registered "
                f"to {type(existing).__name__}, cannot register {type(source).__name__}"
            )
        self._sources[entity_type] = source

    def get(self, entity_type: str) -> object | None:
        return self._sources.get(entity_type)

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._sources

    def paging(self, entity_type: str) -> SupportsPagination[Any]:
        """
        Returns the paging capability of the source registered for an entity.

        Raises:
            KeyError: If no source is registered under the name
            CapabilityNotSupportedError: If the source cannot be paged
        """
        try:
            source = self._sources[entity_type]
        except KeyError:
            raise KeyError(f"No data source registered for entity '{entity_type}'") from None
        return with_capability(source, entity_type)
