from .bridge import (
    PaginationActions,
    SourceRegistry,
    count,
    get_page,
    get_page_from_query,
    get_page_with_next,
    parse_page_request,
    with_capability,
)
from .capability import QueryFilter, SupportsPagination
from .config import DEFAULT_OPTIONS, PaginationOptions
from .exceptions import CapabilityNotSupportedError, PaganticError
from .pagination import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    PageRequest,
    PageResult,
    PageResultWithNext,
    build_next_link,
)

__all__ = [
    "PageRequest",
    "PageResult",
    "PageResultWithNext",
    "build_next_link",
    "DEFAULT_PAGE",
    "DEFAULT_PAGE_SIZE",
    # Capability
    "SupportsPagination",
    "QueryFilter",
    # Bridge
    "parse_page_request",
    "with_capability",
    "count",
    "get_page",
    "get_page_with_next",
    "get_page_from_query",
    "PaginationActions",  # Typed wrapper for sources known to be pageable
    "SourceRegistry",
    # Configuration
    "PaginationOptions",
    "DEFAULT_OPTIONS",
    # Exceptions
    "PaganticError",
    "CapabilityNotSupportedError",
]
