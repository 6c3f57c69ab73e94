from dataclasses import dataclass


@dataclass(frozen=True)
class PaginationOptions:
    """
    Names of the query parameters that carry paging input.

    Used both when reading a page request from a query map and when
    writing the next-page link, so the two always agree.
    """

    page_param: str = "page"
    page_size_param: str = "pagesize"


DEFAULT_OPTIONS = PaginationOptions()
