import logging
from typing import Any

# Create the library logger
logger = logging.getLogger("pagantic")

# Add NullHandler to prevent "No handlers could be found" warnings
# if the application doesn't configure logging.
logger.addHandler(logging.NullHandler())


def describe_filter(query_filter: Any) -> str | None:
    """
    Returns a short, log-safe name for an opaque query filter.
    Only the callable's qualified name is reported, never its captured values.
    """
    if query_filter is None:
        return None
    return getattr(query_filter, "__qualname__", type(query_filter).__name__)
