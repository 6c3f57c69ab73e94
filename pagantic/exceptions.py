class PaganticError(Exception):
    """Base exception for all Pagantic errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class CapabilityNotSupportedError(PaganticError):
    """
    Raised when a data source asked to paginate does not implement the
    pagination capability.

    This is a wiring mistake, not a transient condition: it is never retried.
    """

    def __init__(self, entity_type: str, capability: str = "SupportsPagination") -> None:
        super().__init__(
            f"Data source for '{entity_type}' does not implement {capability}",
        )
        self.entity_type = entity_type
        self.capability = capability
