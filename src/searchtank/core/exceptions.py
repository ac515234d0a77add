"""SearchTank exceptions."""

from __future__ import annotations


class SearchTankError(Exception):
    """Base exception for SearchTank errors."""


class NotConfiguredError(SearchTankError):
    """Raised when a model is used before it has been declared indexable."""


class NoBlockGivenError(SearchTankError):
    """Raised when a declaration is made without a configuration block."""


class NoIndexNameError(SearchTankError):
    """Raised when no index name can be determined for a declaration."""


class DuplicateTypeNameError(SearchTankError):
    """Raised when two model classes would share one ``__type`` tag."""


class MultiIndexError(SearchTankError):
    """Raised when one search targets models living in different indexes."""

    def __init__(self, index_names: list[str]) -> None:
        self.index_names = index_names
        super().__init__(f"You can't search across multiple indexes in one call ({index_names!r})")


class IndexServiceError(SearchTankError):
    """Raised when the hosted search service rejects a request."""


class IndexNotFoundError(IndexServiceError):
    """Raised when the requested index does not exist."""


class ServiceConnectionError(IndexServiceError):
    """Raised when the search service cannot be reached."""


class IndexNotReadyError(IndexServiceError):
    """Raised when a freshly created index does not start in time."""
