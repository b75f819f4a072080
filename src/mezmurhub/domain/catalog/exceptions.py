"""Catalog exceptions for error handling."""

from typing import Optional


class CatalogError(Exception):
    """Base exception for catalog operations."""

    pass


class ValidationError(CatalogError):
    """Raised when input fails a precondition, before any store I/O."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class NotFoundError(CatalogError):
    """Raised when a referenced document does not exist."""

    def __init__(self, collection: str, doc_id: str, message: Optional[str] = None):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(message or f"{collection} document '{doc_id}' not found")


class TransportError(CatalogError):
    """Raised when the underlying store fails during a required operation."""

    pass


class AssetStoreError(CatalogError):
    """Raised by asset store backends when an object operation fails."""

    pass


class AssetNotFoundError(AssetStoreError):
    """Raised when deleting or opening an asset key that does not exist."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Asset '{key}' does not exist")


class AssetCleanupError(CatalogError):
    """A best-effort delete of an old or orphaned asset failed.

    Recorded in the cleanup log, never raised out of a repository.
    """

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Could not remove asset {url}: {reason}")
