from __future__ import annotations


class RepositoryError(Exception):
    """Raised when the content database rejects or fails a query."""


class BlobStoreError(Exception):
    """Raised when the storage bucket reports a failure."""


class ContentNotFound(KeyError):
    """Raised when a content row does not exist."""
