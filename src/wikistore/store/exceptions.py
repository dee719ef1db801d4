"""Exceptions for wiki store operations."""


class StoreError(Exception):
    """Exception raised for general store errors."""


class BlobNotFoundError(StoreError, KeyError):
    """Exception raised when a blob id has no stored file."""
