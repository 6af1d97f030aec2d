"""Errors raised by the persistence layer."""


class StorageError(RuntimeError):
    """A store operation failed in the underlying database."""
