"""Exception types shared across the vitrine packages."""

from __future__ import annotations


class VitrineError(Exception):
    """Base class for all vitrine errors."""


class StorageError(VitrineError):
    """A durable storage write or remove failed."""


class StorageQuotaExceeded(StorageError):
    """A write would push the storage past its size quota."""

    def __init__(self, key: str, required: int, quota: int) -> None:
        super().__init__(
            f"Writing {key!r} needs {required} bytes, storage quota is {quota} bytes"
        )
        self.key = key
        self.required = required
        self.quota = quota


class ImportDocumentError(VitrineError):
    """An import document could not be parsed into site content."""


class CheckoutError(VitrineError):
    """The cart cannot be handed off for order placement."""
