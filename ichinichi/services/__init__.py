"""Services package."""

from ichinichi.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsItemStorage,
    InMemoryAuditStorage,
    InMemoryItemStorage,
    ItemStorageInterface,
    JsonFileItemStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "DuplicateError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsItemStorage",
    "InMemoryAuditStorage",
    "InMemoryItemStorage",
    "ItemStorageInterface",
    "JsonFileItemStorage",
    "NotFoundError",
    "StorageError",
]
