"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage:
in-memory (default), a single JSON file, and Google Sheets.
"""

from ichinichi.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    ItemStorageInterface,
    NotFoundError,
    StorageError,
)
from ichinichi.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryItemStorage,
)
from ichinichi.services.storage.json_file import JsonFileItemStorage
from ichinichi.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsItemStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ItemStorageInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Local implementations
    "InMemoryAuditStorage",
    "InMemoryItemStorage",
    "JsonFileItemStorage",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsItemStorage",
]
