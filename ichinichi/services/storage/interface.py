"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep items in memory, in a JSON file, or in Google Sheets
2. Use in-memory storage for testing
3. Keep the cost engine and summaries unaware of where items live

The interface is intentionally simple - we're not building a full ORM.
Storage never computes costs; it persists whatever Item it is given.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from ichinichi.models.audit import AuditEvent
from ichinichi.models.item import Item


class ItemStorageInterface(ABC):
    """
    Abstract interface for item storage operations.

    Implementations must preserve insertion order in list_items();
    summaries and rankings rely on it for stable tie-breaking.
    """

    @abstractmethod
    async def save_item(self, item: Item) -> bool:
        """
        Append a new item to storage.

        Raises:
            DuplicateError: If an item with the same ID exists
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_item_by_id(self, item_id: UUID) -> Optional[Item]:
        """
        Retrieve an item by its ID.

        Returns:
            The item if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_item(self, item: Item) -> bool:
        """
        Replace an existing item in place (keeps its position).

        Raises:
            NotFoundError: If the item doesn't exist
            StorageError: If update fails
        """
        pass

    @abstractmethod
    async def delete_item(self, item_id: UUID) -> bool:
        """
        Delete an item by ID.

        Returns:
            True if deleted, False if no such item
        """
        pass

    @abstractmethod
    async def list_items(self) -> list[Item]:
        """
        List all items in insertion order.

        Returns a snapshot; mutating it does not affect storage.
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one form submission).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
