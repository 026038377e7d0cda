"""
In-Memory Storage Implementation

The default backend, and the one tests run against.
Items live in an insertion-ordered dict keyed by ID.
"""

from typing import Optional
from uuid import UUID

from ichinichi.models.audit import AuditEvent
from ichinichi.models.item import Item
from ichinichi.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    ItemStorageInterface,
    NotFoundError,
)


class InMemoryItemStorage(ItemStorageInterface):
    """Item storage backed by a dict. Nothing survives a restart."""

    def __init__(self, items: Optional[list[Item]] = None):
        self._items: dict[UUID, Item] = {}
        for item in items or []:
            self._items[item.id] = item.model_copy(deep=True)

    async def save_item(self, item: Item) -> bool:
        if item.id in self._items:
            raise DuplicateError(f"Item already exists: {item.id}")
        self._items[item.id] = item.model_copy(deep=True)
        return True

    async def get_item_by_id(self, item_id: UUID) -> Optional[Item]:
        item = self._items.get(item_id)
        return item.model_copy(deep=True) if item else None

    async def update_item(self, item: Item) -> bool:
        if item.id not in self._items:
            raise NotFoundError(f"Item not found: {item.id}")
        # Dict assignment to an existing key keeps its position
        self._items[item.id] = item.model_copy(deep=True)
        return True

    async def delete_item(self, item_id: UUID) -> bool:
        return self._items.pop(item_id, None) is not None

    async def list_items(self) -> list[Item]:
        return [item.model_copy(deep=True) for item in self._items.values()]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
