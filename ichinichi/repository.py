"""
Item Repository

This module ties the components together and owns the item collection:
1. Write path: form data → validate → compute cost per day → persist → audit
2. Read path: snapshot from storage → summaries and rankings

DESIGN DECISION: The repository enforces the boundaries:
- Nothing is persisted without passing validation
- cost_per_day is always recomputed on write, never trusted from callers
- Every mutation is audited

Writes are serialized with a threading.Lock: one mutation (including the
cost recompute and the storage write) finishes before the next starts,
so the cached cost can never drift from the fields it was computed from.
The lock is shared by every thread and event loop using the repository
(Streamlit runs each session in its own thread with its own loop);
waiting for it happens in a worker thread so the caller's loop keeps running.
"""

import asyncio
import threading
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional
from uuid import UUID

from ichinichi.audit import AuditLogger, create_correlation_id
from ichinichi.calculations.costs import build_item_fields, compute_cost_per_day
from ichinichi.calculations.dates import is_valid_range
from ichinichi.config import Settings, StorageBackend, get_settings
from ichinichi.models.item import UNCATEGORIZED, Item, ItemInput, SummaryData
from ichinichi.models.validation import ValidationResult
from ichinichi.queries.summary import (
    DEFAULT_RANKING_LIMIT,
    all_categories,
    items_by_category,
    rank_top_items,
    summarize,
)
from ichinichi.services.storage import (
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
from ichinichi.validation import ItemValidationError, ItemValidator


class ItemRepository:
    """
    Create/read/update/delete for items, plus the summary read-side.

    The cost engine and the aggregation functions are pure; this class
    is the only place that holds (a reference to) mutable state.
    """

    def __init__(
        self,
        storage: Optional[ItemStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[ItemValidator] = None,
        ranking_limit: int = DEFAULT_RANKING_LIMIT,
        uncategorized_label: str = UNCATEGORIZED,
    ):
        self._storage = storage or InMemoryItemStorage()
        self._audit_logger = audit_logger or AuditLogger()
        self._validator = validator or ItemValidator()
        self._ranking_limit = ranking_limit
        self._uncategorized_label = uncategorized_label
        self._write_lock = threading.Lock()

    @property
    def storage(self) -> ItemStorageInterface:
        return self._storage

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @asynccontextmanager
    async def _serialized_write(self):
        """Hold the write lock for the duration of one mutation."""
        if not self._write_lock.acquire(blocking=False):
            acquiring = asyncio.ensure_future(asyncio.to_thread(self._write_lock.acquire))
            try:
                await asyncio.shield(acquiring)
            except asyncio.CancelledError:
                # The worker thread still gets the lock; hand it straight back
                acquiring.add_done_callback(lambda _: self._write_lock.release())
                raise
        try:
            yield
        finally:
            self._write_lock.release()

    # -------------------------------------------------------------------------
    # Validation / preview (no side effects)
    # -------------------------------------------------------------------------

    def validate(self, data: ItemInput) -> ValidationResult:
        return self._validator.validate(data)

    def preview_cost_per_day(self, data: ItemInput) -> Optional[float]:
        """
        Live cost preview for the form.

        None while the usage period is not a valid range; otherwise the
        engine's result, even if other fields are still invalid.
        """
        usage = data.usage_period
        if not is_valid_range(usage.start_date, usage.end_date):
            return None
        return compute_cost_per_day(data)

    async def _ensure_valid(
        self,
        data: ItemInput,
        item_id: Optional[UUID],
        correlation_id: UUID,
    ) -> None:
        result = self._validator.validate(data)
        if result.is_valid:
            return

        issues = [
            {"field": i.field, "type": i.issue_type, "message": i.message}
            for i in result.issues
        ]
        await self._audit_logger.log_validation_failed(
            issues=issues,
            item_id=item_id,
            correlation_id=correlation_id,
        )
        raise ItemValidationError(result)

    async def _log_unexpected(
        self,
        operation: str,
        error: Exception,
        item_id: Optional[UUID],
        correlation_id: UUID,
    ) -> None:
        """Audit a backend failure that is not a StorageError."""
        await self._audit_logger.log_error(
            error_type=type(error).__name__,
            error_message=str(error),
            details={
                "operation": operation,
                "item_id": str(item_id) if item_id else None,
            },
            correlation_id=correlation_id,
        )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create(
        self,
        data: ItemInput,
        correlation_id: Optional[UUID] = None,
    ) -> Item:
        """
        Validate, compute cost, assign identity and timestamps, persist.

        Raises:
            ItemValidationError: If any field is invalid (nothing is saved)
            StorageError: If the backend write fails
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._serialized_write():
            await self._ensure_valid(data, None, correlation_id)

            now = datetime.utcnow()
            item = Item(
                created_at=now,
                updated_at=now,
                **build_item_fields(data),
            )

            try:
                await self._storage.save_item(item)
            except StorageError as e:
                await self._audit_logger.log_save_failed(
                    operation="create",
                    error_message=str(e),
                    item_id=item.id,
                    correlation_id=correlation_id,
                )
                raise
            except Exception as e:
                await self._log_unexpected("create", e, item.id, correlation_id)
                raise

        await self._audit_logger.log_item_created(
            item_id=item.id,
            name=item.name,
            cost_per_day=item.cost_per_day,
            correlation_id=correlation_id,
        )
        return item

    async def update(
        self,
        item_id: UUID,
        data: ItemInput,
        correlation_id: Optional[UUID] = None,
    ) -> Item:
        """
        Replace an item's fields, recomputing its cost.

        Identity and created_at are preserved; updated_at is refreshed.

        Raises:
            NotFoundError: If no item has this ID
            ItemValidationError: If any field is invalid (nothing is saved)
            StorageError: If the backend write fails
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._serialized_write():
            existing = await self._storage.get_item_by_id(item_id)
            if existing is None:
                await self._audit_logger.log_item_not_found(
                    item_id=item_id,
                    operation="update",
                    correlation_id=correlation_id,
                )
                raise NotFoundError(f"Item not found: {item_id}")

            await self._ensure_valid(data, item_id, correlation_id)

            updated = Item(
                id=existing.id,
                created_at=existing.created_at,
                updated_at=datetime.utcnow(),
                **build_item_fields(data),
            )

            try:
                await self._storage.update_item(updated)
            except NotFoundError:
                # Removed by another process between read and write
                await self._audit_logger.log_item_not_found(
                    item_id=item_id,
                    operation="update",
                    correlation_id=correlation_id,
                )
                raise
            except StorageError as e:
                await self._audit_logger.log_save_failed(
                    operation="update",
                    error_message=str(e),
                    item_id=item_id,
                    correlation_id=correlation_id,
                )
                raise
            except Exception as e:
                await self._log_unexpected("update", e, item_id, correlation_id)
                raise

        await self._audit_logger.log_item_updated(
            item_id=updated.id,
            name=updated.name,
            previous_cost_per_day=existing.cost_per_day,
            cost_per_day=updated.cost_per_day,
            correlation_id=correlation_id,
        )
        return updated

    async def delete(
        self,
        item_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Remove an item permanently.

        Deleting an unknown ID is an error, not a no-op: the caller is
        acting on a stale view and should refresh it.

        Raises:
            NotFoundError: If no item has this ID
            StorageError: If the backend write fails
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._serialized_write():
            existing = await self._storage.get_item_by_id(item_id)
            deleted = False
            if existing is not None:
                try:
                    deleted = await self._storage.delete_item(item_id)
                except StorageError as e:
                    await self._audit_logger.log_save_failed(
                        operation="delete",
                        error_message=str(e),
                        item_id=item_id,
                        correlation_id=correlation_id,
                    )
                    raise
                except Exception as e:
                    await self._log_unexpected("delete", e, item_id, correlation_id)
                    raise

            if not deleted:
                await self._audit_logger.log_item_not_found(
                    item_id=item_id,
                    operation="delete",
                    correlation_id=correlation_id,
                )
                raise NotFoundError(f"Item not found: {item_id}")

        await self._audit_logger.log_item_deleted(
            item_id=item_id,
            name=existing.name,
            correlation_id=correlation_id,
        )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get(self, item_id: UUID) -> Item:
        """
        Raises:
            NotFoundError: If no item has this ID
        """
        item = await self._storage.get_item_by_id(item_id)
        if item is None:
            raise NotFoundError(f"Item not found: {item_id}")
        return item

    async def list_items(self) -> list[Item]:
        """All items, in insertion order."""
        return await self._storage.list_items()

    async def summary(self) -> SummaryData:
        return summarize(
            await self._storage.list_items(),
            uncategorized_label=self._uncategorized_label,
        )

    async def top_items(self, limit: Optional[int] = None) -> list[Item]:
        """Most expensive items per day (default: configured ranking limit)."""
        return rank_top_items(
            await self._storage.list_items(),
            limit=self._ranking_limit if limit is None else limit,
        )

    async def categories(self) -> list[str]:
        return all_categories(await self._storage.list_items())

    async def items_by_category(self, category: Optional[str] = None) -> list[Item]:
        return items_by_category(await self._storage.list_items(), category)


def create_app_components(
    settings: Optional[Settings] = None,
    backend: Optional[StorageBackend] = None,
) -> ItemRepository:
    """
    Factory function to wire settings → storage → audit → repository.

    Args:
        settings: Settings to use (defaults to the cached global settings)
        backend: Override the configured storage backend

    Returns:
        A ready-to-use ItemRepository
    """
    settings = settings or get_settings()
    app_settings = settings.app
    backend = backend or app_settings.storage_backend

    if backend == StorageBackend.GOOGLE_SHEETS:
        sheets_client = GoogleSheetsClient(settings.google_sheets)
        storage = GoogleSheetsItemStorage(sheets_client)
        audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
    elif backend == StorageBackend.JSON:
        storage = JsonFileItemStorage(app_settings.data_file_path)
        audit_logger = AuditLogger()  # Local-only logging
    else:
        storage = InMemoryItemStorage()
        audit_logger = AuditLogger(InMemoryAuditStorage())

    return ItemRepository(
        storage=storage,
        audit_logger=audit_logger,
        ranking_limit=app_settings.ranking_limit,
        uncategorized_label=app_settings.uncategorized_label,
    )
