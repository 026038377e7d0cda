"""
JSON File Storage Implementation

DESIGN DECISION: One JSON document holds the whole collection as an
ordered list under a single key, the same layout a browser's key-value
storage would hold:

    {"ichinichi_items": [{...item...}, {...item...}]}

TRADEOFFS:
- Every mutation rewrites the whole file (fine for a personal list)
- Last write wins; there is no locking across processes
- A corrupt file is reported, never silently replaced with an empty list
"""

import json
from pathlib import Path
from typing import Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from ichinichi.models.item import Item
from ichinichi.services.storage.interface import (
    DuplicateError,
    ItemStorageInterface,
    NotFoundError,
    StorageError,
)


STORAGE_KEY = "ichinichi_items"

logger = structlog.get_logger(__name__)


class JsonFileItemStorage(ItemStorageInterface):
    """Item storage persisted to a single JSON file."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> list[Item]:
        """Read the collection; a missing file is an empty collection."""
        if not self._path.exists():
            return []

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

        records = raw.get(STORAGE_KEY, []) if isinstance(raw, dict) else None
        if not isinstance(records, list):
            raise StorageError(f"Unexpected data layout in {self._path}")

        try:
            return [Item.model_validate(record) for record in records]
        except ValidationError as e:
            raise StorageError(f"Invalid item record in {self._path}: {e}")

    def _dump(self, items: list[Item]) -> None:
        """Write the collection via a temp file so a crash can't truncate it."""
        payload = {STORAGE_KEY: [item.model_dump(mode="json") for item in items]}
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            tmp_path.replace(self._path)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")

        logger.debug("items_written", path=str(self._path), item_count=len(items))

    async def save_item(self, item: Item) -> bool:
        items = self._load()
        if any(existing.id == item.id for existing in items):
            raise DuplicateError(f"Item already exists: {item.id}")
        items.append(item)
        self._dump(items)
        return True

    async def get_item_by_id(self, item_id: UUID) -> Optional[Item]:
        for item in self._load():
            if item.id == item_id:
                return item
        return None

    async def update_item(self, item: Item) -> bool:
        items = self._load()
        for idx, existing in enumerate(items):
            if existing.id == item.id:
                items[idx] = item
                self._dump(items)
                return True
        raise NotFoundError(f"Item not found: {item.id}")

    async def delete_item(self, item_id: UUID) -> bool:
        items = self._load()
        remaining = [item for item in items if item.id != item_id]
        if len(remaining) == len(items):
            return False
        self._dump(remaining)
        return True

    async def list_items(self) -> list[Item]:
        return self._load()
