"""Shared fixtures for the test suite."""

import pytest

from ichinichi.audit import AuditLogger
from ichinichi.repository import ItemRepository
from ichinichi.services.storage import InMemoryAuditStorage, InMemoryItemStorage


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def item_storage():
    return InMemoryItemStorage()


@pytest.fixture
def repository(item_storage, audit_storage):
    return ItemRepository(
        storage=item_storage,
        audit_logger=AuditLogger(audit_storage),
    )
