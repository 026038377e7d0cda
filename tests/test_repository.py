"""
Tests for ItemRepository: the write path, the read path, and auditing.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from uuid import uuid4

import pytest

from ichinichi.audit import AuditLogger
from ichinichi.config import Settings, StorageBackend
from ichinichi.models import AuditEventType, PaymentCadence
from ichinichi.repository import ItemRepository, create_app_components
from ichinichi.services.storage import (
    InMemoryAuditStorage,
    InMemoryItemStorage,
    JsonFileItemStorage,
    NotFoundError,
    StorageError,
)
from ichinichi.validation import ItemValidationError
from tests.factories import make_input, make_item


YEAR_2024 = (date(2024, 1, 1), date(2024, 12, 31))


class FailingItemStorage(InMemoryItemStorage):
    """Accepts reads, fails every write."""

    async def save_item(self, item):
        raise StorageError("disk full")

    async def update_item(self, item):
        raise StorageError("disk full")


async def event_types(audit_storage):
    events = await audit_storage.get_recent_events()
    return [e.event_type for e in sorted(events, key=lambda e: e.timestamp)]


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_assigns_identity_and_cost(self, repository):
        item = await repository.create(make_input(price=3000, category="Tech"))

        assert item.id is not None
        assert item.cost_per_day == 100.0
        assert item.created_at == item.updated_at
        assert await repository.get(item.id) == item

    @pytest.mark.asyncio
    async def test_create_audits(self, repository, audit_storage):
        correlation_id = uuid4()
        item = await repository.create(make_input(), correlation_id=correlation_id)

        events = await audit_storage.get_events_by_correlation_id(correlation_id)
        assert [e.event_type for e in events] == [AuditEventType.ITEM_CREATED]
        assert events[0].entity_id == item.id

    @pytest.mark.asyncio
    async def test_invalid_input_is_not_saved(self, repository, audit_storage):
        with pytest.raises(ItemValidationError) as exc_info:
            await repository.create(make_input(name="", price=0))

        assert set(exc_info.value.field_errors) == {"name", "price"}
        assert await repository.list_items() == []
        assert await event_types(audit_storage) == [AuditEventType.VALIDATION_FAILED]

    @pytest.mark.asyncio
    async def test_storage_failure_is_audited_and_raised(self, audit_storage):
        repository = ItemRepository(
            storage=FailingItemStorage(),
            audit_logger=AuditLogger(audit_storage),
        )
        with pytest.raises(StorageError):
            await repository.create(make_input())
        assert await event_types(audit_storage) == [AuditEventType.SAVE_FAILED]

    @pytest.mark.asyncio
    async def test_warnings_do_not_block(self, repository):
        item = await repository.create(make_input(
            cadence=PaymentCadence.YEARLY,
            usage=YEAR_2024,
            payment=(date(2020, 1, 1), date(2020, 12, 30)),
        ))
        assert item.cost_per_day == pytest.approx(3000 / 366)

    @pytest.mark.asyncio
    async def test_non_finite_price_is_a_validation_error(self, repository, audit_storage):
        with pytest.raises(ItemValidationError) as exc_info:
            await repository.create(make_input(price=float("nan")))

        assert exc_info.value.field_errors == {"price": "Price must be a finite number"}
        assert await event_types(audit_storage) == [AuditEventType.VALIDATION_FAILED]

    @pytest.mark.asyncio
    async def test_overflowing_cost_is_not_saved(self, repository):
        with pytest.raises(ItemValidationError):
            await repository.create(make_input(
                price=1e308,
                cadence=PaymentCadence.MONTHLY,
                usage=(date(2024, 1, 1), date(2024, 3, 1)),
            ))
        assert await repository.list_items() == []

    @pytest.mark.asyncio
    async def test_unexpected_backend_error_is_audited(self, audit_storage):
        class BrokenItemStorage(InMemoryItemStorage):
            async def save_item(self, item):
                raise RuntimeError("driver bug")

        repository = ItemRepository(
            storage=BrokenItemStorage(),
            audit_logger=AuditLogger(audit_storage),
        )
        with pytest.raises(RuntimeError):
            await repository.create(make_input())

        events = await audit_storage.get_recent_events()
        assert [e.event_type for e in events] == [AuditEventType.SYSTEM_ERROR]
        assert events[0].details["operation"] == "create"
        assert events[0].error_message == "driver bug"


class TestWriteSerialization:
    """Writes from several coroutines or threads never interleave."""

    @pytest.mark.asyncio
    async def test_interleaving_coroutines_on_one_loop(self):
        class SlowItemStorage(InMemoryItemStorage):
            def __init__(self):
                super().__init__()
                self.active = 0
                self.max_active = 0

            async def save_item(self, item):
                self.active += 1
                self.max_active = max(self.max_active, self.active)
                await asyncio.sleep(0.001)
                try:
                    return await super().save_item(item)
                finally:
                    self.active -= 1

        storage = SlowItemStorage()
        repository = ItemRepository(storage=storage)
        inputs = [make_input(name=f"item {n}", price=n + 1) for n in range(20)]

        await asyncio.gather(*(repository.create(data) for data in inputs))

        assert len(await repository.list_items()) == 20
        assert storage.max_active == 1

    def test_creates_from_many_threads_each_with_own_loop(self, tmp_path):
        """One shared repository, one event loop per thread, as under Streamlit."""
        repository = ItemRepository(
            storage=JsonFileItemStorage(tmp_path / "items.json"),
            audit_logger=AuditLogger(InMemoryAuditStorage()),
        )
        threads, per_thread = 4, 15

        def worker(thread_no):
            for n in range(per_thread):
                asyncio.run(repository.create(make_input(name=f"t{thread_no}-{n}")))

        with ThreadPoolExecutor(max_workers=threads) as pool:
            futures = [pool.submit(worker, t) for t in range(threads)]
            for future in futures:
                future.result(timeout=60)

        items = asyncio.run(repository.list_items())
        assert len(items) == threads * per_thread
        assert len({item.id for item in items}) == threads * per_thread


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_recomputes_and_preserves_identity(self, repository):
        original = await repository.create(make_input(name="Phone", price=3000))
        other = await repository.create(make_input(name="Desk", price=600))

        updated = await repository.update(original.id, make_input(name="Phone", price=6000))

        assert updated.id == original.id
        assert updated.created_at == original.created_at
        assert updated.updated_at >= original.updated_at
        assert updated.cost_per_day == 200.0
        assert [i.id for i in await repository.list_items()] == [original.id, other.id]

    @pytest.mark.asyncio
    async def test_update_audits_previous_cost(self, repository, audit_storage):
        item = await repository.create(make_input(price=3000))
        await repository.update(item.id, make_input(price=1500))

        events = await audit_storage.get_events_by_entity("item", item.id)
        assert events[-1].event_type == AuditEventType.ITEM_UPDATED
        assert events[-1].details["previous_cost_per_day"] == 100.0
        assert events[-1].details["cost_per_day"] == 50.0

    @pytest.mark.asyncio
    async def test_update_missing(self, repository, audit_storage):
        with pytest.raises(NotFoundError):
            await repository.update(uuid4(), make_input())
        assert await event_types(audit_storage) == [AuditEventType.ITEM_NOT_FOUND]

    @pytest.mark.asyncio
    async def test_invalid_update_leaves_item_unchanged(self, repository):
        item = await repository.create(make_input(name="Phone"))
        with pytest.raises(ItemValidationError):
            await repository.update(item.id, make_input(name="x" * 51))
        assert (await repository.get(item.id)).name == "Phone"

    @pytest.mark.asyncio
    async def test_storage_failure_is_audited(self, audit_storage):
        item = make_item()
        repository = ItemRepository(
            storage=FailingItemStorage([item]),
            audit_logger=AuditLogger(audit_storage),
        )

        with pytest.raises(StorageError):
            await repository.update(item.id, make_input(price=10))
        assert await event_types(audit_storage) == [AuditEventType.SAVE_FAILED]


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete(self, repository, audit_storage):
        item = await repository.create(make_input())
        await repository.delete(item.id)

        assert await repository.list_items() == []
        assert (await event_types(audit_storage))[-1] == AuditEventType.ITEM_DELETED

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self, repository):
        item = await repository.create(make_input())
        await repository.delete(item.id)
        with pytest.raises(NotFoundError):
            await repository.delete(item.id)

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, repository):
        with pytest.raises(NotFoundError):
            await repository.get(uuid4())


class TestReads:
    @pytest.mark.asyncio
    async def test_summary_and_ranking(self, repository):
        laptop = await repository.create(make_input(
            name="Laptop", price=200000,
            usage=(date(2024, 1, 1), date(2027, 12, 31)),
            category="Tech",
        ))
        rent = await repository.create(make_input(
            name="Rent", price=80000, cadence=PaymentCadence.MONTHLY,
            usage=YEAR_2024, category="Home",
        ))
        insurance = await repository.create(make_input(
            name="Insurance", price=12000, cadence=PaymentCadence.YEARLY,
            usage=YEAR_2024, payment=(date(2024, 1, 1), date(2024, 12, 30)),
            category="Home",
        ))

        summary = await repository.summary()
        assert summary.total_cost_per_day == pytest.approx(
            laptop.cost_per_day + rent.cost_per_day + insurance.cost_per_day
        )
        assert summary.total_cost_per_month == pytest.approx(
            laptop.cost_per_day * 30 + 80000 + 1000
        )
        assert [g.category for g in summary.category_summary] == ["Home", "Tech"]

        top = await repository.top_items(limit=2)
        assert [i.name for i in top] == ["Rent", "Laptop"]

        assert await repository.categories() == ["Home", "Tech"]
        assert [i.name for i in await repository.items_by_category("Home")] == [
            "Rent", "Insurance",
        ]

    @pytest.mark.asyncio
    async def test_leap_year_insurance(self, repository):
        """A 12000/year policy used through 2024 on a one-year payment period."""
        item = await repository.create(make_input(
            name="Insurance", price=12000, cadence=PaymentCadence.YEARLY,
            usage=YEAR_2024, payment=(date(2024, 1, 1), date(2024, 12, 30)),
        ))
        assert round(item.cost_per_day, 2) == 32.79

        summary = await repository.summary()
        assert summary.total_cost_per_month == 1000
        assert summary.total_cost_per_year == 12000

    @pytest.mark.asyncio
    async def test_top_items_uses_configured_limit(self, item_storage):
        repository = ItemRepository(storage=item_storage, ranking_limit=2)
        for n in range(5):
            await repository.create(make_input(name=f"item {n}", price=100 * (n + 1)))
        top = await repository.top_items()
        assert [i.name for i in top] == ["item 4", "item 3"]

    @pytest.mark.asyncio
    async def test_explicit_zero_limit_is_respected(self, item_storage):
        repository = ItemRepository(storage=item_storage, ranking_limit=2)
        await repository.create(make_input())
        assert await repository.top_items(limit=0) == []

    def test_preview(self, repository):
        assert repository.preview_cost_per_day(make_input(name="", price=3000)) == 100.0
        reversed_usage = make_input(usage=(date(2024, 2, 1), date(2024, 1, 1)))
        assert repository.preview_cost_per_day(reversed_usage) is None


class TestCreateAppComponents:
    def test_memory_backend(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        monkeypatch.setenv("RANKING_LIMIT", "3")
        repository = create_app_components(Settings())

        assert isinstance(repository.storage, InMemoryItemStorage)
        assert isinstance(repository.audit_logger.storage, InMemoryAuditStorage)

    def test_json_backend(self, monkeypatch, tmp_path):
        path = tmp_path / "items.json"
        monkeypatch.setenv("DATA_FILE_PATH", str(path))
        repository = create_app_components(Settings(), backend=StorageBackend.JSON)

        assert isinstance(repository.storage, JsonFileItemStorage)
        assert repository.storage.path == path
        assert repository.audit_logger.storage is None

    @pytest.mark.asyncio
    async def test_ranking_limit_from_environment(self, monkeypatch):
        monkeypatch.setenv("RANKING_LIMIT", "1")
        repository = create_app_components(Settings(), backend=StorageBackend.MEMORY)
        await repository.create(make_input(name="a"))
        await repository.create(make_input(name="b"))
        assert len(await repository.top_items()) == 1
