"""Tests for catalog synchronization"""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from models import Product
from sync import CatalogSynchronizer, SyncScheduler
from conftest import StubFetcher, make_remote_product


async def seed(repository, count=3):
    for i in range(count):
        await repository.save(Product(title=f"Existing {i}", price=Decimal("1.00")))


@pytest.mark.asyncio
async def test_empty_fetch_leaves_store_untouched(repository):
    await seed(repository)
    synchronizer = CatalogSynchronizer(repository, StubFetcher(products=[]))

    result = await synchronizer.run_cycle()

    assert result.success is True
    assert result.saved_count == 0
    assert await repository.count() == 3


@pytest.mark.asyncio
async def test_failed_fetch_leaves_store_untouched(repository):
    await seed(repository)
    synchronizer = CatalogSynchronizer(repository, StubFetcher(error="connection refused"))

    result = await synchronizer.run_cycle()

    assert result.success is False
    assert result.saved_count == 0
    assert result.error_count == 0
    assert "connection refused" in result.error
    assert await repository.count() == 3


@pytest.mark.asyncio
async def test_cycle_replaces_catalog_up_to_limit(repository):
    """Test that 60 fetched products with a limit of 50 stores the first 50"""
    await seed(repository)
    remote = [make_remote_product(product_id=i, title=f"Remote {i}") for i in range(1, 61)]
    synchronizer = CatalogSynchronizer(repository, StubFetcher(products=remote), max_products=50)

    result = await synchronizer.run_cycle()

    assert result.success is True
    assert result.fetched_count == 60
    assert result.saved_count == 50
    assert result.error_count == 0
    assert await repository.count() == 50

    stored = await repository.find_all()
    # Newest first, so reversed insertion order
    assert [p.title for p in reversed(stored)] == [f"Remote {i}" for i in range(1, 51)]
    assert not any(p.title.startswith("Existing") for p in stored)


@pytest.mark.asyncio
async def test_cycle_maps_products(repository):
    remote = make_remote_product(
        title="Linen Shirt",
        body_html="<p>Soft</p>",
        variants=[{"id": 5, "price": "19.99", "sku": "LS-1", "available": True}],
    )
    synchronizer = CatalogSynchronizer(repository, StubFetcher(products=[remote]))

    await synchronizer.run_cycle()
    stored = (await repository.find_all())[0]

    assert stored.title == "Linen Shirt"
    assert stored.price == Decimal("19.99")
    assert stored.sku == "LS-1"
    assert stored.description == "Soft"
    assert stored.available is True
    assert [v.sku for v in stored.variants] == ["LS-1"]


@pytest.mark.asyncio
async def test_item_failure_is_isolated(repository):
    """Test that one failing insert is counted and the batch continues"""
    remote = [make_remote_product(product_id=i, title=f"Remote {i}") for i in range(1, 4)]
    original_save = repository.save

    async def flaky_save(product):
        if product.title == "Remote 2":
            raise RuntimeError("constraint violated")
        return await original_save(product)

    repository.save = flaky_save
    synchronizer = CatalogSynchronizer(repository, StubFetcher(products=remote))

    result = await synchronizer.run_cycle()

    assert result.success is True
    assert result.saved_count == 2
    assert result.error_count == 1
    assert sorted(p.title for p in await repository.find_all()) == ["Remote 1", "Remote 3"]


@pytest.mark.asyncio
async def test_clear_failure_aborts_cycle():
    repository = AsyncMock()
    repository.delete_all.side_effect = RuntimeError("database is locked")
    synchronizer = CatalogSynchronizer(repository, StubFetcher(products=[make_remote_product()]))

    result = await synchronizer.run_cycle()

    assert result.success is False
    assert "database is locked" in result.error
    repository.save.assert_not_called()


@pytest.mark.asyncio
async def test_overlapping_cycle_is_refused(repository):
    release = asyncio.Event()

    class SlowFetcher(StubFetcher):
        async def fetch_products(self):
            await release.wait()
            return await super().fetch_products()

    fetcher = SlowFetcher(products=[make_remote_product()])
    synchronizer = CatalogSynchronizer(repository, fetcher)

    first = asyncio.create_task(synchronizer.run_cycle())
    await asyncio.sleep(0)
    second = await synchronizer.run_cycle()
    release.set()
    first_result = await first

    assert second.success is False
    assert "in progress" in second.message
    assert first_result.saved_count == 1
    assert fetcher.calls == 1


@pytest.mark.asyncio
async def test_clear_on_restart(repository):
    await seed(repository)
    synchronizer = CatalogSynchronizer(repository, StubFetcher())

    assert await synchronizer.clear_on_restart(False) is False
    assert await repository.count() == 3

    assert await synchronizer.clear_on_restart(True) is True
    assert await repository.count() == 0


@pytest.mark.asyncio
async def test_clear_on_restart_does_not_fetch(repository):
    fetcher = StubFetcher(products=[make_remote_product()])
    synchronizer = CatalogSynchronizer(repository, fetcher)

    await synchronizer.clear_on_restart(True)

    assert fetcher.calls == 0


@pytest.mark.asyncio
async def test_scheduler_runs_immediately_then_repeats():
    synchronizer = AsyncMock()
    scheduler = SyncScheduler(synchronizer, interval=0.01, initial_delay=0)

    scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert synchronizer.run_cycle.await_count >= 2
    assert scheduler.running is False


@pytest.mark.asyncio
async def test_scheduler_survives_cycle_errors():
    synchronizer = AsyncMock()
    synchronizer.run_cycle.side_effect = RuntimeError("boom")
    scheduler = SyncScheduler(synchronizer, interval=0.01)

    scheduler.start()
    await asyncio.sleep(0.1)
    assert scheduler.running is True
    await scheduler.stop()

    assert synchronizer.run_cycle.await_count >= 2


@pytest.mark.asyncio
async def test_scheduler_initial_delay():
    synchronizer = AsyncMock()
    scheduler = SyncScheduler(synchronizer, interval=3600, initial_delay=3600)

    scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.stop()

    synchronizer.run_cycle.assert_not_awaited()
