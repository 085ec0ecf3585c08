"""
Catalog synchronization: fetch, map and replace the stored catalog
"""
import asyncio
import logging
from datetime import datetime
from typing import Optional

from models import SyncResponse
from repository import ProductRepository
from scraper import CatalogFetcher, CatalogFetchError, convert_to_product

logger = logging.getLogger(__name__)


class CatalogSynchronizer:
    """Replaces the stored catalog with the remote one"""

    def __init__(
        self,
        repository: ProductRepository,
        fetcher: CatalogFetcher,
        max_products: int = 50,
    ):
        self.repository = repository
        self.fetcher = fetcher
        self.max_products = max_products
        self._lock = asyncio.Lock()

    async def clear_on_restart(self, enabled: bool) -> bool:
        """
        Clear the store when the clear-on-restart flag is set

        Returns:
            True when the store was cleared
        """
        if not enabled:
            return False

        logger.info("Clearing all products on restart as configured")
        try:
            await self.repository.delete_all()
        except Exception as e:
            logger.error(f"Error clearing products on restart: {str(e)}", exc_info=True)
            return False
        logger.info("Successfully cleared all products")
        return True

    async def run_cycle(self) -> SyncResponse:
        """
        Run one fetch-and-replace cycle

        The store is only touched once a non-empty product list has been
        fetched. Individual products that fail to map or insert are skipped
        and counted.

        Returns:
            SyncResponse with saved and error counts
        """
        if self._lock.locked():
            logger.warning("Sync cycle already in progress, skipping")
            return SyncResponse(success=False, message="Sync already in progress")

        async with self._lock:
            return await self._run_cycle()

    async def _run_cycle(self) -> SyncResponse:
        start_time = datetime.now()

        def elapsed() -> float:
            return (datetime.now() - start_time).total_seconds()

        # 1. Fetch before touching the store
        try:
            remote_products = await self.fetcher.fetch_products()
        except CatalogFetchError as e:
            logger.error(f"Error fetching products from API: {str(e)}")
            return SyncResponse(
                success=False,
                message="Failed to fetch products",
                execution_time=elapsed(),
                error=str(e),
            )

        if not remote_products:
            logger.warning("No products received from API")
            return SyncResponse(
                success=True,
                message="No product data found",
                execution_time=elapsed(),
            )

        # 2. Clear existing products
        logger.info("Clearing existing products from database")
        try:
            await self.repository.delete_all()
        except Exception as e:
            logger.error(f"Error clearing products before sync: {str(e)}", exc_info=True)
            return SyncResponse(
                success=False,
                message="Failed to clear existing products",
                fetched_count=len(remote_products),
                execution_time=elapsed(),
                error=str(e),
            )

        # 3. Save the first max_products, one at a time
        to_save = remote_products[:self.max_products]
        logger.info(f"Processing {len(to_save)} products for saving")

        saved_count = 0
        error_count = 0
        for index, remote in enumerate(to_save, start=1):
            try:
                logger.debug(f"Processing product {index}/{len(to_save)}: {remote.title}")
                product = convert_to_product(remote)
                await self.repository.save(product)
                saved_count += 1
            except Exception as e:
                error_count += 1
                logger.warning(f"Failed to save product {remote.id} ({remote.title}): {str(e)}")

        logger.info(f"Successfully saved {saved_count} products to database ({error_count} errors)")

        return SyncResponse(
            success=True,
            message=f"Successfully synced {saved_count} products",
            fetched_count=len(remote_products),
            saved_count=saved_count,
            error_count=error_count,
            execution_time=elapsed(),
        )


class SyncScheduler:
    """Runs sync cycles on a fixed delay in a background task"""

    def __init__(
        self,
        synchronizer: CatalogSynchronizer,
        interval: float = 3600.0,
        initial_delay: float = 0.0,
    ):
        """
        Initialize scheduler

        Args:
            synchronizer: Synchronizer whose cycle is run
            interval: Seconds to wait after a cycle finishes
            initial_delay: Seconds to wait before the first cycle
        """
        self.synchronizer = synchronizer
        self.interval = interval
        self.initial_delay = initial_delay
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(
            f"Sync scheduler started (initial delay {self.initial_delay}s, interval {self.interval}s)"
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Sync scheduler stopped")

    async def _loop(self) -> None:
        await asyncio.sleep(self.initial_delay)
        while True:
            try:
                await self.synchronizer.run_cycle()
            except Exception as e:
                logger.error(f"Sync cycle failed: {str(e)}", exc_info=True)
            await asyncio.sleep(self.interval)
