"""
Command-line interface for the catalog sync service
"""
import asyncio
import argparse
import logging
import sys
from typing import List, Optional

from config import settings
from database import check_connection, create_engine, create_session_factory, init_db
from repository import ProductRepository
from scraper import CatalogFetcher
from service import ProductService
from sync import CatalogSynchronizer

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Product Catalog Sync CLI')
    parser.add_argument(
        '--clear',
        action='store_true',
        help='Delete all stored products and exit'
    )
    parser.add_argument(
        '--test-db',
        action='store_true',
        help='Test database connection only'
    )
    parser.add_argument(
        '--url',
        default=settings.PRODUCTS_API_URL,
        help='Products API URL (default: %(default)s)'
    )
    parser.add_argument(
        '--max-products',
        type=int,
        default=settings.MAX_PRODUCTS,
        help='Maximum number of products to store (default: %(default)s)'
    )
    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function"""
    args = build_parser().parse_args(argv)

    engine = create_engine(settings.DATABASE_URL)
    try:
        # Test database connection if requested
        if args.test_db:
            logger.info("Testing database connection...")
            if await check_connection(engine):
                logger.info("✓ Database connection successful")
                return 0
            logger.error("✗ Database connection failed")
            return 1

        await init_db(engine)
        repository = ProductRepository(create_session_factory(engine))

        if args.clear:
            cleared = await ProductService(repository).clear_all_products()
            return 0 if cleared else 1

        fetcher = CatalogFetcher(
            args.url,
            connect_timeout=settings.CONNECT_TIMEOUT,
            read_timeout=settings.READ_TIMEOUT,
        )
        synchronizer = CatalogSynchronizer(repository, fetcher, max_products=args.max_products)

        logger.info("=" * 60)
        logger.info("Product Catalog Sync")
        logger.info("=" * 60)
        logger.info(f"Products API: {args.url}")
        logger.info(f"Max Products: {args.max_products}")
        logger.info("=" * 60)

        result = await synchronizer.run_cycle()

        logger.info("=" * 60)
        logger.info("Sync Complete")
        logger.info("=" * 60)
        logger.info(f"Status: {'Success' if result.success else 'Failed'}")
        logger.info(f"Message: {result.message}")
        logger.info(f"Fetched: {result.fetched_count}")
        logger.info(f"Saved: {result.saved_count}")
        logger.info(f"Errors: {result.error_count}")
        logger.info(f"Execution Time: {result.execution_time:.2f}s")
        if result.error:
            logger.error(f"Error: {result.error}")
        logger.info("=" * 60)

        return 0 if result.success else 1
    finally:
        await engine.dispose()


def run() -> None:
    """Console script entry point"""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
