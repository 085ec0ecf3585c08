"""Shared test fixtures"""

from typing import List, Optional

import pytest
import pytest_asyncio

from database import create_engine, create_session_factory, init_db
from models import RemoteProduct
from repository import ProductRepository
from scraper import CatalogFetchError


def make_remote_product(
    product_id: int = 1,
    title: str = "Linen Shirt",
    variants: Optional[List[dict]] = None,
    **fields,
) -> RemoteProduct:
    """Build a RemoteProduct from products.json style data"""
    if variants is None:
        variants = [
            {
                "id": product_id * 100,
                "title": "S",
                "price": "19.99",
                "sku": f"SKU-{product_id}",
                "available": True,
                "option1": "S",
            }
        ]
    data = {"id": product_id, "title": title, "variants": variants}
    data.update(fields)
    return RemoteProduct.model_validate(data)


class StubFetcher:
    """Fetcher returning a fixed product list, or failing"""

    def __init__(self, products=None, error: Optional[str] = None):
        self.products = products or []
        self.error = error
        self.calls = 0

    async def fetch_products(self) -> List[RemoteProduct]:
        self.calls += 1
        if self.error:
            raise CatalogFetchError(self.error)
        return list(self.products)


@pytest.fixture
def database_url(tmp_path):
    """SQLite database file private to the test"""
    return f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}"


@pytest_asyncio.fixture
async def engine(database_url):
    engine = create_engine(database_url)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def repository(engine):
    return ProductRepository(create_session_factory(engine))
