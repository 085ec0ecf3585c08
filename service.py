"""
Product query service used by the HTTP API
"""
import logging
from typing import List, Optional

from models import Product, ProductCreate, ProductSearch, ProductUpdate
from repository import ProductRepository

logger = logging.getLogger(__name__)


class ProductService:
    """Read, search and mutate operations over the stored catalog"""

    def __init__(self, repository: ProductRepository):
        self.repository = repository

    async def get_all_products(self) -> List[Product]:
        return await self.repository.find_all()

    async def get_product_by_id(self, product_id: int) -> Optional[Product]:
        return await self.repository.find_by_id(product_id)

    async def get_product_count(self) -> int:
        return await self.repository.count()

    async def save_product(self, request: ProductCreate) -> Product:
        """Create a product from user input; new products are available"""
        product = Product(**request.model_dump(), available=True)
        saved = await self.repository.save(product)
        logger.info(f"Created product {saved.id} ({saved.title})")
        return saved

    async def update_product(self, product_id: int, request: ProductUpdate) -> Optional[Product]:
        """
        Apply the provided fields to an existing product

        Args:
            product_id: Product to update
            request: Fields to override; unset fields keep their stored value

        Returns:
            Updated product, or None if the product does not exist
        """
        existing = await self.repository.find_by_id(product_id)
        if existing is None:
            return None

        updated = existing.model_copy(update=request.changes())
        return await self.repository.update(updated)

    async def delete_product(self, product_id: int) -> bool:
        deleted = await self.repository.delete_by_id(product_id)
        if deleted:
            logger.info(f"Deleted product {product_id}")
        return deleted

    async def search_products_by_title(self, search_term: str) -> List[Product]:
        if not search_term.strip():
            return await self.get_all_products()
        return await self.repository.find_by_title_containing(search_term)

    async def search_products_with_filters(self, search: ProductSearch) -> List[Product]:
        return await self.repository.find_by_filters(
            search_term=search.q,
            product_type=search.product_type,
            min_price=search.min_price,
            max_price=search.max_price,
            available=search.available,
        )

    async def get_product_types(self) -> List[str]:
        return await self.repository.get_distinct_product_types()

    async def clear_all_products(self) -> bool:
        """
        Delete every stored product

        Returns:
            False if the store reported an error, True otherwise
        """
        try:
            logger.info("Clearing all products from database")
            await self.repository.delete_all()
            logger.info("Successfully cleared all products")
            return True
        except Exception as e:
            logger.error(f"Error clearing products: {str(e)}", exc_info=True)
            return False
