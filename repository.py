"""
Product persistence over the products table
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy import String, and_, delete, func, insert, select, update
from sqlalchemy.ext.asyncio import async_sessionmaker

from database import products
from models import Product, ProductVariant, VariantList

logger = logging.getLogger(__name__)

# Newest first; id breaks ties between rows stamped in the same instant
NEWEST_FIRST = (products.c.created_at.desc(), products.c.id.desc())


def serialize_variants(variants: Optional[List[ProductVariant]]) -> Optional[str]:
    """Encode a variant list for the variants column"""
    if variants is None:
        return None
    return VariantList.dump_json(variants).decode("utf-8")


def deserialize_variants(raw: Optional[str]) -> List[ProductVariant]:
    """
    Decode the variants column

    Unreadable content yields an empty list so the row itself stays readable.
    """
    if not raw:
        return []
    try:
        return VariantList.validate_json(raw)
    except (ValidationError, ValueError) as e:
        logger.warning(f"Ignoring unreadable variants payload: {str(e)}")
        return []


def row_to_product(row: Mapping[str, Any]) -> Product:
    """Map a products row to a Product"""
    return Product(
        id=row["id"],
        title=row["title"],
        handle=row["handle"],
        vendor=row["vendor"],
        product_type=row["product_type"],
        price=row["price"],
        compare_at_price=row["compare_at_price"],
        sku=row["sku"],
        available=row["available"],
        description=row["description"],
        image_url=row["image_url"],
        variants=deserialize_variants(row["variants"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _title_contains(search_term: str):
    # LIKE wildcards in the term match literally
    return func.lower(products.c.title, type_=String).contains(search_term.lower(), autoescape=True)


def _column_values(product: Product) -> dict:
    return {
        "title": product.title,
        "handle": product.handle,
        "vendor": product.vendor,
        "product_type": product.product_type,
        "price": product.price,
        "compare_at_price": product.compare_at_price,
        "sku": product.sku,
        "available": product.available,
        "description": product.description,
        "image_url": product.image_url,
        "variants": serialize_variants(product.variants),
    }


class ProductRepository:
    """CRUD and filtered search over stored products"""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def _fetch(self, statement) -> List[Product]:
        async with self.session_factory() as session:
            result = await session.execute(statement)
            return [row_to_product(row) for row in result.mappings().all()]

    async def find_all(self) -> List[Product]:
        return await self._fetch(select(products).order_by(*NEWEST_FIRST))

    async def find_by_id(self, product_id: int) -> Optional[Product]:
        found = await self._fetch(select(products).where(products.c.id == product_id))
        return found[0] if found else None

    async def save(self, product: Product) -> Product:
        """
        Insert a new product row

        Args:
            product: Product to insert; any id on it is ignored

        Returns:
            The product with its assigned id and timestamps
        """
        now = datetime.now()
        values = _column_values(product)
        values.update(created_at=now, updated_at=now)

        async with self.session_factory() as session:
            result = await session.execute(insert(products).values(**values))
            await session.commit()
            new_id = result.inserted_primary_key[0]

        return product.model_copy(update={"id": new_id, "created_at": now, "updated_at": now})

    async def update(self, product: Product) -> Optional[Product]:
        """
        Overwrite all mutable fields of an existing row

        Returns:
            The updated product, or None if no row has the product's id
        """
        if product.id is None:
            return None

        now = datetime.now()
        values = _column_values(product)
        values["updated_at"] = now

        async with self.session_factory() as session:
            result = await session.execute(
                update(products).where(products.c.id == product.id).values(**values)
            )
            await session.commit()

        if result.rowcount == 0:
            return None
        return product.model_copy(update={"updated_at": now})

    async def delete_by_id(self, product_id: int) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(delete(products).where(products.c.id == product_id))
            await session.commit()
        return result.rowcount > 0

    async def delete_all(self) -> None:
        async with self.session_factory() as session:
            await session.execute(delete(products))
            await session.commit()

    async def count(self) -> int:
        async with self.session_factory() as session:
            result = await session.execute(select(func.count()).select_from(products))
            return result.scalar_one()

    async def find_by_title_containing(self, search_term: str) -> List[Product]:
        statement = (
            select(products)
            .where(_title_contains(search_term))
            .order_by(*NEWEST_FIRST)
        )
        return await self._fetch(statement)

    async def find_by_filters(
        self,
        search_term: Optional[str] = None,
        product_type: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        available: Optional[bool] = None,
    ) -> List[Product]:
        """
        Search with conjunctive criteria

        Args:
            search_term: Case-insensitive substring of the title
            product_type: Case-insensitive product type
            min_price: Inclusive lower price bound
            max_price: Inclusive upper price bound
            available: Availability flag

        Returns:
            Matching products, newest first. Criteria left as None (or blank
            strings) are not applied.
        """
        conditions = []

        if search_term and search_term.strip():
            conditions.append(_title_contains(search_term))

        if product_type and product_type.strip():
            conditions.append(func.lower(products.c.product_type, type_=String) == product_type.lower())

        if min_price is not None:
            conditions.append(products.c.price >= min_price)

        if max_price is not None:
            conditions.append(products.c.price <= max_price)

        if available is not None:
            conditions.append(products.c.available == available)

        logger.debug(f"Product search with {len(conditions)} criteria")
        statement = select(products)
        if conditions:
            statement = statement.where(and_(*conditions))
        return await self._fetch(statement.order_by(*NEWEST_FIRST))

    async def get_distinct_product_types(self) -> List[str]:
        statement = (
            select(products.c.product_type)
            .where(products.c.product_type.is_not(None))
            .distinct()
            .order_by(products.c.product_type)
        )
        async with self.session_factory() as session:
            result = await session.execute(statement)
            return list(result.scalars().all())
