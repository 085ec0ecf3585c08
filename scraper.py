"""
Products API fetcher and remote-to-local product mapping
"""
import asyncio
import logging
import re
from typing import List, Optional

import aiohttp
from pydantic import ValidationError

from models import (
    Product,
    ProductVariant,
    RemoteProduct,
    RemoteProductResponse,
    RemoteVariant,
    safe_decimal,
)

logger = logging.getLogger(__name__)

HTML_TAG = re.compile(r"<[^>]*>")


class CatalogFetchError(Exception):
    """The products API could not be read or its payload could not be parsed"""


def strip_html(html: Optional[str]) -> Optional[str]:
    """
    Remove all markup tags and trim surrounding whitespace

    Args:
        html: HTML fragment

    Returns:
        Plain text, or None when no HTML was given
    """
    if html is None:
        return None
    return HTML_TAG.sub("", html).strip()


def convert_variant(variant: RemoteVariant) -> ProductVariant:
    """Map a remote variant to the embedded variant shape"""
    return ProductVariant(
        id=variant.id,
        title=variant.title,
        price=safe_decimal(variant.price),
        sku=variant.sku,
        available=variant.available,
        option1=variant.option1,
        option2=variant.option2,
        option3=variant.option3,
    )


def convert_to_product(remote: RemoteProduct) -> Product:
    """
    Map a remote product to a local Product

    Price, compare-at price, SKU and image come from the first variant; the
    product is available when any variant is.

    Args:
        remote: Product from the products API

    Returns:
        Product ready to be saved
    """
    remote_variants = remote.variants or []
    first = remote_variants[0] if remote_variants else None

    image_url = None
    if first is not None and first.featured_image is not None:
        image_url = first.featured_image.src

    return Product(
        title=remote.title,
        handle=remote.handle,
        vendor=remote.vendor,
        product_type=remote.product_type,
        price=safe_decimal(first.price) if first else None,
        compare_at_price=safe_decimal(first.compare_at_price) if first else None,
        sku=first.sku if first else None,
        available=any(v.available is True for v in remote_variants),
        description=strip_html(remote.body_html),
        image_url=image_url,
        variants=[convert_variant(v) for v in remote_variants],
    )


class CatalogFetcher:
    """Reads the full product list from the products API"""

    def __init__(
        self,
        url: str,
        connect_timeout: float = 30.0,
        read_timeout: float = 60.0,
    ):
        """
        Initialize fetcher

        Args:
            url: products.json URL
            connect_timeout: Seconds allowed to establish the connection
            read_timeout: Seconds allowed between reads of the response body
        """
        self.url = url
        self.timeout = aiohttp.ClientTimeout(
            total=None,
            sock_connect=connect_timeout,
            sock_read=read_timeout,
        )

    async def fetch_products(self) -> List[RemoteProduct]:
        """
        Fetch the product list with a single GET

        Returns:
            Remote products in API order

        Raises:
            CatalogFetchError: on transport, status, JSON or schema failure
        """
        logger.info(f"Starting to fetch products from API: {self.url}")

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(self.url, headers={"accept": "application/json"}) as response:
                    response.raise_for_status()
                    payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Failed to fetch product data: {str(e)}")
            raise CatalogFetchError(f"Failed to fetch products: {str(e)}") from e
        except ValueError as e:
            logger.error(f"Products API returned invalid JSON: {str(e)}")
            raise CatalogFetchError(f"Invalid JSON from products API: {str(e)}") from e

        if payload is None:
            raise CatalogFetchError("Received null response from API")

        try:
            products = RemoteProductResponse.model_validate(payload).products
        except ValidationError as e:
            logger.error(f"Unexpected products payload: {str(e)}")
            raise CatalogFetchError(f"Unexpected products payload: {str(e)}") from e

        logger.info(f"Fetched {len(products)} products from API")
        return products
