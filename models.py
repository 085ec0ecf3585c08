"""
Data models and response schemas
"""
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def safe_decimal(value: Any) -> Optional[Decimal]:
    """
    Safely convert value to Decimal

    Args:
        value: Value to convert (decimal string or number)

    Returns:
        Decimal value or None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    text = str(value).strip()
    if not text:
        return None
    try:
        result = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def parse_strict_bool(value: Any) -> Optional[bool]:
    """Parse 'true'/'false' exactly; anything else is None."""
    if isinstance(value, bool):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    return None


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ---------------------------------------------------------------------------
# Stored catalog
# ---------------------------------------------------------------------------

class ProductVariant(BaseModel):
    """Product variant embedded in a product row"""
    id: Optional[int] = None
    title: Optional[str] = None
    price: Optional[Decimal] = None
    sku: Optional[str] = None
    available: Optional[bool] = None
    option1: Optional[str] = None
    option2: Optional[str] = None
    option3: Optional[str] = None


class Product(BaseModel):
    """Product data model"""
    id: Optional[int] = None
    title: str
    handle: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    price: Optional[Decimal] = None
    compare_at_price: Optional[Decimal] = None
    sku: Optional[str] = None
    available: Optional[bool] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    variants: List[ProductVariant] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


VariantList = TypeAdapter(List[ProductVariant])


# ---------------------------------------------------------------------------
# Upstream products.json wire shape
# ---------------------------------------------------------------------------

class RemoteImage(BaseModel):
    """Featured image attached to a remote variant"""
    id: int
    src: str
    alt: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    position: Optional[int] = None
    product_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    variant_ids: Optional[List[int]] = None


class RemoteVariant(BaseModel):
    """Variant as returned by the products API"""
    id: int
    title: Optional[str] = None
    price: Optional[str] = None
    sku: Optional[str] = None
    available: Optional[bool] = None
    option1: Optional[str] = None
    option2: Optional[str] = None
    option3: Optional[str] = None
    compare_at_price: Optional[str] = None
    featured_image: Optional[RemoteImage] = None
    grams: Optional[int] = None
    position: Optional[int] = None
    product_id: Optional[int] = None
    requires_shipping: Optional[bool] = None
    taxable: Optional[bool] = None

    @field_validator("price", "compare_at_price", mode="before")
    @classmethod
    def _stringify_price(cls, value: Any) -> Any:
        # Some stores send prices as JSON numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class RemoteProduct(BaseModel):
    """Product as returned by the products API"""
    id: int
    title: str
    handle: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    body_html: Optional[str] = None
    published_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    tags: Optional[List[str]] = None
    variants: Optional[List[RemoteVariant]] = None


class RemoteProductResponse(BaseModel):
    """Top-level products.json payload"""
    products: List[RemoteProduct]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class ProductCreate(BaseModel):
    """Fields accepted when creating a product"""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1)
    handle: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    price: Optional[Decimal] = None
    sku: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value: Any) -> Optional[Decimal]:
        return safe_decimal(value)


class ProductUpdate(BaseModel):
    """Fields accepted when updating a product; unset fields keep their value"""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1)
    handle: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    price: Optional[Decimal] = None
    sku: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    available: Optional[bool] = None

    @field_validator("price", mode="before")
    @classmethod
    def _parse_price(cls, value: Any) -> Optional[Decimal]:
        return safe_decimal(value)

    @field_validator("available", mode="before")
    @classmethod
    def _parse_available(cls, value: Any) -> Optional[bool]:
        return parse_strict_bool(value)

    def changes(self) -> dict:
        """Provided fields, minus an unparsable availability flag"""
        data = self.model_dump(exclude_unset=True)
        if data.get("available", True) is None:
            data.pop("available")
        if "title" in data and data["title"] is None:
            data.pop("title")
        return data


class ProductSearch(BaseModel):
    """Search criteria; absent criteria are not applied"""
    model_config = ConfigDict(str_strip_whitespace=True)

    q: Optional[str] = None
    product_type: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    available: Optional[bool] = None

    @field_validator("q", "product_type", mode="before")
    @classmethod
    def _blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def _parse_price(cls, value: Any) -> Optional[Decimal]:
        return safe_decimal(value)

    @field_validator("available", mode="before")
    @classmethod
    def _parse_available(cls, value: Any) -> Optional[bool]:
        return parse_strict_bool(value)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class SyncResponse(BaseModel):
    """Response model for sync operations"""
    success: bool
    message: str
    fetched_count: int = 0
    saved_count: int = 0
    error_count: int = 0
    execution_time: float = 0.0
    error: Optional[str] = None


class ClearResponse(BaseModel):
    """Response model for clearing the catalog"""
    cleared: bool
    product_count: int


class DeleteResponse(BaseModel):
    """Response model for deleting one product"""
    deleted: bool
    product_count: int
