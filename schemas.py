"""
Database Schemas

Product catalog models.
Each document model corresponds to a MongoDB collection (lowercased class name).
Fields are snake_case in Python and camelCase in MongoDB and JSON.
"""
from typing import Any, List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )


class Product(CamelModel):
    """
    Catalog products
    Collection name: "product"
    """
    name: str = Field(..., description="Product name")
    slug: str = Field(..., description="Unique URL slug derived from the name")
    short_description: str = Field(..., description="Card / teaser text")
    long_description: Optional[str] = Field(None, description="Full product description")
    card_image: str = Field(..., description="Image shown on product cards")
    detail_images: List[str] = Field(default_factory=list, description="Gallery images")
    short_features: List[str] = Field(default_factory=list, description="Bullet-point features")
    specifications: Optional[Any] = Field(None, description="Free-form specification data")
    reviews_data: Optional[Any] = Field(None, description="Free-form review data")
    catalog_file: Optional[str] = Field(None, description="Downloadable catalog reference")
    category_id: Optional[ObjectId] = Field(None, description="Owning category")
    subcategory_id: Optional[ObjectId] = Field(None, description="Owning subcategory")
    is_active: bool = Field(True, description="Hidden from the storefront when false")
    view_count: int = Field(0, ge=0, description="Number of product page views")


# ----- Request payloads -----

class ProductCreate(CamelModel):
    # name, short_description and card_image are required; checked in the handler
    name: Optional[str] = None
    short_description: Optional[str] = None
    long_description: Optional[str] = None
    card_image: Optional[str] = None
    detail_images: Optional[List[str]] = None
    short_features: Optional[List[str]] = None
    specifications: Optional[Any] = None
    reviews_data: Optional[Any] = None
    catalog_file: Optional[str] = None
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    is_active: Optional[bool] = True


class ProductUpdate(ProductCreate):
    """Partial update; only fields present in the request body are written."""
    id: Optional[str] = None
    is_active: Optional[bool] = None
