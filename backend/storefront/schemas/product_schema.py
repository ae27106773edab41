# backend/storefront/schemas/product_schema.py
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from storefront.models.product import CATEGORIES


class ProductUpdate(BaseModel):
    """Writable product fields. Unset fields are excluded when dumped with exclude_unset."""
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    image: Optional[str] = None
    brand: Optional[str] = None
    specifications: Optional[str] = None
    discount: Optional[Decimal] = Field(None, ge=0)
    featured: Optional[bool] = None
    status: Optional[str] = None

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        # "all" is a listing wildcard, not a storable category
        if v is not None and v not in CATEGORIES:
            raise ValueError(f"category must be one of {', '.join(CATEGORIES)}")
        return v


class ProductCreate(ProductUpdate):
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
