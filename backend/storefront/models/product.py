import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, Numeric, String, Text, text
from storefront.db import Base

CATEGORIES = ("phone", "accessory", "tablet", "laptop", "smartwatch", "headphone")
# UI-only wildcard accepted by list filters, never stored
CATEGORY_ALL = "all"

STATUSES = ("active", "inactive")
CONDITIONS = ("new", "used")


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    category = Column(String(64), nullable=True, index=True)
    stock = Column(Integer, default=0, server_default=text("0"))
    image = Column(String(512), nullable=True)
    brand = Column(Text, nullable=True)
    specifications = Column(Text, nullable=True)
    discount = Column(Numeric(12, 2), default=0, server_default=text("0"))
    featured = Column(Boolean, default=False, server_default=text("false"))
    status = Column(String(16), default="active", server_default=text("'active'"))
    condition = Column(String(16), default="new", server_default=text("'new'"))
    view_count = Column(Integer, default=0, server_default=text("0"))
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    __table_args__ = (
        CheckConstraint("status IN ('active','inactive')", name="products_status_check"),
        CheckConstraint("condition IN ('new','used')", name="products_condition_check"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": float(self.price) if self.price is not None else None,
            "category": self.category,
            "stock": self.stock,
            "image": self.image,
            "brand": self.brand,
            "specifications": self.specifications,
            "discount": float(self.discount) if self.discount is not None else None,
            "featured": self.featured,
            "status": self.status,
            "condition": self.condition,
            "view_count": self.view_count,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Product id={self.id} name={self.name}>"
