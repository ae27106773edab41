from typing import Dict, List, Optional, Tuple

from storefront.models.product import Product
from sqlalchemy import func, or_
from sqlalchemy.orm import Session


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: str) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def list(
        self,
        filters: List = None,
        page: int = 1,
        size: int = 12,
        order_by: str = "created_at",
        ascending: bool = False,
        count: bool = True,
    ) -> Tuple[List[Product], Optional[int]]:
        query = self.db.query(Product)
        for f in filters or []:
            query = query.filter(f)
        total = (query.with_entities(func.count(Product.id)).scalar() or 0) if count else None
        column = getattr(Product, order_by)
        query = query.order_by(column.asc() if ascending else column.desc())
        items = query.offset((page - 1) * size).limit(size).all()
        return items, total

    def search(self, term: str, limit: int = 6) -> List[Product]:
        like = f"%{term}%"
        return (
            self.db.query(Product)
            .filter(Product.condition == "new")
            .filter(or_(Product.name.ilike(like), Product.brand.ilike(like)))
            .order_by(Product.created_at.desc())
            .limit(limit)
            .all()
        )

    def create(self, values: Dict) -> Product:
        p = Product(**values)
        self.db.add(p)
        self.db.flush()
        return p

    def update(self, product: Product, values: Dict) -> Product:
        for k, v in values.items():
            setattr(product, k, v)
        self.db.flush()
        return product

    def delete(self, product: Product) -> None:
        self.db.delete(product)
        self.db.flush()

    def create_or_update(self, values: Dict) -> Tuple[Product, bool]:
        """
        Upsert keyed by id when given, otherwise by exact name.
        Returns (product, created).
        """
        p = None
        if values.get("id"):
            p = self.get(values["id"])
        elif values.get("name"):
            p = self.db.query(Product).filter(Product.name == values["name"]).first()
        if p:
            return self.update(p, {k: v for k, v in values.items() if k != "id"}), False
        return self.create(values), True
