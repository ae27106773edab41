from typing import Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.models.product import CATEGORY_ALL, Product
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product_schema import ProductUpdate
from storefront.services.update_policy import (
    LastWriteWins,
    ResetDefaultsPolicy,
    UpdatePolicy,
    VersionCheck,
    get_update_policy,
)
from storefront.utils.log import get_logger
from storefront.utils.transactions import smart_transaction

log = get_logger("products")

SORTABLE_COLUMNS = ("created_at", "updated_at", "name", "price", "stock", "discount", "view_count")


def expand_category_variants(categories: List[str]) -> List[str]:
    """"phone" -> ["phone", "phones"], "phones" -> ["phones", "phone"]."""
    result = []
    for cat in categories:
        lower = str(cat or "").lower().strip()
        if not lower:
            continue
        variant = lower[:-1] if lower.endswith("s") else lower + "s"
        for v in (lower, variant):
            if v not in result:
                result.append(v)
    return result


def _split(value) -> List[str]:
    return [v.strip() for v in str(value).split(",") if v.strip()]


def build_product_filters(params: Dict) -> List:
    """Translate catalogue query parameters into SQLAlchemy filter clauses."""
    filters = []

    if params.get("condition"):
        filters.append(Product.condition == params["condition"])

    category = params.get("category")
    if category and category != CATEGORY_ALL:
        filters.append(Product.category.in_(expand_category_variants([category])))
    elif params.get("categories"):
        filters.append(Product.category.in_(expand_category_variants(_split(params["categories"]))))
    elif params.get("inCategory"):
        filters.append(Product.category.in_(expand_category_variants(_split(params["inCategory"]))))

    brand = params.get("brand")
    if brand and brand != CATEGORY_ALL:
        filters.append(Product.brand == brand)
    elif params.get("brands"):
        filters.append(Product.brand.in_(_split(params["brands"])))

    if params.get("featured") == "true":
        filters.append(Product.featured.is_(True))

    if params.get("priceGte") is not None:
        filters.append(Product.price >= params["priceGte"])
    if params.get("priceLte") is not None:
        filters.append(Product.price <= params["priceLte"])

    keyword = (params.get("search") or params.get("keyword") or "").strip()
    if keyword:
        like = f"%{keyword}%"
        filters.append(
            or_(Product.name.ilike(like), Product.description.ilike(like), Product.brand.ilike(like))
        )
    return filters


class ProductService:
    def __init__(
        self,
        db: Session,
        policy: Optional[UpdatePolicy] = None,
        version_check: Optional[VersionCheck] = None,
    ):
        self.db = db
        self.repo = ProductRepository(db)
        self.policy = policy or get_update_policy(settings.PRODUCT_UPDATE_POLICY)
        self.version_check = version_check or LastWriteWins()

    def get(self, product_id: str) -> Optional[Product]:
        return self.repo.get(product_id)

    def list(
        self,
        params: Dict,
        page: int = 1,
        page_size: int = 12,
        order_by: str = "created_at",
        ascending: bool = False,
        count: bool = True,
    ) -> Tuple[List[Product], Optional[int]]:
        if order_by not in SORTABLE_COLUMNS:
            order_by = "created_at"
        return self.repo.list(
            filters=build_product_filters(params),
            page=max(1, page),
            size=max(1, page_size),
            order_by=order_by,
            ascending=ascending,
            count=count,
        )

    def search(self, term: str, limit: int = 6) -> List[Product]:
        term = (term or "").strip()
        if not term:
            return []
        return self.repo.search(term, limit=limit)

    def create(self, payload: Dict) -> Product:
        log.info(f"Creating product: data={payload}")
        # new rows always get the full set of defaults, whatever the update policy
        values = ResetDefaultsPolicy().changes(payload)
        with smart_transaction(self.db):
            product = self.repo.create(values)
        log.info(f"Create success: id={product.id}")
        return product

    def update(self, product_id: str, payload: Dict) -> Optional[Product]:
        """
        Apply `payload` to the product through the configured update policy.
        Returns None when no product has `product_id`; the payload is only
        validated once the product is known to exist.
        """
        log.info(f"Updating product: id={product_id} data={payload}")
        with smart_transaction(self.db):
            product = self.repo.get(product_id)
            if product is None:
                return None
            values = ProductUpdate.model_validate(payload).model_dump(exclude_unset=True)
            self.version_check.check(product, values)
            self.repo.update(product, self.policy.changes(values))
        log.info(f"Update success: id={product.id}")
        return product

    def delete(self, product_id: str) -> bool:
        log.info(f"Deleting product: id={product_id}")
        with smart_transaction(self.db):
            product = self.repo.get(product_id)
            if product is None:
                return False
            self.repo.delete(product)
        log.info(f"Delete success: id={product_id}")
        return True
