import math
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.errors import NOT_FOUND, store_failures
from storefront.db import get_db
from storefront.schemas.product_schema import ProductCreate
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", summary="List products")
def list_products(
    page: int = Query(1),
    page_size: int = Query(12, alias="pageSize"),
    limit: Optional[int] = Query(None),
    order_by: str = Query("created_at", alias="orderBy"),
    ascending: str = Query("false"),
    category: Optional[str] = Query(None),
    categories: Optional[str] = Query(None),
    in_category: Optional[str] = Query(None, alias="inCategory"),
    condition: Optional[str] = Query(None),
    brand: Optional[str] = Query(None),
    brands: Optional[str] = Query(None),
    featured: Optional[str] = Query(None),
    price_gte: Optional[float] = Query(None, alias="priceGte"),
    price_lte: Optional[float] = Query(None, alias="priceLte"),
    keyword: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    fields: Optional[str] = Query(None),
    count: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    params = {
        "category": category,
        "categories": categories,
        "inCategory": in_category,
        "condition": condition,
        "brand": brand,
        "brands": brands,
        "featured": featured,
        "priceGte": price_gte,
        "priceLte": price_lte,
        "keyword": keyword,
        "search": search,
    }
    # limit wins over pageSize when both are given
    page, page_size = max(1, page), max(1, limit or page_size)
    selected = [f.strip() for f in fields.split(",") if f.strip()] if fields else None
    svc = ProductService(db)
    with store_failures("list products"):
        items, total = svc.list(
            params,
            page=page,
            page_size=page_size,
            order_by=order_by,
            ascending=ascending == "true",
            count=count != "null",
        )
        data = [p.to_dict() for p in items]
    if selected:
        data = [{k: row[k] for k in selected if k in row} for row in data]
    return {
        "data": data,
        "count": total,
        "pagination": {
            "page": page,
            "pageSize": page_size,
            "totalPages": math.ceil(total / page_size) if total else None,
        },
    }


@router.post("", summary="Create product", status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    svc = ProductService(db)
    with store_failures("create product"):
        product = svc.create(payload.model_dump(exclude_unset=True))
        return product.to_dict()


@router.get("/search", summary="Quick search by name or brand")
def search_products(q: Optional[str] = Query(None), limit: int = Query(6, ge=1), db: Session = Depends(get_db)):
    svc = ProductService(db)
    with store_failures("search products"):
        products = svc.search(q, limit=limit)
        data = [
            {
                "id": p.id,
                "name": p.name,
                "price": float(p.price),
                "image": p.image,
                "category": p.category,
            }
            for p in products
        ]
    return {"data": data}


@router.get("/{product_id}", summary="Get product")
def get_product(product_id: str, db: Session = Depends(get_db)):
    svc = ProductService(db)
    with store_failures("read product"):
        product = svc.get(product_id)
        body = product.to_dict() if product is not None else None
    if body is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return body


@router.put("/{product_id}", summary="Update product")
def update_product(product_id: str, payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    # validated by the service after the lookup, so an unknown id is always a 404
    svc = ProductService(db)
    with store_failures("update product"):
        product = svc.update(product_id, payload)
        body = product.to_dict() if product is not None else None
    if body is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return body


@router.delete("/{product_id}", summary="Delete product")
def delete_product(product_id: str, db: Session = Depends(get_db)):
    svc = ProductService(db)
    with store_failures("delete product"):
        deleted = svc.delete(product_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Product deleted successfully"}
