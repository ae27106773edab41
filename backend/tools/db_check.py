import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sqlalchemy import inspect, text

from storefront.config import settings
from storefront.db import make_engine

DB = sys.argv[1] if len(sys.argv) > 1 else settings.DATABASE_URL
PRODUCT_ID = sys.argv[2] if len(sys.argv) > 2 else None

engine = make_engine(DB)

with engine.connect() as conn:
    insp = inspect(conn)
    tables = insp.get_table_names()

    for table in ("products", "orders"):
        if table not in tables:
            print(f"=== {table}: MISSING ===")
            continue
        cols = [c["name"] for c in insp.get_columns(table)]
        checks = [c.get("name") for c in insp.get_check_constraints(table)]
        print(f"=== {table} columns ===")
        print(cols)
        if checks:
            print(f"check constraints: {checks}")

    if "products" in tables:
        print("\n=== Recent Products ===")
        if PRODUCT_ID:
            rows = conn.execute(
                text("SELECT id, name, price, category, stock, status, condition FROM products WHERE id = :id"),
                {"id": PRODUCT_ID},
            )
        else:
            rows = conn.execute(
                text("SELECT id, name, price, category, stock, status, condition FROM products ORDER BY created_at DESC LIMIT 20")
            )
        for r in rows:
            print(dict(r._mapping))

    if "orders" in tables:
        print("\n=== Recent Orders ===")
        for r in conn.execute(
            text("SELECT id, order_number, status, payment_status, created_at FROM orders ORDER BY created_at DESC LIMIT 20")
        ):
            print(tuple(r))

engine.dispose()
