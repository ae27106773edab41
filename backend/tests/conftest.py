import os
import tempfile

import pytest
from sqlalchemy import text

# must be set before storefront.config is imported by any test module
_TMP = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'storefront.db')}"
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("PRODUCT_UPDATE_POLICY", "reset_defaults")

from storefront.db import make_engine  # noqa: E402


@pytest.fixture
def legacy_url(tmp_path):
    """
    A database shaped like an early release: products without the catalogue
    columns, status/condition present but nullable and unconstrained, and a bare
    orders table. Two products have NULL status/condition.
    """
    url = f"sqlite:///{tmp_path / 'legacy.db'}"
    engine = make_engine(url)
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE products ("
            "id VARCHAR(36) PRIMARY KEY, "
            "name VARCHAR(255) NOT NULL, "
            "price NUMERIC NOT NULL, "
            "category VARCHAR(64), "
            "image VARCHAR(512), "
            "status TEXT, "
            "condition TEXT)"
        ))
        conn.execute(text("CREATE TABLE orders (id INTEGER PRIMARY KEY, created_at DATETIME)"))
        conn.execute(text(
            "INSERT INTO products (id, name, price, category, status, condition) VALUES "
            "('p1', 'Old Phone', 100, 'phone', NULL, NULL), "
            "('p2', 'Old Tablet', 200, 'tablet', NULL, 'used'), "
            "('p3', 'Old Laptop', 300, 'laptop', 'inactive', NULL)"
        ))
        conn.execute(text("INSERT INTO orders (id) VALUES (1)"))
    engine.dispose()
    return url


@pytest.fixture
def legacy_engine(legacy_url):
    engine = make_engine(legacy_url)
    yield engine
    engine.dispose()
