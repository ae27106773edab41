#!/usr/bin/env python3
"""
Seed products from a JSON catalogue file.
Accepts either a list of product objects or an object with an "items"/"data" list,
and is lenient about a few field spellings (title/name, images[0]/image, ...).
Re-running the script updates existing products instead of duplicating them.

Usage:
    python scripts/seed_products.py --file ../public/mock/catalogue.json
"""
import json
import argparse
import sys
import os

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from storefront.db import SessionLocal, init_db
from storefront.models.product import CATEGORIES, CONDITIONS, STATUSES
from storefront.repositories.product_repo import ProductRepository
from storefront.services.product_service import expand_category_variants

DEFAULT_SOURCE = os.path.join(os.path.dirname(__file__), "..", "public", "mock", "catalogue.json")


def _to_number(value, default=0):
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _normalize_category(raw):
    """Map "Phones", "tablets", ... onto a stored category; unknown values become None."""
    for variant in expand_category_variants([raw]) if raw else []:
        if variant in CATEGORIES:
            return variant
    return None


def _normalize_entry(entry):
    """Return a dict of Product column values, or None when the entry has no name."""
    name = (entry.get("name") or entry.get("title") or "").strip()
    if not name:
        return None

    image = entry.get("image")
    if not image:
        imgs = entry.get("images") or entry.get("image_urls") or []
        image = imgs[0] if isinstance(imgs, (list, tuple)) and len(imgs) > 0 else None

    specs = entry.get("specifications")
    if isinstance(specs, (dict, list)):
        specs = json.dumps(specs, ensure_ascii=False)

    status = entry.get("status") if entry.get("status") in STATUSES else "active"
    condition = entry.get("condition") if entry.get("condition") in CONDITIONS else "new"

    values = {
        "name": name,
        "description": entry.get("description") or None,
        "price": max(0, _to_number(entry.get("price", entry.get("amount")))),
        "category": _normalize_category(entry.get("category")),
        "stock": max(0, int(_to_number(entry.get("stock", entry.get("quantity"))))),
        "image": image,
        "brand": entry.get("brand") or None,
        "specifications": specs,
        "discount": max(0, _to_number(entry.get("discount"))),
        "featured": bool(entry.get("featured", False)),
        "status": status,
        "condition": condition,
    }
    if entry.get("id"):
        values["id"] = str(entry["id"])
    return values


def load_entries(path: str):
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise RuntimeError(f"Failed to parse JSON from {path}: {e}")

    if isinstance(data, dict):
        for key in ("items", "data", "products"):
            if isinstance(data.get(key), list):
                return data[key]
        return list(data.values())
    if isinstance(data, list):
        return data
    return []


def seed_from_file(path: str):
    if not os.path.exists(path):
        raise FileNotFoundError(path)

    normalized = [v for v in (_normalize_entry(e) for e in load_entries(path) if isinstance(e, dict)) if v]

    init_db(reset=False)
    db = SessionLocal()
    repo = ProductRepository(db)
    created = updated = 0
    try:
        for values in normalized:
            _, was_created = repo.create_or_update(values)
            if was_created:
                created += 1
            else:
                updated += 1
        db.commit()
        print(f"Seeded products: created={created} updated={updated}")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    return created, updated


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", default=DEFAULT_SOURCE, help="Path to a product catalogue JSON file")
    args = parser.parse_args()
    if not os.path.exists(args.file):
        print("File not found:", args.file)
        sys.exit(1)
    seed_from_file(args.file)
