#!/usr/bin/env python3
"""
Seed catalog items from a JSON file.

Accepts either a list of entries or an object with an "items" list. Prices
may be given as price_cents or as a decimal "price".

Usage:
    python scripts/seed_products.py --file catalogue.json
"""
import argparse
import json
import logging
import os
import sys
from decimal import Decimal, InvalidOperation

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from swiftshop.config import settings
from swiftshop.db import SessionLocal, init_db
from swiftshop.repositories.item_repo import ItemRepository
from swiftshop.utils.log import configure_logging

log = logging.getLogger("swiftshop.seed")

DEMO_ITEMS = [
    {"sku": "TEA-100", "name": "Tea 100g", "price_cents": 300, "stock": 25, "description": "Loose leaf tea"},
    {"sku": "COF-200", "name": "Coffee 200g", "price_cents": 600, "stock": 10, "description": "Ground coffee"},
    {"sku": "MUG-01", "name": "Mug", "price_cents": 850, "stock": 5, "description": "Ceramic mug"},
]


def _to_cents(value) -> int:
    try:
        return int((Decimal(str(value)) * 100).quantize(Decimal("1")))
    except (InvalidOperation, ValueError):
        return 0


def _normalize_entry(entry):
    """Return a dict with keys: sku, name, price_cents, stock, description"""
    sku = entry.get("sku") or entry.get("id")
    if entry.get("price_cents") is not None:
        price_cents = int(entry["price_cents"])
    else:
        price_cents = _to_cents(entry.get("price", 0))
    try:
        stock = max(0, int(entry.get("stock", entry.get("quantity", 0)) or 0))
    except (TypeError, ValueError):
        stock = 0
    return {
        "sku": sku,
        "name": entry.get("name") or entry.get("title") or sku,
        "price_cents": max(0, price_cents),
        "stock": stock,
        "description": entry.get("description") or None,
    }


def load_entries(path):
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("items", list(data.values()))
    return [_normalize_entry(e) for e in data if isinstance(e, dict)]


def seed(entries) -> int:
    init_db()
    db = SessionLocal()
    repo = ItemRepository(db)
    created = 0
    try:
        for entry in entries:
            if not entry.get("sku"):
                continue
            repo.create_or_update(**entry)
            created += 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    return created


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", default=None, help="Path to a JSON list of catalog entries")
    args = parser.parse_args()
    if args.file:
        if not os.path.exists(args.file):
            log.error("File not found: %s", args.file)
            sys.exit(1)
        entries = load_entries(args.file)
    else:
        entries = [_normalize_entry(e) for e in DEMO_ITEMS]
    log.info("Seeded items: %d", seed(entries))
