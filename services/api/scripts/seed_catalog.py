"""Seed the unit catalog, categories and sample ingredients.

Usage (from services/api):
    python scripts/seed_catalog.py

Uses DATABASE_URL from the environment / .env. Safe to re-run.
"""
import logging
import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from larder.db import session_factory
from larder.services.catalog_seed import seed_catalog

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def main():
    db = session_factory()()
    try:
        summary = seed_catalog(db)
        print(
            f"Seeded {summary.units} units, {summary.equivalents} equivalents, "
            f"{summary.categories} categories, {summary.subcategories} subcategories, "
            f"{summary.ingredients} sample ingredients"
        )
    finally:
        db.close()


if __name__ == "__main__":
    main()
