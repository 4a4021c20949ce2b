#!/usr/bin/env python3
"""Seed demo category catalog script.

Creates a small shoe catalog with categories, products, options,
attribute values, filters, tags and a viewed-with link so the category
endpoint has something to resolve.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --clear
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from category_api.catalog.models import (
    Attribute,
    Category,
    Filter,
    FilterValue,
    Product,
    ProductAttributeValue,
    ProductGallery,
    ProductOption,
    Tag,
)
from category_api.infrastructure.database import Base, async_session_factory, engine


async def create_tables(clear: bool = False) -> None:
    """Create database tables, dropping them first when ``clear`` is set."""
    async with engine.begin() as conn:
        if clear:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


def build_catalog() -> list:
    """Build the demo catalog objects.

    Returns:
        Root objects to add to a session.
    """
    clothing = Category(name_ua="Одяг", url="clothing")
    shoes = Category(name_ua="Взуття", url="shoes")
    socks = Category(name_ua="Шкарпетки", url="socks")

    color = Attribute(name_ua="Колір")

    sneaker = Product(name_ua="Кросівки Runner", url="runner", main_category=shoes)
    sneaker.attributes = [color]
    sneaker.attribute_values = [ProductAttributeValue(name_ua="red")]
    sneaker.options = [
        ProductOption(name_ua="Червоні 42", type="color", sku="RUN-R-42", price=249900),
        ProductOption(name_ua="Червоні 43", type="size", sku="RUN-R-43", price=249900),
    ]
    sneaker.gallery = [ProductGallery(image="https://cdn.example.com/runner.jpg")]

    boot = Product(name_ua="Черевики Trail", url="trail", main_category=shoes)
    boot.attribute_values = [ProductAttributeValue(name_ua="black")]
    boot.options = [
        ProductOption(name_ua="Чорні 41", type="color", sku="TRL-B-41", price=319900),
    ]

    sock = Product(name_ua="Шкарпетки Basic", url="basic-socks", main_category=socks)
    sock.options = [ProductOption(name_ua="Білі", type="main", sku="SCK-W", price=9900)]

    shoes.products = [sneaker, boot]
    socks.products = [sock]
    shoes.categories_viewed_with = [socks]

    color_filter = Filter(name_ua="Колір", categories=[shoes])
    color_filter.filter_values = [
        FilterValue(name_ua="Червоний", url="red", attribute_value="red"),
        FilterValue(name_ua="Чорний", url="black", attribute_value="black"),
    ]

    tag = Tag(name_ua="Розпродаж", url="sale")
    shoes.tags = [tag]

    return [clothing, shoes, socks, color, color_filter]


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed a demo category catalog",
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Drop and recreate all catalog tables before seeding",
    )

    args = parser.parse_args()

    print("=" * 60)
    print("Category Catalog Seeder")
    print("=" * 60)
    print(f"Clear existing: {args.clear}")
    print()

    print("Creating database tables...")
    await create_tables(clear=args.clear)
    print("Tables ready.")
    print()

    objects = build_catalog()
    async with async_session_factory() as session:
        session.add_all(objects)
        await session.flush()

        shoes = objects[1]
        clothing = objects[0]
        shoes.parent_id = clothing.id
        await session.commit()

    print("  ✓ Categories: clothing > shoes, socks")
    print("  ✓ Try: GET /v1/shoes__color_red")
    print()
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
