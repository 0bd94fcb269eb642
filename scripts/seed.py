"""
Demo Data Seeder

Creates a caterer, a restaurant, their menus (scheduled for the next week)
and a few restaurant tables in the configured database.
Run from project root: python scripts/seed.py
"""

import argparse
import asyncio
import os
import sys

from sqlalchemy import delete

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from orderflow.core import dates
from orderflow.core.config import get_logger, setup_logging
from orderflow.database import engine, init_db, session_scope
from orderflow.models import MenuItem, Order, RestaurantTable, Seller
from orderflow.schemas import SellerType
from orderflow.services.tables import build_table_payload

logger = get_logger("orderflow.seed")

CATERER_MENU = [
    ("Paneer Thali", 120.0, "veg", "North Indian", "lunch"),
    ("Chicken Biryani", 180.0, "non-veg", "Hyderabadi", "lunch"),
    ("Masala Dosa", 70.0, "veg", "South Indian", "breakfast"),
    ("Poha", 40.0, "veg", "Maharashtrian", "breakfast"),
    ("Dal Khichdi", 90.0, "veg", "Gujarati", "dinner"),
]

RESTAURANT_MENU = [
    ("Butter Chicken", 260.0, "non-veg", "Punjabi", "dinner"),
    ("Veg Hakka Noodles", 150.0, "veg", "Indo-Chinese", "dinner"),
    ("Gulab Jamun", 60.0, "veg", "Dessert", "snacks"),
]


async def seed(days: int, reset: bool) -> None:
    await init_db()
    schedule = [dates.days_from_today(i) for i in range(days)]

    if reset:
        async with session_scope() as db:
            for model in (Order, RestaurantTable, MenuItem, Seller):
                await db.execute(delete(model))
        logger.info("Existing demo data removed")

    async with session_scope() as db:
        caterer = Seller(
            name="Annapurna Kitchen",
            service_name="Annapurna Tiffins",
            seller_type=SellerType.CATERER,
            address="12 MG Road, Pune",
            payment_address="annapurna@upi",
        )
        restaurant = Seller(
            name="Spice Route",
            seller_type=SellerType.RESTAURANT,
            address="4 FC Road, Pune",
            payment_address=None,
        )
        db.add_all([caterer, restaurant])
        await db.flush()

        for seller, menu in ((caterer, CATERER_MENU), (restaurant, RESTAURANT_MENU)):
            for name, price, category, cuisine, meal_type in menu:
                db.add(MenuItem(
                    seller_id=seller.id,
                    name=name,
                    price=price,
                    category=category,
                    cuisine=cuisine,
                    meal_type=meal_type,
                    available_dates=schedule,
                    in_stock=True,
                ))

        for label in ("T1", "T2", "T3"):
            db.add(RestaurantTable(
                seller_id=restaurant.id,
                table_number=label,
                qr_data=build_table_payload(restaurant.id, label, restaurant.name),
                is_active=True,
            ))

        await db.flush()
        logger.info(
            f"Seeded caterer #{caterer.id} and restaurant #{restaurant.id} "
            f"with menus for {schedule[0]} .. {schedule[-1]}"
        )

    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo sellers, menus and tables")
    parser.add_argument("--days", type=int, default=7, help="Days of menu availability")
    parser.add_argument("--reset", action="store_true", help="Delete existing data first")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(seed(days=max(args.days, 1), reset=args.reset))
